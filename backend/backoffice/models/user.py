"""
Back-Office Backend: Account, Role, Profile and Audit Models
==============================================================

What:  The authentication record (`users`), its role grant (`user_roles`),
       the optional business profile (`user_profiles`) and the append-only
       admin audit log (`admin_actions`).
Why:   These four tables make up a principal: who they are, what they may
       see, and what privileged operations have been performed on them.

Role model:
    At most one `user_roles` row per account (unique user_id). No row means
    the account holds the implicit `user` role. `admin` is the only role
    with cross-tenant visibility.

Audit model:
    `admin_actions` rows reference admins and targets by plain UUID columns
    without foreign keys, so the audit trail survives deletion of the very
    user it describes. Rows are inserted only; never updated or deleted.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

ACTION_UPDATE_ROLE = "update_role"
ACTION_ASSIGN_ROLE = "assign_role"
ACTION_DELETE_USER = "delete_user"
ACTION_TYPES = (ACTION_UPDATE_ROLE, ACTION_ASSIGN_ROLE, ACTION_DELETE_USER)

COMPANY_TYPES = ("individual", "company")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """The account / authentication record. Deleted last by the cascade."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class UserRole(Base):
    """Explicit role grant for an account; absence means `user`."""

    __tablename__ = "user_roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, unique=True
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False, default=ROLE_USER)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_user_roles_role"),
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role='{self.role}')>"


class UserProfile(Base):
    """
    Business details printed on invoices (company name, tax number, bank account).

    Optional: accounts that never opened the settings page have no row,
    which is why the cascading deletion tolerates a failure on this step.
    """

    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, unique=True
    )
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    company_name: Mapped[Optional[str]] = mapped_column(String(255))
    company_type: Mapped[Optional[str]] = mapped_column(String(50))
    address: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    postal_code: Mapped[Optional[str]] = mapped_column(String(20))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    # Company-only fields
    tax_number: Mapped[Optional[str]] = mapped_column(String(50))
    registration_number: Mapped[Optional[str]] = mapped_column(String(50))
    bank_account: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class AdminAction(Base):
    """Append-only audit entry for a privileged operation."""

    __tablename__ = "admin_actions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    admin_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        CheckConstraint(
            "action_type IN ('update_role', 'assign_role', 'delete_user')",
            name="ck_admin_actions_action_type",
        ),
        Index("idx_admin_actions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<AdminAction(action_type='{self.action_type}', "
            f"admin_id={self.admin_id}, target_user_id={self.target_user_id})>"
        )
