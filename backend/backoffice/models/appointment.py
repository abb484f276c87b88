"""
Back-Office Backend: Appointment Model
========================================

What:  A booked time slot `[start_time, end_time)` of one owner with one
       client for one service.

Overlap invariant:
    For a given owner no two non-cancelled appointments may overlap.
    The service layer pre-checks this (backoffice.services.scheduling);
    PostgreSQL enforces it with the exclusion constraint created in
    migration 001:

        EXCLUDE USING gist (
            user_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        ) WHERE (status <> 'cancelled')

    The constraint is declared only in the migration because SQLite (used
    by the test suite) has no equivalent.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.database import Base
from backoffice.models.client import Client
from backoffice.models.service import Service
from backoffice.models.user import User, utcnow

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
APPOINTMENT_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED)

# Name of the PostgreSQL exclusion constraint, matched when translating
# IntegrityError into ConflictError.
OVERLAP_CONSTRAINT = "ex_appointments_no_overlap"


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("services.id", ondelete="CASCADE"), nullable=False
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=STATUS_PENDING)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    owner: Mapped[User] = relationship(lazy="selectin")
    client: Mapped[Client] = relationship(lazy="selectin")
    service: Mapped[Service] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_appointments_interval"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')",
            name="ck_appointments_status",
        ),
        Index("idx_appointments_user_start", "user_id", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, start='{self.start_time}', "
            f"end='{self.end_time}', status='{self.status}')>"
        )
