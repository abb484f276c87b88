"""Initial back-office schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates accounts, roles, profiles, the admin audit log, and the
       owned business tables (clients, services, appointments, invoices).
How:   PostgreSQL-specific: UUID keys with gen_random_uuid(), TIMESTAMPTZ,
       and a btree_gist exclusion constraint that forbids overlapping
       non-cancelled appointments for the same owner.

Foreign keys:
    Owned tables reference users.id WITHOUT cascade; deleting a user is an
    explicit multi-step workflow in the admin service. Between owned tables,
    deleting a client or service cascades to its appointments and invoices,
    and deleting an appointment detaches its invoices (SET NULL).
    admin_actions has no foreign keys so audit rows outlive their subjects.

Rollback: downgrade() drops everything (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _owner() -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id"),
        nullable=False,
        comment="Owning account",
    )


def upgrade() -> None:
    # Needed for `user_id WITH =` inside a GiST exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # ── Accounts and roles ────────────────────────────────────────────────
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "user_roles",
        _id(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'user'"),
            comment="user or admin; no row means user",
        ),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_user_roles_user_id"),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_user_roles_role"),
    )

    op.create_table(
        "user_profiles",
        _id(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("full_name", sa.String(255)),
        sa.Column("company_name", sa.String(255)),
        sa.Column("company_type", sa.String(50), comment="individual or company"),
        sa.Column("address", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("postal_code", sa.String(20)),
        sa.Column("country", sa.String(100)),
        sa.Column("phone", sa.String(50)),
        sa.Column("email", sa.String(255)),
        sa.Column("tax_number", sa.String(50)),
        sa.Column("registration_number", sa.String(50)),
        sa.Column("bank_account", sa.String(100)),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_user_profiles_user_id"),
    )

    op.create_table(
        "admin_actions",
        _id(),
        sa.Column("admin_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("notes", sa.Text()),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "action_type IN ('update_role', 'assign_role', 'delete_user')",
            name="ck_admin_actions_action_type",
        ),
    )
    op.create_index(
        "idx_admin_actions_created_at", "admin_actions", [sa.text("created_at DESC")]
    )

    # ── Owned business tables ─────────────────────────────────────────────
    op.create_table(
        "clients",
        _id(),
        _owner(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("last_interaction", sa.TIMESTAMP(timezone=True)),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_clients_user_id", "clients", ["user_id"])

    op.create_table(
        "services",
        _id(),
        _owner(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("duration", sa.Integer(), nullable=False, comment="Minutes"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("duration > 0", name="ck_services_duration_positive"),
        sa.CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
    )
    op.create_index("idx_services_user_id", "services", ["user_id"])

    op.create_table(
        "appointments",
        _id(),
        _owner(),
        sa.Column(
            "client_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "service_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("services.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_time", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_time", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "status", sa.String(50), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("notes", sa.Text()),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_time > start_time", name="ck_appointments_interval"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="ck_appointments_status"
        ),
    )
    op.create_index("idx_appointments_user_start", "appointments", ["user_id", "start_time"])

    # Half-open [start, end) ranges: back-to-back bookings are allowed
    op.execute(
        """
        ALTER TABLE appointments
        ADD CONSTRAINT ex_appointments_no_overlap
        EXCLUDE USING gist (
            user_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status <> 'cancelled')
        """
    )

    op.create_table(
        "invoices",
        _id(),
        _owner(),
        sa.Column(
            "client_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "appointment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("appointments.id", ondelete="SET NULL"),
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "status", sa.String(50), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("due_date", sa.Date()),
        sa.Column("paid_date", sa.TIMESTAMP(timezone=True)),
        sa.Column("notes", sa.Text()),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
        sa.CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled', 'overdue')", name="ck_invoices_status"
        ),
        sa.CheckConstraint(
            "(status = 'paid') = (paid_date IS NOT NULL)", name="ck_invoices_paid_date"
        ),
    )
    op.create_index("idx_invoices_user_id", "invoices", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_invoices_user_id", table_name="invoices")
    op.drop_table("invoices")
    op.execute("ALTER TABLE appointments DROP CONSTRAINT IF EXISTS ex_appointments_no_overlap")
    op.drop_index("idx_appointments_user_start", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("idx_services_user_id", table_name="services")
    op.drop_table("services")
    op.drop_index("idx_clients_user_id", table_name="clients")
    op.drop_table("clients")
    op.drop_index("idx_admin_actions_created_at", table_name="admin_actions")
    op.drop_table("admin_actions")
    op.drop_table("user_profiles")
    op.drop_table("user_roles")
    op.drop_table("users")
