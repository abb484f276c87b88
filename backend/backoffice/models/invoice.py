"""
Back-Office Backend: Invoice Model
====================================

Status lifecycle:
    pending → paid | cancelled | overdue, and back again by explicit edit.
    `paid_date` is non-null exactly while status == 'paid'; the invoice
    service maintains this on every status change.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.database import Base
from backoffice.models.client import Client
from backoffice.models.user import User, utcnow

STATUS_PENDING = "pending"
STATUS_PAID = "paid"
STATUS_CANCELLED = "cancelled"
STATUS_OVERDUE = "overdue"
INVOICE_STATUSES = (STATUS_PENDING, STATUS_PAID, STATUS_CANCELLED, STATUS_OVERDUE)


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    appointment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("appointments.id", ondelete="SET NULL")
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=STATUS_PENDING)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    owner: Mapped[User] = relationship(lazy="selectin")
    client: Mapped[Client] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled', 'overdue')",
            name="ck_invoices_status",
        ),
        CheckConstraint(
            "(status = 'paid') = (paid_date IS NOT NULL)",
            name="ck_invoices_paid_date",
        ),
        Index("idx_invoices_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, amount={self.amount}, status='{self.status}')>"
