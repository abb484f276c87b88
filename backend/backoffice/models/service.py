"""
Back-Office Backend: Service Model
====================================

An offering in an owner's catalog (e.g. "Haircut, 45 min, 30.00").
The duration pre-fills the appointment length in the scheduling form.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.database import Base
from backoffice.models.user import User, utcnow


class Service(Base):
    __tablename__ = "services"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    owner: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("duration > 0", name="ck_services_duration_positive"),
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
        Index("idx_services_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name='{self.name}', duration={self.duration})>"
