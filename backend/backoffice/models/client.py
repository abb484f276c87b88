"""
Back-Office Backend: Client Model
===================================

A customer record of one business owner. Visible to its owner always and,
read-only, to admins across all owners.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.database import Base
from backoffice.models.user import User, utcnow


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    last_interaction: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # selectin: admin listings show the owner's email next to each row
    owner: Mapped[User] = relationship(lazy="selectin")

    __table_args__ = (
        Index("idx_clients_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name='{self.name}', user_id={self.user_id})>"
