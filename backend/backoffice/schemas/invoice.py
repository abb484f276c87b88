"""Invoice schemas."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import PartialUpdate

InvoiceStatus = Literal["pending", "paid", "cancelled", "overdue"]


class InvoiceClientSummary(BaseModel):
    name: str
    email: str

    model_config = {"from_attributes": True}


class InvoiceCreate(BaseModel):
    client_id: uuid.UUID
    appointment_id: Optional[uuid.UUID] = None
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    status: InvoiceStatus = "pending"
    due_date: Optional[date] = None
    notes: Optional[str] = None


class InvoiceUpdate(PartialUpdate):
    """paid_date is not accepted: it follows the status."""
    required_fields = ("client_id", "amount", "status")

    client_id: Optional[uuid.UUID] = None
    appointment_id: Optional[uuid.UUID] = None
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    status: Optional[InvoiceStatus] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None


class InvoiceResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    client_id: uuid.UUID
    appointment_id: Optional[uuid.UUID] = None
    amount: Decimal
    status: str
    due_date: Optional[date] = None
    paid_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    client: Optional[InvoiceClientSummary] = None
    owner_email: Optional[str] = None

    model_config = {"from_attributes": True}
