"""Client record schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import PartialUpdate, UtcDatetime


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    notes: Optional[str] = None
    last_interaction: Optional[UtcDatetime] = None


class ClientUpdate(PartialUpdate):
    required_fields = ("name", "email", "phone")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=50)
    notes: Optional[str] = None
    last_interaction: Optional[UtcDatetime] = None


class ClientResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    email: str
    phone: str
    notes: Optional[str] = None
    last_interaction: Optional[datetime] = None
    created_at: datetime
    owner_email: Optional[str] = Field(
        default=None, description="Owning account's email; populated for admins only"
    )

    model_config = {"from_attributes": True}


class ClientSummary(BaseModel):
    """Client fields embedded in appointment and invoice responses."""
    name: str
    email: str
    phone: str

    model_config = {"from_attributes": True}
