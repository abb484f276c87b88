"""Service catalog schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from backoffice.schemas.common import PartialUpdate


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    duration: int = Field(gt=0, le=24 * 60, description="Length in minutes")
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class ServiceUpdate(PartialUpdate):
    required_fields = ("name", "duration", "price")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    duration: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)


class ServiceResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: Optional[str] = None
    duration: int
    price: Decimal
    created_at: datetime
    owner_email: Optional[str] = None

    model_config = {"from_attributes": True}


class ServiceSummary(BaseModel):
    name: str
    price: Decimal
    duration: int

    model_config = {"from_attributes": True}
