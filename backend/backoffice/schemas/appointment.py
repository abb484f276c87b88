"""Appointment schemas, including the availability pre-check response."""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from backoffice.schemas.client import ClientSummary
from backoffice.schemas.common import PartialUpdate, UtcDatetime
from backoffice.schemas.service import ServiceSummary

AppointmentStatus = Literal["pending", "confirmed", "cancelled"]


class AppointmentCreate(BaseModel):
    client_id: uuid.UUID
    service_id: uuid.UUID
    start_time: UtcDatetime
    end_time: UtcDatetime
    status: AppointmentStatus = "pending"
    notes: Optional[str] = None


class AppointmentUpdate(PartialUpdate):
    required_fields = ("client_id", "service_id", "start_time", "end_time", "status")

    client_id: Optional[uuid.UUID] = None
    service_id: Optional[uuid.UUID] = None
    start_time: Optional[UtcDatetime] = None
    end_time: Optional[UtcDatetime] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    client_id: uuid.UUID
    service_id: uuid.UUID
    start_time: UtcDatetime
    end_time: UtcDatetime
    status: str
    notes: Optional[str] = None
    created_at: datetime
    client: Optional[ClientSummary] = None
    service: Optional[ServiceSummary] = None
    owner_email: Optional[str] = None

    model_config = {"from_attributes": True}


class AvailabilityResponse(BaseModel):
    """Result of the conflict pre-check for a candidate interval."""
    available: bool
    conflicts: List[uuid.UUID] = Field(
        default_factory=list, description="Ids of the appointments the interval overlaps"
    )
