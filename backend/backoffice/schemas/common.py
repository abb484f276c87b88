"""
Back-Office Backend: Shared Schemas
=====================================

Error envelope, health check response, and the UTC datetime type used by
every request model that accepts timestamps.
"""

from datetime import datetime
from typing import Annotated, ClassVar, Optional, Tuple

from pydantic import AfterValidator, BaseModel, Field, model_validator

from backoffice.services.scheduling import as_utc

# Naive timestamps from clients are read as UTC; aware ones are converted
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "conflict",
            "message": "The selected time slot is not available",
            "details": {"conflicting_ids": ["2b0c..."]},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Plain success/failure acknowledgement with a human-readable message."""
    success: bool = Field(default=True)
    message: str


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class PartialUpdate(BaseModel):
    """
    Base for PATCH bodies: only fields present in the request are applied.

    Columns listed in `required_fields` are NOT NULL in the database, so an
    explicit null for them is rejected here (422) instead of failing at flush.
    """
    required_fields: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.required_fields:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
