"""
Back-Office Backend: Appointment Service
==========================================

What:  Appointment CRUD with the scheduling conflict pre-check.
Who:   Called by /api/appointments route handlers.

Write path:
    ┌──────────┐   ┌──────────────┐   ┌───────────────┐   ┌──────────────┐
    │ Validate │──▶│ Resolve refs │──▶│ Conflict pre- │──▶│ Flush (DB    │
    │ interval │   │ (own client, │   │ check against │   │ exclusion    │
    │          │   │  own service)│   │ owner's slots │   │ constraint)  │
    └──────────┘   └──────────────┘   └───────────────┘   └──────────────┘

    The pre-check produces a ConflictError naming the colliding appointments.
    If a concurrent request slips a booking in between the pre-check and the
    flush, PostgreSQL's exclusion constraint rejects the write and the
    IntegrityError is translated into the same ConflictError.

Edit path:
    Re-checks only when start/end change or a cancelled appointment is
    reactivated, always excluding the appointment's own id.
"""

import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import asc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.config import settings
from backoffice.exceptions import ConflictError, DatabaseError
from backoffice.models.appointment import OVERLAP_CONSTRAINT, STATUS_CANCELLED, Appointment
from backoffice.models.client import Client
from backoffice.models.service import Service
from backoffice.schemas.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    AvailabilityResponse,
)
from backoffice.services.access import (
    Principal,
    get_readable,
    get_writable,
    owner_email_for,
    readable,
)
from backoffice.services.scheduling import (
    as_utc,
    ensure_time_slot_available,
    find_conflicts,
    validate_interval,
)

logger = logging.getLogger(__name__)


def to_response(appointment: Appointment, principal: Principal) -> AppointmentResponse:
    response = AppointmentResponse.model_validate(appointment)
    response.owner_email = owner_email_for(appointment, principal)
    return response


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class AppointmentService:

    async def _owner_slots(
        self, db: AsyncSession, owner_id: uuid.UUID, start: datetime, end: datetime
    ) -> List[Appointment]:
        """
        The owner's appointments that could collide with [start, end).

        The SQL window only narrows the candidate set; find_conflicts makes
        the actual decision.
        """
        result = await db.execute(
            select(Appointment).where(
                Appointment.user_id == owner_id,
                Appointment.start_time < as_utc(end),
                Appointment.end_time > as_utc(start),
            )
        )
        return list(result.scalars().all())

    async def _ensure_available(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        validate_interval(start, end)
        slots = await self._owner_slots(db, owner_id, start, end)
        ensure_time_slot_available(
            start, end, slots,
            exclude_id=exclude_id,
            ignore_cancelled=settings.scheduling_ignore_cancelled,
        )

    async def _flush(self, db: AsyncSession) -> None:
        """Flushes pending writes, mapping an exclusion-constraint hit to ConflictError."""
        try:
            await db.flush()
        except IntegrityError as e:
            if OVERLAP_CONSTRAINT in str(e.orig):
                logger.warning("Overlapping appointment rejected by database constraint")
                raise ConflictError(
                    message="The selected time slot was just booked. Please pick another time."
                )
            logger.error("Integrity error saving appointment: %s", str(e))
            raise DatabaseError(
                message="Could not save the appointment. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_appointments(
        self,
        db: AsyncSession,
        principal: Principal,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[AppointmentResponse]:
        """
        Visible appointments ordered by start time.

        start_date / end_date are whole UTC days, both inclusive, matched
        against start_time.
        """
        query = readable(select(Appointment), Appointment, principal)
        if start_date:
            query = query.where(Appointment.start_time >= day_start(start_date))
        if end_date:
            query = query.where(Appointment.start_time < day_start(end_date + timedelta(days=1)))
        try:
            result = await db.execute(query.order_by(asc(Appointment.start_time)))
            appointments = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing appointments: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve appointments. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [to_response(appointment, principal) for appointment in appointments]

    async def get_appointment(
        self, db: AsyncSession, principal: Principal, appointment_id: uuid.UUID
    ) -> AppointmentResponse:
        appointment = await get_readable(db, Appointment, appointment_id, principal, "appointment")
        return to_response(appointment, principal)

    async def check_availability(
        self,
        db: AsyncSession,
        principal: Principal,
        start: datetime,
        end: datetime,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> AvailabilityResponse:
        """Fast-feedback pre-check against the caller's own appointments."""
        validate_interval(start, end)
        slots = await self._owner_slots(db, principal.user_id, start, end)
        conflicts = find_conflicts(
            start, end, slots,
            exclude_id=exclude_id,
            ignore_cancelled=settings.scheduling_ignore_cancelled,
        )
        return AvailabilityResponse(
            available=not conflicts,
            conflicts=[appointment.id for appointment in conflicts],
        )

    async def create_appointment(
        self, db: AsyncSession, principal: Principal, data: AppointmentCreate
    ) -> AppointmentResponse:
        """
        Books a new appointment for the caller.

        Raises:
            ValidationError: end_time <= start_time
            NotFoundError:   client or service is not one of the caller's own
            ConflictError:   the interval overlaps an existing appointment
        """
        validate_interval(data.start_time, data.end_time)
        await get_writable(db, Client, data.client_id, principal, "client")
        await get_writable(db, Service, data.service_id, principal, "service")
        await self._ensure_available(db, principal.user_id, data.start_time, data.end_time)

        appointment = Appointment(user_id=principal.user_id, **data.model_dump())
        db.add(appointment)
        await self._flush(db)
        await db.refresh(appointment)
        logger.info(
            "Appointment %s booked by %s: %s - %s",
            appointment.id, principal.user_id, data.start_time, data.end_time,
        )
        return to_response(appointment, principal)

    async def update_appointment(
        self,
        db: AsyncSession,
        principal: Principal,
        appointment_id: uuid.UUID,
        data: AppointmentUpdate,
    ) -> AppointmentResponse:
        appointment = await get_writable(db, Appointment, appointment_id, principal, "appointment")
        changes = data.changes()

        if "client_id" in changes:
            await get_writable(db, Client, changes["client_id"], principal, "client")
        if "service_id" in changes:
            await get_writable(db, Service, changes["service_id"], principal, "service")

        start = changes.get("start_time", appointment.start_time)
        end = changes.get("end_time", appointment.end_time)
        time_changed = "start_time" in changes or "end_time" in changes
        reactivated = (
            appointment.status == STATUS_CANCELLED
            and changes.get("status", STATUS_CANCELLED) != STATUS_CANCELLED
        )
        if time_changed or reactivated:
            await self._ensure_available(
                db, appointment.user_id, start, end, exclude_id=appointment.id
            )

        for key, value in changes.items():
            setattr(appointment, key, value)
        await self._flush(db)
        await db.refresh(appointment)
        return to_response(appointment, principal)

    async def delete_appointment(
        self, db: AsyncSession, principal: Principal, appointment_id: uuid.UUID
    ) -> None:
        appointment = await get_writable(db, Appointment, appointment_id, principal, "appointment")
        await db.delete(appointment)
        await db.flush()
        logger.info("Appointment %s deleted by %s", appointment_id, principal.user_id)


appointment_service = AppointmentService()
