"""
Back-Office Backend: Appointment Routes
=========================================

What:  Appointment CRUD plus the availability pre-check used by the booking
       form before it submits.
Note:  /availability is declared before /{appointment_id} so the literal
       path is not captured as an id.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.schemas.appointment import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    AvailabilityResponse,
)
from backoffice.schemas.common import ErrorResponse
from backoffice.services.access import Principal
from backoffice.services.appointment_service import appointment_service

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])

NOT_FOUND = {404: {"description": "Appointment, client or service not found", "model": ErrorResponse}}
CONFLICT = {409: {"description": "Overlaps an existing appointment", "model": ErrorResponse}}


@router.get("", response_model=List[AppointmentResponse], summary="List visible appointments")
async def list_appointments(
    start_date: Optional[date] = Query(
        default=None, description="Only appointments starting on or after this UTC day"
    ),
    end_date: Optional[date] = Query(
        default=None, description="Only appointments starting on or before this UTC day"
    ),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[AppointmentResponse]:
    return await appointment_service.list_appointments(db, principal, start_date, end_date)


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    responses={400: {"description": "end_time is not after start_time", "model": ErrorResponse}},
    summary="Check whether an interval is free in the caller's calendar",
)
async def check_availability(
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    exclude_id: Optional[UUID] = Query(
        default=None, description="Appointment being edited; ignored by the check"
    ),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> AvailabilityResponse:
    return await appointment_service.check_availability(
        db, principal, start_time, end_time, exclude_id
    )


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, **CONFLICT},
    summary="Book an appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> AppointmentResponse:
    return await appointment_service.create_appointment(db, principal, data)


@router.get("/{appointment_id}", response_model=AppointmentResponse, responses=NOT_FOUND)
async def get_appointment(
    appointment_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> AppointmentResponse:
    return await appointment_service.get_appointment(db, principal, appointment_id)


@router.patch(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    responses={**NOT_FOUND, **CONFLICT},
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> AppointmentResponse:
    return await appointment_service.update_appointment(db, principal, appointment_id, data)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_appointment(
    appointment_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await appointment_service.delete_appointment(db, principal, appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
