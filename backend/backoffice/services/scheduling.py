"""
Back-Office Backend: Scheduling Conflict Checker
==================================================

What:  Decides whether a candidate appointment interval collides with the
       appointments an owner already holds.
Why:   Gives fast, specific feedback ("this slot is taken by X") before any
       write is attempted.
Who:   AppointmentService (create/update) and GET /api/appointments/availability.

Overlap rule (half-open intervals):
    [s1, e1) and [s2, e2) conflict  ⇔  s1 < e2  and  s2 < e1

    9:00-10:00 vs 10:00-11:00 → no conflict (touching)
    9:00-10:00 vs 9:30-10:30  → conflict (partial overlap)
    9:00-11:00 vs 9:30-10:30  → conflict (containment)

Cancelled appointments:
    By default they take part in the check (ignore_cancelled=False). The
    scheduling_ignore_cancelled setting switches this off.

This module is a pre-check only. The authoritative guarantee for
non-cancelled appointments is the database exclusion constraint; see
backoffice.models.appointment.
"""

import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol

from backoffice.exceptions import ConflictError, ValidationError
from backoffice.models.appointment import STATUS_CANCELLED


class Slot(Protocol):
    """Anything with an id, an interval and a status (ORM rows, test doubles)."""

    id: uuid.UUID
    start_time: datetime
    end_time: datetime
    status: str


def as_utc(value: datetime) -> datetime:
    """
    Normalizes a datetime to aware UTC.

    Naive values are taken to be UTC already. SQLite hands back naive
    datetimes even for timezone-aware columns, and comparing naive with
    aware values raises TypeError.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """True iff [start_a, end_a) and [start_b, end_b) share at least one instant."""
    return as_utc(start_a) < as_utc(end_b) and as_utc(start_b) < as_utc(end_a)


def validate_interval(start: datetime, end: datetime) -> None:
    """Rejects empty or inverted intervals."""
    if as_utc(end) <= as_utc(start):
        raise ValidationError(
            message="Appointment end time must be after its start time",
            field="end_time",
            context={"start_time": start.isoformat(), "end_time": end.isoformat()},
        )


def find_conflicts(
    start: datetime,
    end: datetime,
    appointments: Iterable[Slot],
    exclude_id: Optional[uuid.UUID] = None,
    ignore_cancelled: bool = False,
) -> List[Slot]:
    """
    Returns the appointments that overlap [start, end).

    Args:
        start, end:        Candidate interval (end must be after start)
        appointments:      The owner's current appointments
        exclude_id:        Appointment being edited; never conflicts with itself
        ignore_cancelled:  Skip cancelled appointments

    Raises:
        ValidationError: end <= start
    """
    validate_interval(start, end)
    conflicts = []
    for appointment in appointments:
        if exclude_id is not None and appointment.id == exclude_id:
            continue
        if ignore_cancelled and appointment.status == STATUS_CANCELLED:
            continue
        if intervals_overlap(start, end, appointment.start_time, appointment.end_time):
            conflicts.append(appointment)
    return conflicts


def is_time_slot_available(
    start: datetime,
    end: datetime,
    appointments: Iterable[Slot],
    exclude_id: Optional[uuid.UUID] = None,
    ignore_cancelled: bool = False,
) -> bool:
    """True when no appointment in the collection overlaps [start, end)."""
    return not find_conflicts(start, end, appointments, exclude_id, ignore_cancelled)


def ensure_time_slot_available(
    start: datetime,
    end: datetime,
    appointments: Iterable[Slot],
    exclude_id: Optional[uuid.UUID] = None,
    ignore_cancelled: bool = False,
) -> None:
    """
    Raises ConflictError naming the colliding appointments, if any.

    Called before every appointment insert or time change so that the
    conflict surfaces as a domain error instead of a database error.
    """
    conflicts = find_conflicts(start, end, appointments, exclude_id, ignore_cancelled)
    if conflicts:
        raise ConflictError(conflicting_ids=[appointment.id for appointment in conflicts])
