"""
Slot Generator

Builds the bookable-slot listing for one provider and date: a 15-minute grid
over every shift, each tick flagged available or unavailable with the first
applicable reason.
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from app.scheduling.availability import BREAK_TIME, resolve_minute
from app.scheduling.errors import InvalidDurationError
from app.scheduling.time_algebra import (
    MINUTES_PER_DAY,
    format_time,
    intervals_overlap,
    require_valid_block,
    time_in_any_break,
)
from app.schemas.appointment import BookedAppointment
from app.schemas.exception import BlockedTime, ScheduleException
from app.schemas.schedule import WeeklySchedule
from app.schemas.slot import Slot

SLOT_GRID_MINUTES = 15

ALREADY_BOOKED = "Already booked"
EXTENDS_PAST_WORKING_HOURS = "Extends past working hours"


def all_day_slots() -> List[Slot]:
    """Every grid tick of the day, open. Used for providers without a schedule."""
    return [
        Slot(time=format_time(minute), available=True)
        for minute in range(0, MINUTES_PER_DAY, SLOT_GRID_MINUTES)
    ]


def _busy_intervals(
    clinician_id: UUID,
    on_date: date,
    bookings: Iterable[BookedAppointment],
    buffer_minutes: int,
) -> List[Tuple[int, int]]:
    # The buffer protects the time after a booking only.
    busy = []
    for booking in bookings:
        if booking.clinician_id != clinician_id or booking.appointment_date != on_date:
            continue
        if not booking.occupies_calendar:
            continue
        start, end = require_valid_block(booking, "Booked appointment")
        busy.append((start, end + buffer_minutes))
    return busy


def generate_slots(
    clinician_id: UUID,
    on_date: date,
    duration_minutes: int,
    schedule: Optional[WeeklySchedule],
    exceptions: Iterable[ScheduleException] = (),
    bookings: Iterable[BookedAppointment] = (),
    blocked_times: Iterable[BlockedTime] = (),
) -> List[Slot]:
    """
    Generate the slot grid for a provider on a date.

    Each tick ``t`` of a shift becomes a candidate ``[t, t + duration)``.
    Reasons, first match wins:
        1. exception / non-working day / outside hours / break (resolver)
        2. Break time
        3. Already booked (booking extended by the schedule buffer)
        4. Extends past working hours (past the end of this shift)

    A provider without a schedule gets every tick of the day open; a
    non-working day yields no slots.
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise InvalidDurationError(f"Duration must be a positive number of minutes, got {duration_minutes!r}")

    if schedule is None:
        return all_day_slots()

    day = schedule.for_date(on_date)
    if not day.is_working_day:
        return []

    exceptions = list(exceptions)
    blocked_times = list(blocked_times)
    for break_time in day.break_times:
        require_valid_block(break_time, "Break")
    busy = _busy_intervals(clinician_id, on_date, bookings, schedule.buffer_minutes)

    slots: List[Slot] = []
    for shift in day.shifts:
        shift_start, shift_end = require_valid_block(shift, "Shift")

        minute = shift_start
        while minute < shift_end:
            slot_end = minute + duration_minutes
            reason = resolve_minute(on_date, minute, schedule, exceptions, blocked_times).reason

            if reason is None and time_in_any_break(minute, day.break_times):
                reason = BREAK_TIME
            if reason is None and any(intervals_overlap(minute, slot_end, b_start, b_end) for b_start, b_end in busy):
                reason = ALREADY_BOOKED
            if reason is None and slot_end > shift_end:
                reason = EXTENDS_PAST_WORKING_HOURS

            slots.append(Slot(time=format_time(minute), available=reason is None, reason=reason))
            minute += SLOT_GRID_MINUTES

    return slots
