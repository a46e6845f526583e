"""
Exception Resolver

Answers "is the provider available at this time on this date" by layering
approved exceptions and blocked time over the weekly schedule. Exceptions
only ever remove availability; they never grant extra hours.
"""

from datetime import date, datetime
from typing import Iterable, Optional, Tuple
from uuid import UUID

from app.scheduling.errors import InvalidTimeBlockError, InvalidTransitionError
from app.scheduling.time_algebra import (
    parse_time,
    require_valid_block,
    time_in_any_break,
    time_in_shift,
)
from app.schemas.exception import BlockedTime, ExceptionStatus, ScheduleException
from app.schemas.schedule import WeeklySchedule
from app.schemas.slot import AvailabilityResult

NOT_WORKING_DAY = "Not a working day"
OUTSIDE_WORKING_HOURS = "Outside working hours"
BREAK_TIME = "Break time"
TIME_OFF_PREFIX = "Time off: "

DAY_START = "00:00"
DAY_END = "23:59"


def _window(start_time: Optional[str], end_time: Optional[str], label: str) -> Tuple[int, int]:
    start = parse_time(start_time or DAY_START)
    end = parse_time(end_time or DAY_END)
    if start > end:
        raise InvalidTimeBlockError(f"{label} {start_time}-{end_time}: end time must not be before start time")
    return start, end


def exception_covers(exception: ScheduleException, on_date: date, minute: int) -> bool:
    if exception.status != ExceptionStatus.APPROVED:
        return False
    if not exception.start_date <= on_date <= exception.end_date:
        return False
    if exception.all_day:
        return True
    start, end = _window(exception.start_time, exception.end_time, "Schedule exception")
    return start <= minute <= end


def blocked_time_covers(blocked: BlockedTime, on_date: date, minute: int) -> bool:
    if not blocked.start_date <= on_date <= blocked.end_date:
        return False
    start, end = _window(blocked.start_time, blocked.end_time, "Blocked time")
    return start <= minute <= end


def find_time_off(
    on_date: date,
    minute: int,
    exceptions: Iterable[ScheduleException],
    blocked_times: Iterable[BlockedTime] = (),
) -> Optional[str]:
    """Reason text of the first entry removing this minute, if any."""
    for exception in exceptions:
        if exception_covers(exception, on_date, minute):
            return TIME_OFF_PREFIX + exception.reason
    for blocked in blocked_times:
        if blocked_time_covers(blocked, on_date, minute):
            return TIME_OFF_PREFIX + blocked.title
    return None


def resolve_minute(
    on_date: date,
    minute: int,
    schedule: WeeklySchedule,
    exceptions: Iterable[ScheduleException],
    blocked_times: Iterable[BlockedTime] = (),
) -> AvailabilityResult:
    reason = find_time_off(on_date, minute, exceptions, blocked_times)
    if reason:
        return AvailabilityResult(available=False, reason=reason)

    day = schedule.for_date(on_date)
    if not day.is_working_day:
        return AvailabilityResult(available=False, reason=NOT_WORKING_DAY)

    for shift in day.shifts:
        require_valid_block(shift, "Shift")
    if not any(time_in_shift(minute, shift) for shift in day.shifts):
        return AvailabilityResult(available=False, reason=OUTSIDE_WORKING_HOURS)

    for break_time in day.break_times:
        require_valid_block(break_time, "Break")
    if time_in_any_break(minute, day.break_times):
        return AvailabilityResult(available=False, reason=BREAK_TIME)

    return AvailabilityResult(available=True)


def review_exception(
    exception: ScheduleException,
    decision: ExceptionStatus,
    reviewed_by: UUID,
    denial_reason: Optional[str] = None,
    reviewed_at: Optional[datetime] = None,
) -> ScheduleException:
    """
    Move a Requested exception to Approved or Denied.

    The transition happens once; reviewing an already decided exception, or
    "deciding" Requested, raises InvalidTransitionError.
    """
    if exception.status != ExceptionStatus.REQUESTED:
        raise InvalidTransitionError(f"Exception is already {exception.status.value}")
    if decision == ExceptionStatus.REQUESTED:
        raise InvalidTransitionError("An exception can only be approved or denied")
    if decision == ExceptionStatus.DENIED and not denial_reason:
        raise InvalidTransitionError("A denial reason is required")

    return exception.model_copy(update={
        "status": decision,
        "approved_by": reviewed_by,
        "approval_date": reviewed_at or datetime.utcnow(),
        "denial_reason": denial_reason if decision == ExceptionStatus.DENIED else None,
    })


def is_available(
    on_date: date,
    time: str,
    schedule: WeeklySchedule,
    exceptions: Iterable[ScheduleException],
    blocked_times: Iterable[BlockedTime] = (),
) -> AvailabilityResult:
    """
    Resolve availability for a date and HH:MM time.

    First match wins:
        1. approved exception or blocked time covering the date/time
        2. non-working weekday
        3. time outside every shift (shift end inclusive)
        4. time inside a break (break end exclusive)
        5. available
    """
    return resolve_minute(on_date, parse_time(time), schedule, list(exceptions), list(blocked_times))
