"""
Weekly Schedule Model

Derived queries over a provider's weekly template: the seed schedule for new
providers, utilization minutes, advisory validation and effective-date
selection between coexisting schedules.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, TypeVar

from app.scheduling.time_algebra import (
    block_bounds,
    merge_intervals,
    overlap_minutes,
)
from app.schemas.schedule import DaySchedule, TimeBlock, WeeklySchedule, Weekday

WORKING_WEEKDAYS = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
)

S = TypeVar("S")


def default_day_schedule() -> DaySchedule:
    return DaySchedule(
        is_working_day=True,
        shifts=[TimeBlock(start_time="09:00", end_time="17:00")],
        break_times=[TimeBlock(start_time="12:00", end_time="13:00")],
    )


def default_weekly_schedule() -> WeeklySchedule:
    """Mon-Fri 09:00-17:00 with a 12:00-13:00 break, weekend off."""
    days = {weekday: default_day_schedule() for weekday in WORKING_WEEKDAYS}
    return WeeklySchedule(days=days, buffer_minutes=0)


def working_days(schedule: WeeklySchedule) -> List[Weekday]:
    return [weekday for weekday in Weekday if schedule.day(weekday).is_working_day]


def day_available_minutes(day: DaySchedule) -> int:
    if not day.is_working_day:
        return 0

    shift_intervals = merge_intervals(block_bounds(s) for s in day.shifts)
    total = sum(end - start for start, end in shift_intervals)

    # Only the part of a break that falls inside a shift costs working time.
    break_intervals = merge_intervals(block_bounds(b) for b in day.break_times)
    for start, end in break_intervals:
        total -= overlap_minutes(start, end, shift_intervals)

    return total


def total_available_minutes(schedule: WeeklySchedule) -> int:
    return sum(day_available_minutes(schedule.day(weekday)) for weekday in Weekday)


def validate_time_block(block: TimeBlock) -> Optional[str]:
    start, end = block_bounds(block)
    if start >= end:
        return "End time must be after start time"
    return None


def validate_day_schedule(day: DaySchedule) -> List[str]:
    """
    Advisory validation of a single day.

    Returns human-readable messages; never raises for a well-formed
    DaySchedule. The caller decides whether the errors block a save.
    """
    errors: List[str] = []

    if not day.is_working_day:
        return errors

    if not day.shifts:
        errors.append("At least one shift is required for working days")
        return errors

    valid_shifts = []
    for index, shift in enumerate(day.shifts, start=1):
        error = validate_time_block(shift)
        if error:
            errors.append(f"Shift {index}: {error}")
        else:
            valid_shifts.append(block_bounds(shift))

    for index, break_time in enumerate(day.break_times, start=1):
        error = validate_time_block(break_time)
        if error:
            errors.append(f"Break {index}: {error}")

    shift_bounds = [block_bounds(s) for s in day.shifts]
    for i in range(len(shift_bounds)):
        for j in range(i + 1, len(shift_bounds)):
            a_start, a_end = shift_bounds[i]
            b_start, b_end = shift_bounds[j]
            if a_start < b_end and b_start < a_end:
                errors.append(f"Shifts {i + 1} and {j + 1} overlap")

    shift_union = merge_intervals(valid_shifts)
    for index, break_time in enumerate(day.break_times, start=1):
        start, end = block_bounds(break_time)
        if start >= end:
            continue
        if overlap_minutes(start, end, shift_union) < end - start:
            errors.append(f"Break {index} falls outside working shifts")

    return errors


def validate_weekly_schedule(schedule: WeeklySchedule) -> Dict[Weekday, List[str]]:
    """Per-day validation messages, only for days that have any."""
    result = {}
    for weekday in Weekday:
        errors = validate_day_schedule(schedule.day(weekday))
        if errors:
            result[weekday] = errors
    return result


def select_effective_schedule(schedules: Iterable[S], on_date: date) -> Optional[S]:
    """
    Pick the schedule in force on a date.

    Works on anything exposing effective_start_date / effective_end_date.
    The most recently started schedule whose range contains the date wins;
    among schedules starting the same day, the most recently created one.
    """
    candidates = [
        s for s in schedules
        if s.effective_start_date <= on_date
        and (s.effective_end_date is None or s.effective_end_date >= on_date)
    ]
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda s: (s.effective_start_date, getattr(s, "created_at", None) or datetime.min),
    )
