"""
Recurrence Expander

Turns a base occurrence plus a RecurrencePattern into the concrete, ordered
list of occurrences. The same expansion backs recurring appointments and
recurring blocked time; only the record built from each occurrence differs.
"""

import calendar
import logging
from datetime import date, timedelta
from itertools import count
from typing import Iterator, List, Optional
from uuid import UUID

from app.scheduling.errors import RecurrenceLimitError, UnsatisfiableRecurrenceError
from app.schemas.appointment import BookedAppointment, RecurringAppointmentCreate
from app.schemas.exception import BlockedTime, BlockedTimeCreate
from app.schemas.recurrence import EndAfterCount, EndByDate, Frequency, Occurrence, RecurrencePattern

logger = logging.getLogger("careschedule.recurrence")

MAX_SERIES_OCCURRENCES = 1000


def add_months(value: date, months: int) -> date:
    """Same day-of-month, clamped to the last day of shorter months."""
    years, month_index = divmod(value.month - 1 + months, 12)
    year = value.year + years
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def _week_interval(pattern: RecurrencePattern) -> int:
    if pattern.frequency == Frequency.BIWEEKLY:
        return pattern.interval * 2
    return pattern.interval


def iter_candidate_dates(start: date, pattern: RecurrencePattern) -> Iterator[date]:
    """
    Infinite, strictly increasing stream of dates, starting with ``start``.

    Weekly patterns with days_of_week emit every matching weekday of the
    7-day window beginning at the anchor, then move the anchor forward by
    the week interval.
    """
    yield start

    if pattern.frequency == Frequency.DAILY:
        for k in count(1):
            yield start + timedelta(days=k * pattern.interval)

    elif pattern.frequency.is_weekly:
        weeks = _week_interval(pattern)
        if pattern.days_of_week is None:
            for k in count(1):
                yield start + timedelta(weeks=k * weeks)
        else:
            targets = {day.index for day in pattern.days_of_week}
            anchor = start
            while True:
                for offset in range(7):
                    candidate = anchor + timedelta(days=offset)
                    if candidate > start and candidate.weekday() in targets:
                        yield candidate
                anchor += timedelta(weeks=weeks)

    elif pattern.frequency == Frequency.MONTHLY:
        # Always offset from the base date so a 31st doesn't drift to the 28th.
        for k in count(1):
            yield add_months(start, k * pattern.interval)


def _check_satisfiable(base: Occurrence, pattern: RecurrencePattern, max_occurrences: int):
    if pattern.days_of_week is not None and not pattern.days_of_week:
        raise UnsatisfiableRecurrenceError("Weekly recurrence needs at least one day of the week")

    end = pattern.end_condition
    if isinstance(end, EndAfterCount):
        if end.value < 1:
            raise UnsatisfiableRecurrenceError("Number of occurrences must be at least 1")
        if end.value > max_occurrences:
            raise RecurrenceLimitError(
                f"Series of {end.value} occurrences exceeds the limit of {max_occurrences}"
            )
    elif isinstance(end, EndByDate) and end.value < base.occurrence_date:
        raise UnsatisfiableRecurrenceError(
            f"End date {end.value.isoformat()} is before the first occurrence "
            f"{base.occurrence_date.isoformat()}"
        )


def generate_series(
    base: Occurrence,
    pattern: RecurrencePattern,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> List[Occurrence]:
    """
    Expand a recurrence into concrete occurrences.

    The base occurrence is always the first element. Count end conditions
    produce exactly ``value`` occurrences; date end conditions include every
    candidate up to and including the bound.

    Raises:
        UnsatisfiableRecurrenceError: the pattern can never produce a series
        RecurrenceLimitError: the series would exceed ``max_occurrences``
    """
    _check_satisfiable(base, pattern, max_occurrences)

    end = pattern.end_condition
    dates: List[date] = []
    for candidate in iter_candidate_dates(base.occurrence_date, pattern):
        if isinstance(end, EndAfterCount) and len(dates) >= end.value:
            break
        if isinstance(end, EndByDate) and candidate > end.value:
            break
        if len(dates) >= max_occurrences:
            raise RecurrenceLimitError(
                f"Series until {end.value.isoformat()} exceeds the limit of {max_occurrences} occurrences"
            )
        dates.append(candidate)

    logger.debug(
        "Expanded %s recurrence from %s into %d occurrences",
        pattern.frequency.value, base.occurrence_date.isoformat(), len(dates),
    )

    return [
        base.model_copy(update={"occurrence_date": d, "sequence": i})
        for i, d in enumerate(dates)
    ]


def expand_appointment_series(
    template: RecurringAppointmentCreate,
    parent_recurrence_id: UUID,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> List[BookedAppointment]:
    base = Occurrence(
        occurrence_date=template.appointment_date,
        start_time=template.start_time,
        end_time=template.end_time,
    )
    fields = template.model_dump(exclude={"recurrence_pattern", "appointment_date"})
    return [
        BookedAppointment(
            **fields,
            appointment_date=occurrence.occurrence_date,
            is_recurring=True,
            parent_recurrence_id=parent_recurrence_id,
        )
        for occurrence in generate_series(base, template.recurrence_pattern, max_occurrences)
    ]


def expand_blocked_time(
    blocked: BlockedTimeCreate,
    parent_block_id: Optional[UUID] = None,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> List[BlockedTime]:
    """One BlockedTime per occurrence, each spanning as many days as the input block."""
    fields = blocked.model_dump(exclude={"recurrence_pattern", "start_date", "end_date"})
    pattern = blocked.recurrence_pattern

    if pattern is None:
        return [BlockedTime(**fields, start_date=blocked.start_date, end_date=blocked.end_date)]

    span = blocked.end_date - blocked.start_date
    base = Occurrence(
        occurrence_date=blocked.start_date,
        start_time=blocked.start_time,
        end_time=blocked.end_time,
    )
    return [
        BlockedTime(
            **fields,
            start_date=occurrence.occurrence_date,
            end_date=occurrence.occurrence_date + span,
            is_recurring=True,
            recurrence_pattern=pattern,
            parent_block_id=parent_block_id,
        )
        for occurrence in generate_series(base, pattern, max_occurrences)
    ]


def _plural(n: int, unit: str) -> str:
    return f"Every {unit}" if n == 1 else f"Every {n} {unit}s"


def describe_pattern(pattern: RecurrencePattern) -> str:
    days = sorted(set(pattern.days_of_week or []), key=lambda d: d.index)
    day_names = [d.label for d in days]

    if pattern.frequency == Frequency.DAILY:
        label = _plural(pattern.interval, "day")
    elif pattern.frequency == Frequency.MONTHLY:
        label = _plural(pattern.interval, "month")
    elif pattern.frequency == Frequency.TWICE_WEEKLY:
        label = "Twice a week"
        if day_names:
            label += " on " + " and ".join(day_names)
    else:
        label = _plural(_week_interval(pattern), "week")
        if day_names:
            label += " on " + ", ".join(day_names)

    end = pattern.end_condition
    if isinstance(end, EndByDate):
        label += f" until {end.value:%b} {end.value.day}, {end.value.year}"
    else:
        label += f", {end.value} occurrence{'s' if end.value != 1 else ''}"
    return label
