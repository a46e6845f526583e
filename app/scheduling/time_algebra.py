"""
Time Algebra

Minute-of-day arithmetic shared by the schedule model, the exception
resolver and the slot generator. Times are naive local-clock "HH:MM"
strings; internally they are minutes since midnight.

Blocks are any object exposing ``start_time`` and ``end_time`` strings
(TimeBlock, bookings, blocked times).
"""

import re
from typing import Iterable, List, Tuple

from app.scheduling.errors import InvalidTimeBlockError, MalformedTimeError

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    if not isinstance(value, str):
        raise MalformedTimeError(f"Expected an HH:MM string, got {type(value).__name__}")
    match = _TIME_RE.match(value)
    if not match:
        raise MalformedTimeError(f"Invalid time '{value}'. Use HH:MM (00:00-23:59)")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise MalformedTimeError(f"Minute value {minutes} is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def block_bounds(block) -> Tuple[int, int]:
    return parse_time(block.start_time), parse_time(block.end_time)


def require_valid_block(block, label: str = "Time block") -> Tuple[int, int]:
    """Return the block's bounds, raising if it is empty or inverted."""
    start, end = block_bounds(block)
    if start >= end:
        raise InvalidTimeBlockError(
            f"{label} {block.start_time}-{block.end_time}: end time must be after start time"
        )
    return start, end


def time_in_shift(minute: int, block) -> bool:
    # Closed interval: a time equal to the shift end still counts as inside.
    start, end = block_bounds(block)
    return start <= minute <= end


def time_in_break(minute: int, block) -> bool:
    # Half-open: a slot may start exactly when a break ends.
    start, end = block_bounds(block)
    return start <= minute < end


def time_in_any_break(minute: int, breaks: Iterable) -> bool:
    return any(time_in_break(minute, b) for b in breaks)


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def blocks_overlap(a, b) -> bool:
    a_start, a_end = block_bounds(a)
    b_start, b_end = block_bounds(b)
    return intervals_overlap(a_start, a_end, b_start, b_end)


def block_minutes(block) -> int:
    start, end = block_bounds(block)
    return max(0, end - start)


def merge_intervals(intervals: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Union of minute intervals, sorted, with adjacent ones joined."""
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(intervals):
        if start >= end:
            continue
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def overlap_minutes(start: int, end: int, intervals: Iterable[Tuple[int, int]]) -> int:
    """Minutes of [start, end) covered by the given (already merged) intervals."""
    total = 0
    for i_start, i_end in intervals:
        total += max(0, min(end, i_end) - max(start, i_start))
    return total
