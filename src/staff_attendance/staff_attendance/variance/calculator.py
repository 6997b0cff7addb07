"""Late-arrival and early-departure arithmetic for shift schedules.

All values are minutes since midnight. A shift whose end is numerically
before its start runs across midnight; for such shifts the end boundary and
any observed time in the after-midnight segment are moved into the next day
(+1440) before comparing, so the result never depends on calendar dates.
"""

from __future__ import annotations

from datetime import time
from typing import Iterable, Optional

from ..core.constants import MINUTES_PER_DAY
from ..core.enums import ShiftBoundary
from ..shifts.model import ShiftSchedule


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def wraps_midnight(start: int, end: int) -> bool:
    return end < start


def normalize_observed(start: int, end: int, observed: int) -> int:
    """Place an observed time on the shift's own timeline.

    On a wrapping shift a time before the start belongs to the next-day
    segment when it is nearer to the start going forward across midnight
    than going backward (18:00-02:00: anything before 06:00).
    """
    if wraps_midnight(start, end) and observed < start - MINUTES_PER_DAY // 2:
        return observed + MINUTES_PER_DAY
    return observed


def boundary_variance(start: int, end: int, observed: int, boundary: ShiftBoundary) -> int:
    """Minutes late (start boundary) or early (end boundary), never negative."""
    actual = normalize_observed(start, end, observed)

    if boundary == ShiftBoundary.START:
        return max(0, actual - start)

    scheduled_end = end + MINUTES_PER_DAY if wraps_midnight(start, end) else end
    return max(0, scheduled_end - actual)


def lateness_minutes(shift: Optional[ShiftSchedule], clock_in: Optional[time]) -> int:
    if shift is None or clock_in is None:
        return 0
    return boundary_variance(
        to_minutes(shift.start_time), to_minutes(shift.end_time), to_minutes(clock_in), ShiftBoundary.START
    )


def earliness_minutes(shift: Optional[ShiftSchedule], clock_out: Optional[time]) -> int:
    if shift is None or clock_out is None:
        return 0
    return boundary_variance(
        to_minutes(shift.start_time), to_minutes(shift.end_time), to_minutes(clock_out), ShiftBoundary.END
    )


def minutes_to_hours(minutes: int) -> float:
    return minutes / 60


def total_missed_hours(per_record_minutes: Iterable[int]) -> float:
    return minutes_to_hours(sum(per_record_minutes))
