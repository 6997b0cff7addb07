from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftSchedule
from ...variance.calculator import lateness_minutes
from ..model import AttendanceRecord
from .base import AttendanceStrategy, FieldRules


class LateStrategy(AttendanceStrategy):
    """Late arrival, measured from the clock-in time."""

    status = AttendanceStatus.LATE
    rules = FieldRules(requires_clock_in=True)

    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        return lateness_minutes(shift, record.clock_in_time)
