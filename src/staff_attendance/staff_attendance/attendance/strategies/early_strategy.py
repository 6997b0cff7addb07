from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftSchedule
from ...variance.calculator import earliness_minutes
from ..model import AttendanceRecord
from .base import AttendanceStrategy, FieldRules


class EarlyLeaveStrategy(AttendanceStrategy):
    """Early departure, measured from the clock-out time."""

    status = AttendanceStatus.LEFT_EARLY
    rules = FieldRules(requires_clock_out=True)

    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        return earliness_minutes(shift, record.clock_out_time)
