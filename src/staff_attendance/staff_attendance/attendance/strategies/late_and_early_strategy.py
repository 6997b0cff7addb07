from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftSchedule
from ...variance.calculator import earliness_minutes, lateness_minutes
from ..model import AttendanceRecord
from .base import AttendanceStrategy, FieldRules


class LateAndEarlyLeaveStrategy(AttendanceStrategy):
    status = AttendanceStatus.LATE_AND_LEFT_EARLY
    rules = FieldRules(requires_clock_in=True, requires_clock_out=True)

    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        return lateness_minutes(shift, record.clock_in_time) + earliness_minutes(shift, record.clock_out_time)
