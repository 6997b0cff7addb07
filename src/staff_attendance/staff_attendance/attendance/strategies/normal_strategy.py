from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftSchedule
from ..model import AttendanceRecord
from .base import AttendanceStrategy


class OnTimeStrategy(AttendanceStrategy):
    """Worked the full shift; nothing besides the status is stored."""

    status = AttendanceStatus.ON_TIME

    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        return 0
