from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftSchedule
from ..model import AttendanceRecord
from .base import AttendanceStrategy, FieldRules


class AbsentStrategy(AttendanceStrategy):
    """No-show or day off: no clock times, an optional note.

    Absences are counted separately, not as missed hours.
    """

    rules = FieldRules(accepts_notes=True)

    def __init__(self, status: AttendanceStatus):
        if status not in (AttendanceStatus.NO_SHOW, AttendanceStatus.DAY_OFF):
            raise ValueError(f"Not an absence status: {status!r}")
        self.status = status

    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        return 0
