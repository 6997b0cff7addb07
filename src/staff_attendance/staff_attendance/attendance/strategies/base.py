from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import time
from typing import Optional

from ...common.validators import clean_notes
from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftSchedule
from ..model import AttendanceRecord, MarkAttendanceParams


@dataclass(frozen=True)
class FieldRules:
    requires_clock_in: bool = False
    requires_clock_out: bool = False
    accepts_notes: bool = False


class AttendanceStrategy(ABC):
    """Strategy Pattern: which fields a status keeps and what it costs against the shift."""

    status: AttendanceStatus
    rules: FieldRules = FieldRules()

    def normalize(self, params: MarkAttendanceParams) -> MarkAttendanceParams:
        return replace(
            params,
            status=self.status,
            clock_in_time=params.clock_in_time if self.rules.requires_clock_in else None,
            clock_out_time=params.clock_out_time if self.rules.requires_clock_out else None,
            notes=clean_notes(params.notes) if self.rules.accepts_notes else None,
        )

    def missing_fields(self, *, clock_in_time: Optional[time], clock_out_time: Optional[time]) -> tuple[str, ...]:
        missing = []
        if self.rules.requires_clock_in and clock_in_time is None:
            missing.append("clock_in_time")
        if self.rules.requires_clock_out and clock_out_time is None:
            missing.append("clock_out_time")
        return tuple(missing)

    @abstractmethod
    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        raise NotImplementedError
