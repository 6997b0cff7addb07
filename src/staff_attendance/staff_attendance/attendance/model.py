from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One team member's attendance for one organization-local day."""

    id: str
    tenant_id: str
    team_member_id: str
    work_date: date
    status: AttendanceStatus
    recorded_by: str
    created_at: datetime
    updated_at: datetime
    clock_in_time: Optional[time] = None
    clock_out_time: Optional[time] = None
    notes: Optional[str] = None

    @property
    def natural_key(self) -> tuple[str, date]:
        return self.team_member_id, self.work_date


@dataclass(frozen=True)
class MarkAttendanceParams:
    """Write request for one natural key; irrelevant fields are nulled on write."""

    team_member_id: str
    work_date: date
    status: AttendanceStatus
    clock_in_time: Optional[time] = None
    clock_out_time: Optional[time] = None
    notes: Optional[str] = None
