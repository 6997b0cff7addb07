from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceService
from ..attendance.status_machine import StatusStateMachine
from ..core.enums import AttendanceStatus
from ..shifts.repository import ShiftRepository
from ..team_members.repository import TeamMemberRepository
from ..variance.calculator import total_missed_hours

logger = logging.getLogger(__name__)

WORKED_STATUSES = frozenset(
    {
        AttendanceStatus.ON_TIME,
        AttendanceStatus.LATE,
        AttendanceStatus.LEFT_EARLY,
        AttendanceStatus.LATE_AND_LEFT_EARLY,
    }
)


@dataclass(frozen=True)
class StatusSummary:
    on_time: int = 0
    late_arrivals: int = 0
    left_early: int = 0
    day_off: int = 0
    no_show: int = 0

    @classmethod
    def from_records(cls, records: Iterable[AttendanceRecord]) -> "StatusSummary":
        counts = Counter(r.status for r in records)
        return cls(
            on_time=counts[AttendanceStatus.ON_TIME],
            late_arrivals=counts[AttendanceStatus.LATE] + counts[AttendanceStatus.LATE_AND_LEFT_EARLY],
            left_early=counts[AttendanceStatus.LEFT_EARLY] + counts[AttendanceStatus.LATE_AND_LEFT_EARLY],
            day_off=counts[AttendanceStatus.DAY_OFF],
            no_show=counts[AttendanceStatus.NO_SHOW],
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: StatusSummary


class AttendanceReportService:
    """Derived metrics for calendar views, computed from fetched records."""

    def __init__(
        self,
        attendance: AttendanceService,
        team_members: TeamMemberRepository,
        shifts: ShiftRepository,
        *,
        state_machine: Optional[StatusStateMachine] = None,
    ):
        self._attendance = attendance
        self._team_members = team_members
        self._shifts = shifts
        self._machine = state_machine or StatusStateMachine()

    def daily_summary(self, *, tenant_id: str, work_date: date, shift_code: Optional[str] = None) -> StatusSummary:
        records = self._attendance.fetch_daily(tenant_id=tenant_id, work_date=work_date)
        if shift_code:
            member_ids = {m.id for m in self._team_members.list_active(tenant_id=tenant_id, shift_code=shift_code)}
            records = [r for r in records if r.team_member_id in member_ids]
        return StatusSummary.from_records(records)

    def build_monthly_report(
        self,
        *,
        tenant_id: str,
        year_month: str,
        shift_code: Optional[str] = None,
        search: Optional[str] = None,
    ) -> ReportData:
        records = self._attendance.fetch_monthly(tenant_id=tenant_id, year_month=year_month)
        members = self._team_members.list_active(tenant_id=tenant_id, shift_code=shift_code, search=search)
        shifts = {s.shift_code: s for s in self._shifts.list_all()}

        by_member: dict[str, list[AttendanceRecord]] = defaultdict(list)
        for r in records:
            by_member[r.team_member_id].append(r)

        rows: list[dict] = []
        included: list[AttendanceRecord] = []
        for member in members:
            member_records = by_member.get(member.id, [])
            included.extend(member_records)
            shift = shifts.get(member.shift_code) if member.shift_code else None

            missed = total_missed_hours(self._machine.missed_minutes(r, shift) for r in member_records)
            counts = Counter(r.status.value for r in member_records)

            rows.append(
                {
                    "team_member_id": member.id,
                    "full_name": member.full_name,
                    "shift_code": member.shift_code,
                    "shift_name": shift.shift_name if shift else None,
                    "worked_days": sum(1 for r in member_records if r.status in WORKED_STATUSES),
                    "missed_hours": round(missed, 1),
                    "status_counts": {s.value: counts.get(s.value, 0) for s in AttendanceStatus},
                    "days": {r.work_date.isoformat(): r.status.value for r in member_records},
                }
            )

        logger.debug("Built %s report row(s) for %s from %s record(s)", len(rows), year_month, len(records))
        return ReportData(rows=rows, summary=StatusSummary.from_records(included))
