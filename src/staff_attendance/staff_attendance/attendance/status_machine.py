"""Resolve UI toggles into one canonical attendance status.

``late`` and ``left_early`` are independent flags that combine; ``on_time``,
``no_show`` and ``day_off`` are exclusive selections that clear the flags.
A flag-based status is committed only once every clock time it needs is
present; until then the selection stays in the pending overlay.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Optional

from ..core.enums import AttendanceStatus, StatusFlag
from ..shifts.model import ShiftSchedule
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, MarkAttendanceParams

_STATUS_BY_FLAGS: dict[frozenset[StatusFlag], AttendanceStatus] = {
    frozenset({StatusFlag.LATE}): AttendanceStatus.LATE,
    frozenset({StatusFlag.LEFT_EARLY}): AttendanceStatus.LEFT_EARLY,
    frozenset({StatusFlag.LATE, StatusFlag.LEFT_EARLY}): AttendanceStatus.LATE_AND_LEFT_EARLY,
}
_FLAGS_BY_STATUS = {status: flags for flags, status in _STATUS_BY_FLAGS.items()}

EXCLUSIVE_STATUSES = frozenset({AttendanceStatus.ON_TIME, AttendanceStatus.NO_SHOW, AttendanceStatus.DAY_OFF})
FLAG_STATUSES = frozenset(_FLAGS_BY_STATUS)


def canonical_status(flags: Iterable[StatusFlag]) -> Optional[AttendanceStatus]:
    """{} -> None (unset), {late} -> late, {left_early} -> left_early, both -> late_and_left_early."""
    return _STATUS_BY_FLAGS.get(frozenset(flags))


def flags_for_status(status: Optional[AttendanceStatus]) -> frozenset[StatusFlag]:
    if status is None:
        return frozenset()
    return _FLAGS_BY_STATUS.get(AttendanceStatus(status), frozenset())


def toggle_flag(flags: Iterable[StatusFlag], flag: StatusFlag) -> frozenset[StatusFlag]:
    current = frozenset(flags)
    return current - {flag} if flag in current else current | {flag}


def is_exclusive(status: Optional[AttendanceStatus]) -> bool:
    return status in EXCLUSIVE_STATUSES


@dataclass(frozen=True)
class IncompleteSelection:
    """A flag-based status still waiting for clock times. Not an error."""

    status: AttendanceStatus
    missing: tuple[str, ...]


class StatusStateMachine:
    def __init__(self, factory: Optional[AttendanceStrategyFactory] = None):
        self._factory = factory or AttendanceStrategyFactory()

    def check_selection(
        self,
        status: AttendanceStatus,
        *,
        clock_in_time: Optional[time],
        clock_out_time: Optional[time],
    ) -> Optional[IncompleteSelection]:
        missing = self._factory.for_status(status).missing_fields(
            clock_in_time=clock_in_time, clock_out_time=clock_out_time
        )
        return IncompleteSelection(status=status, missing=missing) if missing else None

    def is_commit_ready(
        self,
        status: Optional[AttendanceStatus],
        *,
        clock_in_time: Optional[time],
        clock_out_time: Optional[time],
    ) -> bool:
        if status is None:
            return False
        return self.check_selection(status, clock_in_time=clock_in_time, clock_out_time=clock_out_time) is None

    def normalize(self, params: MarkAttendanceParams) -> MarkAttendanceParams:
        """Null every field the status does not keep."""
        return self._factory.for_status(params.status).normalize(params)

    def build_params(
        self,
        *,
        team_member_id: str,
        work_date: date,
        status: AttendanceStatus,
        clock_in_time: Optional[time] = None,
        clock_out_time: Optional[time] = None,
        notes: Optional[str] = None,
    ) -> MarkAttendanceParams:
        return self.normalize(
            MarkAttendanceParams(
                team_member_id=team_member_id,
                work_date=work_date,
                status=status,
                clock_in_time=clock_in_time,
                clock_out_time=clock_out_time,
                notes=notes,
            )
        )

    def missed_minutes(self, record: AttendanceRecord, shift: Optional[ShiftSchedule]) -> int:
        return self._factory.for_status(record.status).missed_minutes(record, shift)
