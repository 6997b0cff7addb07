from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

import pytest

from src.staff_attendance.staff_attendance.attendance.model import AttendanceRecord, MarkAttendanceParams
from src.staff_attendance.staff_attendance.attendance.service import AttendanceService
from src.staff_attendance.staff_attendance.core.exceptions import WriteError
from src.staff_attendance.staff_attendance.shifts.model import ShiftSchedule
from src.staff_attendance.staff_attendance.team_members.model import TeamMember

TENANT = "tenant-1"
ACTOR = "manager-1"

DAY_SHIFT = ShiftSchedule(shift_code="10-6", shift_name="Day Shift", start_time=time(10, 0), end_time=time(18, 0))
EVENING_SHIFT = ShiftSchedule(shift_code="6-2", shift_name="Evening Shift", start_time=time(18, 0), end_time=time(2, 0))
NIGHT_SHIFT = ShiftSchedule(shift_code="2-10", shift_name="Night Shift", start_time=time(2, 0), end_time=time(10, 0))


class InMemoryAttendance:
    """Attendance store keyed by (team_member_id, work_date), like the unique index."""

    def __init__(self, *, max_page_size: int = 1000):
        self._rows: dict[tuple[str, date], AttendanceRecord] = {}
        self._seq = itertools.count(1)
        self.max_page_size = max_page_size
        self.page_requests: list[tuple[int, int]] = []
        self.upserts: list[MarkAttendanceParams] = []

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self._rows[record.natural_key] = record
        return record

    def all(self) -> list[AttendanceRecord]:
        return list(self._rows.values())

    def list_for_date(self, *, tenant_id, work_date):
        rows = [r for r in self._rows.values() if r.tenant_id == tenant_id and r.work_date == work_date]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    def list_range_page(self, *, tenant_id, start_date, end_date, offset, limit):
        self.page_requests.append((offset, limit))
        rows = sorted(
            (r for r in self._rows.values() if r.tenant_id == tenant_id and start_date <= r.work_date <= end_date),
            key=lambda r: (r.work_date, r.id),
        )
        return rows[offset : offset + min(limit, self.max_page_size)]

    def upsert(self, *, tenant_id, params, recorded_by, now):
        self.upserts.append(params)
        key = (params.team_member_id, params.work_date)
        existing = self._rows.get(key)
        if existing and existing.tenant_id != tenant_id:
            raise WriteError(f"Attendance for {params.team_member_id} on {params.work_date} belongs to another tenant")
        fields = dict(
            status=params.status,
            clock_in_time=params.clock_in_time,
            clock_out_time=params.clock_out_time,
            notes=params.notes,
            recorded_by=recorded_by,
            updated_at=now,
        )
        if existing:
            record = replace(existing, **fields)
        else:
            record = AttendanceRecord(
                id=f"att-{next(self._seq)}",
                tenant_id=tenant_id,
                team_member_id=params.team_member_id,
                work_date=params.work_date,
                created_at=now,
                **fields,
            )
        self._rows[key] = record
        return record

    def delete(self, *, tenant_id, attendance_id):
        for key, r in list(self._rows.items()):
            if r.id == attendance_id and r.tenant_id == tenant_id:
                del self._rows[key]
                return True
        return False


@dataclass
class InMemoryTeamMembers:
    members: list[TeamMember]

    def list_active(self, *, tenant_id, shift_code=None, search=None):
        return [
            m
            for m in self.members
            if m.is_active
            and (not shift_code or m.shift_code == shift_code)
            and (not search or search.lower() in m.full_name.lower())
        ]


@dataclass
class InMemoryShifts:
    shifts: list[ShiftSchedule]

    def list_all(self):
        return list(self.shifts)


class _FakeTimer:
    def __init__(self, due_ms: float, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Timer factory driven by a manual millisecond clock."""

    def __init__(self):
        self.now_ms = 0.0
        self.timers: list[_FakeTimer] = []

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> _FakeTimer:
        timer = _FakeTimer(self.now_ms + delay_seconds * 1000, callback)
        self.timers.append(timer)
        return timer

    def advance(self, ms: float) -> None:
        self.now_ms += ms
        while True:
            due = [t for t in self.timers if not t.cancelled and not t.fired and t.due_ms <= self.now_ms]
            if not due:
                return
            timer = min(due, key=lambda t: t.due_ms)
            timer.fired = True
            timer.callback()


def make_record(
    team_member_id: str,
    work_date: date,
    status,
    *,
    record_id: Optional[str] = None,
    clock_in_time: Optional[time] = None,
    clock_out_time: Optional[time] = None,
    notes: Optional[str] = None,
    tenant_id: str = TENANT,
    created_at: Optional[datetime] = None,
) -> AttendanceRecord:
    created = created_at or datetime.combine(work_date, time(9, 0))
    return AttendanceRecord(
        id=record_id or f"{team_member_id}-{work_date.isoformat()}",
        tenant_id=tenant_id,
        team_member_id=team_member_id,
        work_date=work_date,
        status=status,
        clock_in_time=clock_in_time,
        clock_out_time=clock_out_time,
        notes=notes,
        recorded_by=ACTOR,
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def clock():
    ticks = itertools.count()
    start = datetime(2025, 9, 1, 9, 0, 0)
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def attendance_service(attendance_repo, clock):
    return AttendanceService(attendance_repo, clock=clock)


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def team_members():
    return InMemoryTeamMembers(
        [
            TeamMember(id="m-day", full_name="Dana Day", shift_code="10-6"),
            TeamMember(id="m-eve", full_name="Evan Evening", shift_code="6-2"),
            TeamMember(id="m-night", full_name="Nora Night", shift_code="2-10"),
            TeamMember(id="m-none", full_name="Nico Noshift", shift_code=None),
            TeamMember(id="m-gone", full_name="Gail Gone", shift_code="10-6", is_active=False),
        ]
    )


@pytest.fixture
def shifts():
    return InMemoryShifts([DAY_SHIFT, EVENING_SHIFT, NIGHT_SHIFT])
