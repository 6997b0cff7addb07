from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, Sequence

from .model import AttendanceRecord, MarkAttendanceParams


class AttendanceRepository(Protocol):
    @property
    def max_page_size(self) -> int:
        """Largest page the backend returns for one range request."""

        raise NotImplementedError

    def list_for_date(self, *, tenant_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        """Records of one day, newest created_at first."""

        raise NotImplementedError

    def list_range_page(
        self,
        *,
        tenant_id: str,
        start_date: date,
        end_date: date,
        offset: int,
        limit: int,
    ) -> Sequence[AttendanceRecord]:
        """One page of records in [start_date, end_date], ordered by work_date ascending.

        Implementations may cap ``limit``; callers keep paging until a short page.
        """

        raise NotImplementedError

    def upsert(
        self,
        *,
        tenant_id: str,
        params: MarkAttendanceParams,
        recorded_by: str,
        now: datetime,
    ) -> AttendanceRecord:
        """Insert or update on the (team_member_id, work_date) key in one atomic step.

        An existing row keeps its id and created_at. A key that belongs to
        another tenant is never updated.
        """

        raise NotImplementedError

    def delete(self, *, tenant_id: str, attendance_id: str) -> bool:
        raise NotImplementedError
