from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local, parse_year_month
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_MONTHLY_PAGE_SIZE
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, MarkAttendanceParams
from .repository import AttendanceRepository
from .status_machine import StatusStateMachine

logger = logging.getLogger(__name__)


class AttendanceService:
    """Reads and writes attendance records for one storage backend.

    Storage failures surface as FetchError / WriteError from the repository;
    every call is safe to retry because writes are upserts on the natural key.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        state_machine: Optional[StatusStateMachine] = None,
        page_size: int = DEFAULT_MONTHLY_PAGE_SIZE,
        clock: Callable[[], datetime] = now_local,
    ):
        if int(page_size) <= 0:
            raise ValueError("page_size must be positive")
        self._attendance = attendance
        self._machine = state_machine or StatusStateMachine()
        # Short-page detection only works below the backend's own cap.
        self._page_size = min(int(page_size), int(attendance.max_page_size))
        self._clock = clock

    @property
    def page_size(self) -> int:
        return self._page_size

    def fetch_daily(self, *, tenant_id: str, work_date: date) -> list[AttendanceRecord]:
        records = list(self._attendance.list_for_date(tenant_id=tenant_id, work_date=work_date))
        logger.debug("Fetched %s attendance record(s) for %s", len(records), work_date)
        return records

    def fetch_monthly(self, *, tenant_id: str, year_month: str) -> list[AttendanceRecord]:
        """Every record of the month, paging past the storage page cap.

        Pages are requested one after another; a page shorter than the page
        size (or empty) marks the end of the data.
        """
        start_date, end_date = parse_year_month(year_month)

        records: list[AttendanceRecord] = []
        offset = 0
        pages = 0
        while True:
            page = list(
                self._attendance.list_range_page(
                    tenant_id=tenant_id,
                    start_date=start_date,
                    end_date=end_date,
                    offset=offset,
                    limit=self._page_size,
                )
            )
            pages += 1
            records.extend(page)
            logger.debug("Page %s at offset %s returned %s record(s)", pages, offset, len(page))

            if len(page) < self._page_size:
                break
            offset += self._page_size

        logger.info(
            "Fetched %s attendance record(s) for %s (%s to %s) in %s page(s)",
            len(records), year_month, start_date, end_date, pages,
        )
        return records

    def mark_attendance(self, params: MarkAttendanceParams, *, tenant_id: str, actor_id: str) -> AttendanceRecord:
        require_non_empty(params.team_member_id, "team_member_id")
        tenant_id = require_non_empty(tenant_id, "tenant_id")
        actor_id = require_non_empty(actor_id, "actor_id")

        normalized = self._machine.normalize(params)
        incomplete = self._machine.check_selection(
            normalized.status,
            clock_in_time=normalized.clock_in_time,
            clock_out_time=normalized.clock_out_time,
        )
        if incomplete:
            raise ValidationError(f"{incomplete.status.value} requires {', '.join(incomplete.missing)}")

        record = self._attendance.upsert(
            tenant_id=tenant_id,
            params=normalized,
            recorded_by=actor_id,
            now=self._clock(),
        )
        logger.info(
            "Marked %s as %s on %s (record %s)",
            record.team_member_id, record.status.value, record.work_date, record.id,
        )
        return record

    def delete_attendance(self, attendance_id: str, *, tenant_id: str) -> bool:
        attendance_id = require_non_empty(attendance_id, "attendance_id")
        tenant_id = require_non_empty(tenant_id, "tenant_id")
        deleted = self._attendance.delete(tenant_id=tenant_id, attendance_id=attendance_id)
        if deleted:
            logger.info("Deleted attendance record %s", attendance_id)
        return deleted
