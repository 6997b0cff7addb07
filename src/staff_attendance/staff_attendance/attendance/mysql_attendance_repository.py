from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from ..common.datetime_utils import parse_clock_time
from ..core.enums import AttendanceStatus
from ..core.exceptions import WriteError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, reading, writing
from .model import AttendanceRecord, MarkAttendanceParams
from .repository import AttendanceRepository

_COLUMNS = """
    id, tenant_id, team_member_id, work_date, status,
    clock_in_time, clock_out_time, notes, recorded_by, created_at, updated_at
"""


def _to_record(r: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["id"]),
        tenant_id=str(r["tenant_id"]),
        team_member_id=str(r["team_member_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        clock_in_time=parse_clock_time(r.get("clock_in_time")),
        clock_out_time=parse_clock_time(r.get("clock_out_time")),
        notes=r.get("notes"),
        recorded_by=str(r["recorded_by"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, max_page_size: int = 1000):
        self._conn_factory = conn_factory
        self._max_page_size = int(max_page_size)

    @property
    def max_page_size(self) -> int:
        return self._max_page_size

    def list_for_date(self, *, tenant_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        with reading("fetch daily attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE tenant_id=%s AND work_date=%s
                ORDER BY created_at DESC
                """,
                (tenant_id, work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_range_page(
        self,
        *,
        tenant_id: str,
        start_date: date,
        end_date: date,
        offset: int,
        limit: int,
    ) -> Sequence[AttendanceRecord]:
        limit = min(int(limit), self._max_page_size)
        with reading("fetch attendance page"), db_cursor(self._conn_factory) as (_, cur):
            # id breaks ties so consecutive pages never overlap.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE tenant_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC, id ASC
                LIMIT %s OFFSET %s
                """,
                (tenant_id, start_date, end_date, limit, int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def upsert(
        self,
        *,
        tenant_id: str,
        params: MarkAttendanceParams,
        recorded_by: str,
        now: datetime,
    ) -> AttendanceRecord:
        with writing("save attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    id, tenant_id, team_member_id, work_date, status,
                    clock_in_time, clock_out_time, notes, recorded_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    clock_in_time=VALUES(clock_in_time),
                    clock_out_time=VALUES(clock_out_time),
                    notes=VALUES(notes),
                    recorded_by=VALUES(recorded_by),
                    updated_at=VALUES(updated_at)
                """,
                (
                    str(uuid.uuid4()),
                    tenant_id,
                    params.team_member_id,
                    params.work_date,
                    params.status.value,
                    params.clock_in_time,
                    params.clock_out_time,
                    params.notes,
                    recorded_by,
                    now,
                    now,
                ),
            )
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE tenant_id=%s AND team_member_id=%s AND work_date=%s
                """,
                (tenant_id, params.team_member_id, params.work_date),
            )
            row = fetchone(cur)
            if row is None:
                # The key is held by another tenant; raising rolls the update back.
                raise WriteError(
                    f"Attendance for {params.team_member_id} on {params.work_date} belongs to another tenant"
                )
            return _to_record(row)

    def delete(self, *, tenant_id: str, attendance_id: str) -> bool:
        with writing("delete attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE tenant_id=%s AND id=%s",
                (tenant_id, attendance_id),
            )
            return cur.rowcount > 0
