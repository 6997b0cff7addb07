from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..common.datetime_utils import parse_clock_time
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, reading
from .model import ShiftSchedule
from .repository import ShiftRepository


def _to_shift(r: Mapping[str, Any]) -> ShiftSchedule:
    return ShiftSchedule(
        shift_code=str(r["shift_code"]),
        shift_name=r["shift_name"],
        start_time=parse_clock_time(r["start_time"]),
        end_time=parse_clock_time(r["end_time"]),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ShiftSchedule]:
        with reading("list shifts"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_code, shift_name, start_time, end_time
                FROM shifts
                ORDER BY start_time
                """
            )
            return [_to_shift(r) for r in fetchall(cur)]
