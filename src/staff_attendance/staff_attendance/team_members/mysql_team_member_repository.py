from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, reading
from .model import TeamMember
from .repository import TeamMemberRepository


def _to_member(row: Mapping[str, Any]) -> TeamMember:
    return TeamMember(
        id=str(row["id"]),
        full_name=row["full_name"],
        shift_code=row.get("shift_code"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLTeamMemberRepository(TeamMemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(
        self,
        *,
        tenant_id: str,
        shift_code: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[TeamMember]:
        clauses = ["tenant_id=%s", "is_active=1"]
        params: list[object] = [tenant_id]

        if shift_code:
            clauses.append("shift_code=%s")
            params.append(shift_code)
        if search and search.strip():
            clauses.append("LOWER(full_name) LIKE %s")
            params.append(f"%{search.strip().lower()}%")

        where = " AND ".join(clauses)

        with reading("list team members"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, full_name, shift_code, is_active
                FROM team_members
                WHERE {where}
                ORDER BY full_name
                """,
                tuple(params),
            )
            return [_to_member(r) for r in fetchall(cur)]
