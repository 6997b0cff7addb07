from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .attendance.sheet import AttendanceSheetRegistry
from .attendance.status_machine import StatusStateMachine
from .core.constants import DEFAULT_AUTOSAVE_DELAY_MS, DEFAULT_MONTHLY_PAGE_SIZE, DEFAULT_ORG_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceReportService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .team_members.mysql_team_member_repository import MySQLTeamMemberRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    org_timezone: str

    team_members_repo: MySQLTeamMemberRepository
    shifts_repo: MySQLShiftRepository
    attendance_repo: MySQLAttendanceRepository

    attendance_service: AttendanceService
    report_service: AttendanceReportService
    sheets: AttendanceSheetRegistry


def build_container(
    *,
    db_config: dict,
    page_size: int = DEFAULT_MONTHLY_PAGE_SIZE,
    autosave_delay_ms: int = DEFAULT_AUTOSAVE_DELAY_MS,
    org_timezone: str = DEFAULT_ORG_TIMEZONE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    team_members_repo = MySQLTeamMemberRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn, max_page_size=page_size)

    state_machine = StatusStateMachine()
    attendance_service = AttendanceService(attendance_repo, state_machine=state_machine, page_size=page_size)
    report_service = AttendanceReportService(
        attendance_service, team_members_repo, shifts_repo, state_machine=state_machine
    )
    sheets = AttendanceSheetRegistry(attendance_service, autosave_delay_ms=autosave_delay_ms)

    return Container(
        conn=conn,
        org_timezone=org_timezone,
        team_members_repo=team_members_repo,
        shifts_repo=shifts_repo,
        attendance_repo=attendance_repo,
        attendance_service=attendance_service,
        report_service=report_service,
        sheets=sheets,
    )
