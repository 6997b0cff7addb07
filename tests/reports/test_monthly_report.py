from datetime import date, time

import pytest

from src.staff_attendance.staff_attendance.core.enums import AttendanceStatus
from src.staff_attendance.staff_attendance.reports.service import AttendanceReportService, StatusSummary

from conftest import TENANT, make_record


@pytest.fixture
def report_service(attendance_service, team_members, shifts):
    return AttendanceReportService(attendance_service, team_members, shifts)


@pytest.fixture
def september(attendance_repo):
    def d(day):
        return date(2025, 9, day)

    for record in (
        make_record("m-day", d(1), AttendanceStatus.LATE, clock_in_time=time(10, 30)),
        make_record("m-day", d(2), AttendanceStatus.ON_TIME),
        make_record("m-day", d(3), AttendanceStatus.LEFT_EARLY, clock_out_time=time(17, 0)),
        make_record("m-day", d(4), AttendanceStatus.DAY_OFF, notes="vacation"),
        make_record(
            "m-eve", d(1), AttendanceStatus.LATE_AND_LEFT_EARLY, clock_in_time=time(18, 30), clock_out_time=time(1, 0)
        ),
        make_record("m-eve", d(2), AttendanceStatus.NO_SHOW),
        make_record("m-night", d(1), AttendanceStatus.LATE, clock_in_time=time(2, 30)),
        make_record("m-none", d(1), AttendanceStatus.LATE, clock_in_time=time(10, 30)),
        make_record("m-gone", d(1), AttendanceStatus.LATE, clock_in_time=time(12, 0)),
        make_record("m-day", date(2025, 10, 1), AttendanceStatus.LATE, clock_in_time=time(11, 0)),
    ):
        attendance_repo.add(record)


def _rows_by_member(report):
    return {row["team_member_id"]: row for row in report.rows}


def test_monthly_report_rows(report_service, september):
    report = report_service.build_monthly_report(tenant_id=TENANT, year_month="2025-09")
    rows = _rows_by_member(report)

    assert set(rows) == {"m-day", "m-eve", "m-night", "m-none"}

    day = rows["m-day"]
    assert day["worked_days"] == 3
    assert day["missed_hours"] == 1.5
    assert day["status_counts"]["day_off"] == 1
    assert day["days"]["2025-09-01"] == "late"
    assert "2025-10-01" not in day["days"]
    assert day["shift_name"] == "Day Shift"

    # 30 minutes late plus leaving at 01:00 on an 18:00-02:00 shift.
    assert rows["m-eve"]["missed_hours"] == 1.5
    assert rows["m-eve"]["worked_days"] == 1
    assert rows["m-eve"]["status_counts"]["no_show"] == 1

    assert rows["m-night"]["missed_hours"] == 0.5
    assert rows["m-none"]["missed_hours"] == 0
    assert rows["m-none"]["shift_name"] is None


def test_monthly_report_summary_counts_combined_twice(report_service, september):
    summary = report_service.build_monthly_report(tenant_id=TENANT, year_month="2025-09").summary

    assert summary == StatusSummary(on_time=1, late_arrivals=4, left_early=2, day_off=1, no_show=1)


def test_monthly_report_filters_roster(report_service, september):
    by_shift = report_service.build_monthly_report(tenant_id=TENANT, year_month="2025-09", shift_code="6-2")
    assert [row["team_member_id"] for row in by_shift.rows] == ["m-eve"]

    by_name = report_service.build_monthly_report(tenant_id=TENANT, year_month="2025-09", search="nora")
    assert [row["team_member_id"] for row in by_name.rows] == ["m-night"]
    assert by_name.summary.late_arrivals == 1


def test_member_without_records_gets_an_empty_row(report_service):
    rows = _rows_by_member(report_service.build_monthly_report(tenant_id=TENANT, year_month="2025-09"))

    assert rows["m-day"]["worked_days"] == 0
    assert rows["m-day"]["missed_hours"] == 0
    assert rows["m-day"]["days"] == {}


def test_daily_summary(report_service, september):
    summary = report_service.daily_summary(tenant_id=TENANT, work_date=date(2025, 9, 1))
    assert summary.late_arrivals == 5
    assert summary.left_early == 1

    evening = report_service.daily_summary(tenant_id=TENANT, work_date=date(2025, 9, 1), shift_code="6-2")
    assert evening.to_dict() == {"on_time": 0, "late_arrivals": 1, "left_early": 1, "day_off": 0, "no_show": 0}
