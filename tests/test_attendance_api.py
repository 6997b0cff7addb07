from datetime import date, time

import pytest
from flask import Flask

from src.staff_attendance.staff_attendance.attendance.controller import register
from src.staff_attendance.staff_attendance.attendance.sheet import AttendanceSheetRegistry
from src.staff_attendance.staff_attendance.autosave.registry import TaskRegistry
from src.staff_attendance.staff_attendance.container import Container
from src.staff_attendance.staff_attendance.core.enums import AttendanceStatus
from src.staff_attendance.staff_attendance.core.exceptions import FetchError, WriteError
from src.staff_attendance.staff_attendance.reports.service import AttendanceReportService

from conftest import ACTOR, TENANT, make_record

DAY = "2025-09-15"


@pytest.fixture
def app(attendance_repo, attendance_service, team_members, shifts, timers):
    container = Container(
        conn=None,
        org_timezone="America/New_York",
        team_members_repo=team_members,
        shifts_repo=shifts,
        attendance_repo=attendance_repo,
        attendance_service=attendance_service,
        report_service=AttendanceReportService(attendance_service, team_members, shifts),
        sheets=AttendanceSheetRegistry(attendance_service, registry_factory=lambda: TaskRegistry(timers)),
    )
    app = Flask(__name__)
    app.secret_key = "test"
    app.config["TENANT_ID"] = TENANT
    register(app, container)
    return app


@pytest.fixture
def client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = ACTOR
    return client


def test_requires_login(app):
    resp = app.test_client().get("/api/attendance/daily")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_mark_attendance_twice_keeps_one_record(client, attendance_repo):
    body = {"team_member_id": "m-day", "date": DAY, "status": "on_time"}

    first = client.post("/api/attendance", json=body).get_json()
    second = client.post("/api/attendance", json=body).get_json()

    assert first["success"] and second["success"]
    assert first["record"]["id"] == second["record"]["id"]
    assert len(attendance_repo.all()) == 1


def test_mark_attendance_validation(client):
    resp = client.post("/api/attendance", json={"team_member_id": "m-day", "date": DAY, "status": "late"})
    assert resp.status_code == 400
    assert "clock_in_time" in resp.get_json()["message"]

    resp = client.post("/api/attendance", json={"team_member_id": "m-day", "date": DAY, "status": "present"})
    assert resp.status_code == 400


def test_storage_errors_are_retryable(client, attendance_service, monkeypatch):
    def boom(*args, **kwargs):
        raise WriteError("Could not save attendance: lock wait timeout")

    monkeypatch.setattr(attendance_service, "mark_attendance", boom)
    resp = client.post("/api/attendance", json={"team_member_id": "m-day", "date": DAY, "status": "on_time"})

    assert resp.status_code == 503
    payload = resp.get_json()
    assert payload["kind"] == "write"
    assert payload["retryable"] is True


def test_monthly_fetch_error_is_reported_as_fetch(client, attendance_service, monkeypatch):
    def boom(**kwargs):
        raise FetchError("Could not fetch attendance page: timeout")

    monkeypatch.setattr(attendance_service, "fetch_monthly", boom)
    resp = client.get("/api/attendance/monthly?month=2025-09")

    assert resp.status_code == 503
    assert resp.get_json()["kind"] == "fetch"


def test_daily_and_monthly_listing(client, attendance_repo):
    attendance_repo.add(make_record("m-day", date(2025, 9, 15), AttendanceStatus.LATE, clock_in_time=time(10, 45)))
    attendance_repo.add(make_record("m-eve", date(2025, 9, 16), AttendanceStatus.NO_SHOW))

    daily = client.get(f"/api/attendance/daily?date={DAY}").get_json()
    assert [r["team_member_id"] for r in daily["records"]] == ["m-day"]
    assert daily["records"][0]["clock_in_time"] == "10:45"

    monthly = client.get("/api/attendance/monthly?month=2025-09").get_json()
    assert len(monthly["records"]) == 2


def test_delete_attendance(client, attendance_repo):
    record = attendance_repo.add(make_record("m-day", date(2025, 9, 15), AttendanceStatus.ON_TIME))

    assert client.delete(f"/api/attendance/{record.id}").status_code == 200
    assert client.delete(f"/api/attendance/{record.id}").status_code == 404


def test_sheet_flag_then_clock_in_autosaves(client, attendance_repo, timers):
    base = f"/api/attendance/sheet/{DAY}/members/m-day"

    state = client.post(f"{base}/flags", json={"flag": "late"}).get_json()["state"]
    assert state["status"] == "late"
    assert state["is_submitted"] is False

    client.post(f"{base}/clock-in", json={"time": "10:45"})
    assert attendance_repo.upserts == []
    timers.advance(600)

    state = client.get(base).get_json()["state"]
    assert state["is_submitted"] is True
    assert state["clock_in_time"] == "10:45"


def test_sheet_select_status_and_notes(client, attendance_repo, timers):
    base = f"/api/attendance/sheet/{DAY}/members/m-eve"

    state = client.post(f"{base}/status", json={"status": "day_off"}).get_json()["state"]
    assert state["status"] == "day_off"

    for text in ("a", "ap", "approved"):
        client.post(f"{base}/notes", json={"notes": text})
    timers.advance(600)

    assert [p.notes for p in attendance_repo.upserts] == [None, "approved"]


def test_sheet_rejects_flag_status_selection(client):
    resp = client.post(f"/api/attendance/sheet/{DAY}/members/m-day/status", json={"status": "late"})
    assert resp.status_code == 400


def test_sheet_roster_filters(client, attendance_repo):
    attendance_repo.add(make_record("m-eve", date(2025, 9, 15), AttendanceStatus.ON_TIME))

    payload = client.get(f"/api/attendance/sheet/{DAY}?shift=6-2").get_json()

    assert [m["team_member_id"] for m in payload["members"]] == ["m-eve"]
    assert payload["members"][0]["status"] == "on_time"
    assert payload["members"][0]["full_name"] == "Evan Evening"


def test_post_refreshes_open_sheet(client):
    client.get(f"/api/attendance/sheet/{DAY}")
    client.post("/api/attendance", json={"team_member_id": "m-day", "date": DAY, "status": "no_show"})

    state = client.get(f"/api/attendance/sheet/{DAY}/members/m-day").get_json()["state"]
    assert state["status"] == "no_show"


def test_report_and_summary(client, attendance_repo):
    attendance_repo.add(make_record("m-day", date(2025, 9, 15), AttendanceStatus.LATE, clock_in_time=time(10, 30)))

    report = client.get("/api/attendance/report?month=2025-09").get_json()
    row = next(r for r in report["rows"] if r["team_member_id"] == "m-day")
    assert row["missed_hours"] == 0.5
    assert report["summary"]["late_arrivals"] == 1

    summary = client.get(f"/api/attendance/summary?date={DAY}").get_json()["summary"]
    assert summary["late_arrivals"] == 1


def test_sheet_recovers_after_failed_first_read(client, attendance_repo, monkeypatch):
    attendance_repo.add(make_record("m-day", date(2025, 9, 15), AttendanceStatus.ON_TIME))
    list_for_date = attendance_repo.list_for_date
    calls = []

    def flaky_list_for_date(**kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            raise FetchError("Could not fetch daily attendance: server has gone away")
        return list_for_date(**kwargs)

    monkeypatch.setattr(attendance_repo, "list_for_date", flaky_list_for_date)

    first = client.get(f"/api/attendance/sheet/{DAY}").get_json()
    assert first["success"] is False
    assert "gone away" in first["fetch_error"]

    second = client.get(f"/api/attendance/sheet/{DAY}").get_json()
    assert second["success"] is True
    assert second["fetch_error"] is None
    day = next(m for m in second["members"] if m["team_member_id"] == "m-day")
    assert day["status"] == "on_time"
    assert day["is_submitted"] is True


def test_other_tenants_rows_are_untouchable(client, attendance_repo):
    other = attendance_repo.add(make_record("m-day", date(2025, 9, 15), AttendanceStatus.NO_SHOW, tenant_id="other"))

    resp = client.post("/api/attendance", json={"team_member_id": "m-day", "date": DAY, "status": "on_time"})
    assert resp.status_code == 503
    assert resp.get_json()["kind"] == "write"

    assert client.delete(f"/api/attendance/{other.id}").status_code == 404
    assert attendance_repo.all() == [other]
