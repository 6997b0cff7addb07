from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import format_clock_time, parse_clock_time, parse_iso_date, today_in
from ..common.validators import require_enum, require_non_empty
from ..container import Container
from ..core.enums import AttendanceStatus, StatusFlag
from ..core.exceptions import AttendanceError, ValidationError
from .model import AttendanceRecord, MarkAttendanceParams


def record_to_json(r: AttendanceRecord) -> dict[str, Any]:
    return {
        "id": r.id,
        "team_member_id": r.team_member_id,
        "date": r.work_date.isoformat(),
        "status": r.status.value,
        "clock_in_time": format_clock_time(r.clock_in_time),
        "clock_out_time": format_clock_time(r.clock_out_time),
        "notes": r.notes,
        "recorded_by": r.recorded_by,
        "created_at": r.created_at.isoformat(),
        "updated_at": r.updated_at.isoformat(),
    }


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            return view(*args, **kwargs)

        return wrapper

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except AttendanceError as e:
                app.logger.warning("Attendance %s error: %s", e.kind.value, e)
                return jsonify({"success": False, "message": str(e), "kind": e.kind.value, "retryable": True}), 503

        return wrapper

    def _actor() -> str:
        return str(session["user_id"])

    def _tenant() -> str:
        return require_non_empty(session.get("tenant_id") or app.config.get("TENANT_ID"), "tenant_id")

    def _body() -> dict:
        return request.get_json(silent=True) or {}

    def _day(value: Optional[str]):
        return parse_iso_date(value) if value else today_in(container.org_timezone)

    def _sheet_response(state):
        payload = {"success": state.error is None, "state": state.to_dict()}
        return jsonify(payload), (200 if state.error is None else 503)

    @app.route("/api/attendance/daily", methods=["GET"], endpoint="attendance_daily")
    @login_required
    @json_errors
    def attendance_daily():
        work_date = _day(request.args.get("date"))
        records = container.attendance_service.fetch_daily(tenant_id=_tenant(), work_date=work_date)
        return jsonify({"success": True, "date": work_date.isoformat(), "records": [record_to_json(r) for r in records]})

    @app.route("/api/attendance/monthly", methods=["GET"], endpoint="attendance_monthly")
    @login_required
    @json_errors
    def attendance_monthly():
        month = request.args.get("month") or today_in(container.org_timezone).strftime("%Y-%m")
        records = container.attendance_service.fetch_monthly(tenant_id=_tenant(), year_month=month)
        return jsonify({"success": True, "month": month, "records": [record_to_json(r) for r in records]})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    @login_required
    @json_errors
    def attendance_mark():
        data = _body()
        params = MarkAttendanceParams(
            team_member_id=require_non_empty(data.get("team_member_id"), "team_member_id"),
            work_date=parse_iso_date(data.get("date")),
            status=require_enum(AttendanceStatus, data.get("status"), "status"),
            clock_in_time=parse_clock_time(data.get("clock_in_time")),
            clock_out_time=parse_clock_time(data.get("clock_out_time")),
            notes=data.get("notes"),
        )
        tenant_id = _tenant()
        record = container.attendance_service.mark_attendance(params, tenant_id=tenant_id, actor_id=_actor())
        container.sheets.refresh(tenant_id, record.work_date)
        return jsonify({"success": True, "record": record_to_json(record)})

    @app.route("/api/attendance/<attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    @json_errors
    def attendance_delete(attendance_id: str):
        tenant_id = _tenant()
        if not container.attendance_service.delete_attendance(attendance_id, tenant_id=tenant_id):
            return jsonify({"success": False, "message": "Attendance record not found"}), 404
        container.sheets.refresh(tenant_id)
        return jsonify({"success": True})

    @app.route("/api/attendance/sheet/<day>", methods=["GET"], endpoint="attendance_sheet")
    @login_required
    @json_errors
    def attendance_sheet(day: str):
        tenant_id = _tenant()
        sheet = container.sheets.get(tenant_id, parse_iso_date(day))
        members = container.team_members_repo.list_active(
            tenant_id=tenant_id,
            shift_code=request.args.get("shift") or None,
            search=request.args.get("search") or None,
        )
        states = sheet.display_states(m.id for m in members)
        return jsonify(
            {
                "success": sheet.fetch_error is None,
                "date": sheet.work_date.isoformat(),
                "fetch_error": sheet.fetch_error,
                "members": [
                    {"full_name": m.full_name, "shift_code": m.shift_code, **s.to_dict()}
                    for m, s in zip(members, states)
                ],
            }
        )

    @app.route("/api/attendance/sheet/<day>/members/<member_id>", methods=["GET"], endpoint="attendance_display_state")
    @login_required
    @json_errors
    def attendance_display_state(day: str, member_id: str):
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.get_display_state(member_id))

    @app.route("/api/attendance/sheet/<day>/members/<member_id>", methods=["DELETE"], endpoint="attendance_sheet_delete")
    @login_required
    @json_errors
    def attendance_sheet_delete(day: str, member_id: str):
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.delete(member_id))

    @app.route("/api/attendance/sheet/<day>/members/<member_id>/flags", methods=["POST"], endpoint="attendance_toggle_flag")
    @login_required
    @json_errors
    def attendance_toggle_flag(day: str, member_id: str):
        flag = require_enum(StatusFlag, _body().get("flag"), "flag")
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.toggle_flag(member_id, flag, actor_id=_actor()))

    @app.route("/api/attendance/sheet/<day>/members/<member_id>/status", methods=["POST"], endpoint="attendance_select_status")
    @login_required
    @json_errors
    def attendance_select_status(day: str, member_id: str):
        status = require_enum(AttendanceStatus, _body().get("status"), "status")
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.select_status(member_id, status, actor_id=_actor()))

    @app.route("/api/attendance/sheet/<day>/members/<member_id>/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    @json_errors
    def attendance_clock_in(day: str, member_id: str):
        value = parse_clock_time(_body().get("time"))
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.change_clock_in(member_id, value, actor_id=_actor()))

    @app.route("/api/attendance/sheet/<day>/members/<member_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    @json_errors
    def attendance_clock_out(day: str, member_id: str):
        value = parse_clock_time(_body().get("time"))
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.change_clock_out(member_id, value, actor_id=_actor()))

    @app.route("/api/attendance/sheet/<day>/members/<member_id>/notes", methods=["POST"], endpoint="attendance_notes")
    @login_required
    @json_errors
    def attendance_notes(day: str, member_id: str):
        notes = _body().get("notes")
        sheet = container.sheets.get(_tenant(), parse_iso_date(day))
        return _sheet_response(sheet.change_notes(member_id, notes, actor_id=_actor()))

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    @json_errors
    def attendance_summary():
        work_date = _day(request.args.get("date"))
        summary = container.report_service.daily_summary(
            tenant_id=_tenant(), work_date=work_date, shift_code=request.args.get("shift") or None
        )
        return jsonify({"success": True, "date": work_date.isoformat(), "summary": summary.to_dict()})

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @login_required
    @json_errors
    def attendance_report():
        month = request.args.get("month") or today_in(container.org_timezone).strftime("%Y-%m")
        report = container.report_service.build_monthly_report(
            tenant_id=_tenant(),
            year_month=month,
            shift_code=request.args.get("shift") or None,
            search=request.args.get("search") or None,
        )
        return jsonify({"success": True, "month": month, "rows": report.rows, "summary": report.summary.to_dict()})
