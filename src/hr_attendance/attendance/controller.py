from __future__ import annotations

from flask import Flask, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, current_role, json_endpoint, payload, query_date
from ..common.validators import parse_bool, require_non_empty, require_positive_int
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceRecord


def _record_json(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "employee_id": r.employee_id,
        "date": r.anchor_date.isoformat(),
        "shift": r.shift_kind.value,
        "check_in": r.check_in.isoformat() if r.check_in else None,
        "check_out": r.check_out.isoformat() if r.check_out else None,
        "status": r.status.value,
        "is_status_updated": r.is_status_updated,
        "manually_created": r.manually_created,
        "is_auto_checkout": r.is_auto_checkout,
        "late_reason": r.late_reason,
        "remarks": r.remarks,
    }


def _employee_id(data: dict) -> int:
    value = data.get("employee_id", session.get("employee_id"))
    if value is None:
        raise ValidationError("employee_id is required")
    return require_positive_int(value, "employee_id")


def _status(value) -> AttendanceStatus | None:
    if value in (None, ""):
        return None
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown attendance status: {value!r}") from exc


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @json_endpoint
    def checkin():
        data = payload()
        record = svc.check_in(_employee_id(data), late_reason=data.get("late_reason"))
        return {"message": "Check-in successful", "attendance": _record_json(record)}, 201

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @json_endpoint
    def checkout():
        record = svc.check_out(_employee_id(payload()))
        return {"message": "Check-out successful", "attendance": _record_json(record)}

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @json_endpoint
    @admin_required
    def create_manual():
        data = payload()
        record = svc.create_manual(
            current_role=current_role(),
            employee_id=require_positive_int(data.get("employee_id"), "employee_id"),
            anchor_date=parse_iso_date(require_non_empty(data.get("date"), "date")),
            check_in=require_non_empty(data.get("check_in"), "check_in"),
            check_out=data.get("check_out"),
            status=_status(data.get("status")),
            remarks=data.get("remarks"),
        )
        return {"message": "Attendance record created", "attendance": _record_json(record)}, 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_update")
    @json_endpoint
    @admin_required
    def update(attendance_id: int):
        data = payload()
        record = svc.update_record(
            current_role=current_role(),
            attendance_id=attendance_id,
            check_in=data.get("check_in"),
            check_out=data.get("check_out"),
            status=_status(data.get("status")),
            remarks=data.get("remarks"),
        )
        return {"message": "Attendance record updated", "attendance": _record_json(record)}

    @app.route("/api/attendance/employee/<int:employee_id>", methods=["GET"], endpoint="attendance_history")
    @json_endpoint
    def history(employee_id: int):
        limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT)
        records = svc.get_history(
            employee_id,
            limit=require_positive_int(limit, "limit"),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return {"records": records}

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @json_endpoint
    def get_record(attendance_id: int):
        return {"attendance": _record_json(svc.get_record(attendance_id))}

    @app.route("/api/attendance/auto-checkout", methods=["POST"], endpoint="attendance_auto_checkout")
    @json_endpoint
    @admin_required
    def auto_checkout():
        data = payload()
        result = container.auto_checkout_job.run(process_all=parse_bool(data.get("process_all", False)))
        return {"result": result.to_dict()}
