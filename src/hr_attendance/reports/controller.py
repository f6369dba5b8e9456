from __future__ import annotations

from flask import Flask, request

from ..common.http import json_endpoint, query_date
from ..common.validators import parse_id_list, require_positive_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.report_service

    @app.route("/api/attendance/work-stats/<int:employee_id>", methods=["GET"], endpoint="report_work_stats")
    @json_endpoint
    def work_stats(employee_id: int):
        return {"stats": svc.work_stats(employee_id, start=query_date("start_date"), end=query_date("end_date"))}

    @app.route("/api/attendance/work-stats", methods=["GET"], endpoint="report_bulk_work_stats")
    @json_endpoint
    def bulk_work_stats():
        return svc.bulk_work_stats(
            employee_ids=parse_id_list(request.args.get("employee_ids"), "employee_ids"),
            department_ids=parse_id_list(request.args.get("department_ids"), "department_ids"),
            start=query_date("start_date"),
            end=query_date("end_date"),
        )

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="report_attendance_stats")
    @json_endpoint
    def attendance_stats():
        return svc.attendance_stats(
            start=query_date("start_date"),
            end=query_date("end_date"),
            department_ids=parse_id_list(request.args.get("department_ids"), "department_ids"),
        )

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="report_summary")
    @json_endpoint
    def summary():
        start = query_date("start_date") or svc.today()
        end = query_date("end_date") or start
        return svc.attendance_summary(
            start=start,
            end=end,
            department_ids=parse_id_list(request.args.get("department_ids"), "department_ids"),
        )

    @app.route("/api/attendance/report", methods=["GET"], endpoint="report_detailed")
    @json_endpoint
    def detailed():
        day = query_date("date")
        today = svc.today()
        year = request.args.get("year") or (day or today).year
        month = request.args.get("month") or (day or today).month
        return svc.detailed_report(
            year=require_positive_int(year, "year"),
            month=require_positive_int(month, "month"),
            day=day,
            department_ids=parse_id_list(request.args.get("department_ids"), "department_ids"),
        )
