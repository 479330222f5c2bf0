from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.http import json_body, json_endpoint, query_date
from ..common.validators import require_month, require_year
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    aggregator = container.attendance_aggregator

    @app.route("/api/attendance/<int:employee_id>/check-in", methods=["POST"], endpoint="attendance_check_in")
    @json_endpoint
    def attendance_check_in(employee_id: int):
        record = service.record_check_in(employee_id, notes=str(json_body().get("notes") or ""))
        return jsonify({"success": True, "message": "Checked in", "record": record.to_dict()}), 201

    @app.route("/api/attendance/<int:employee_id>/check-out", methods=["POST"], endpoint="attendance_check_out")
    @json_endpoint
    def attendance_check_out(employee_id: int):
        record = service.record_check_out(employee_id, notes=str(json_body().get("notes") or ""))
        return jsonify({"success": True, "message": "Checked out", "record": record.to_dict()})

    @app.route("/api/attendance/<int:employee_id>/status", methods=["GET"], endpoint="attendance_status")
    @json_endpoint
    def attendance_status(employee_id: int):
        status, record = service.today_status(employee_id)
        return jsonify({"status": status.value, "record": record.to_dict() if record else None})

    @app.route("/api/attendance/<int:employee_id>/history", methods=["GET"], endpoint="attendance_history")
    @json_endpoint
    def attendance_history(employee_id: int):
        page = service.history(
            employee_id,
            page=request.args.get("page", 1),
            limit=request.args.get("limit", 10),
        )
        return jsonify(page.to_dict())

    @app.route("/api/attendance/<int:employee_id>/stats", methods=["GET"], endpoint="attendance_stats")
    @json_endpoint
    def attendance_stats(employee_id: int):
        today = now_local().date()
        month = require_month(request.args.get("month") or today.month)
        year = require_year(request.args.get("year") or today.year)
        return jsonify(aggregator.stats_for(employee_id, month, year, today=today).to_dict())

    @app.route("/api/attendance/<int:employee_id>", methods=["GET"], endpoint="attendance_records")
    @json_endpoint
    def attendance_records(employee_id: int):
        if request.args.get("month") and request.args.get("year"):
            records = service.query_by_employee_and_month(
                employee_id, request.args.get("month"), request.args.get("year")
            )
            return jsonify({"records": [r.to_dict() for r in records]})

        records, summary = service.employee_records(
            employee_id,
            start=query_date("start"),
            end=query_date("end"),
        )
        return jsonify({"records": [r.to_dict() for r in records], "summary": summary})

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @json_endpoint
    def attendance_summary():
        rows = service.summary(
            month=request.args.get("month"),
            year=request.args.get("year"),
            start=query_date("start"),
            end=query_date("end"),
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/attendance/records/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @json_endpoint
    def attendance_delete(attendance_id: int):
        service.delete_record(attendance_id)
        return jsonify({"success": True, "message": "Attendance record deleted"})
