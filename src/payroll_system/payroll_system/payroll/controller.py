from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import json_body, json_endpoint
from ..container import Container
from .export import XLSX_MIMETYPE, export_payslip_workbook, export_salary_csv, export_salary_workbook


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service
    reports = container.payroll_report_service
    employees = container.employees_repo

    def _records_for_export():
        month = request.args.get("month")
        year = request.args.get("year")
        if month or year:
            return payroll.list_for_period(month, year)
        return payroll.list_records()

    @app.route("/api/salary", methods=["GET"], endpoint="salary_list")
    @json_endpoint
    def salary_list():
        return jsonify([r.to_dict() for r in payroll.list_records()])

    @app.route("/api/salary", methods=["POST"], endpoint="salary_create")
    @json_endpoint
    def salary_create():
        record = payroll.create_record(json_body())
        return jsonify({"success": True, "record": record.to_dict()}), 201

    @app.route("/api/salary/period", methods=["GET"], endpoint="salary_period")
    @json_endpoint
    def salary_period():
        records = payroll.list_for_period(request.args.get("month"), request.args.get("year"))
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/salary/<int:record_id>", methods=["GET"], endpoint="salary_get")
    @json_endpoint
    def salary_get(record_id: int):
        return jsonify(payroll.get_record(record_id).to_dict())

    @app.route("/api/salary/<int:record_id>", methods=["PUT"], endpoint="salary_update")
    @json_endpoint
    def salary_update(record_id: int):
        record = payroll.update_record(record_id, json_body())
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/salary/<int:record_id>", methods=["DELETE"], endpoint="salary_delete")
    @json_endpoint
    def salary_delete(record_id: int):
        payroll.delete_record(record_id)
        return jsonify({"success": True, "message": "Salary record deleted"})

    @app.route("/api/salary/calculate", methods=["POST"], endpoint="salary_calculate")
    @json_endpoint
    def salary_calculate():
        result = payroll.calculate_batch(json_body())
        if result.success:
            status = 201
        elif result.conflicts_only:
            status = 409
        else:
            status = 200
        return jsonify(result.to_dict()), status

    @app.route("/api/salary/export/excel", methods=["GET"], endpoint="salary_export_excel")
    @json_endpoint
    def salary_export_excel():
        content = export_salary_workbook(_records_for_export())
        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="salary_records.xlsx",
        )

    @app.route("/api/salary/export/csv", methods=["GET"], endpoint="salary_export_csv")
    @json_endpoint
    def salary_export_csv():
        return app.response_class(
            export_salary_csv(_records_for_export()),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=salary_records.csv"},
        )

    @app.route("/api/salary/<int:record_id>/payslip", methods=["GET"], endpoint="salary_payslip")
    @json_endpoint
    def salary_payslip(record_id: int):
        record = payroll.get_record(record_id)
        content = export_payslip_workbook(record, employees.get_by_id(record.employee_id))
        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=f"payslip_{record.employee_id}_{record.year}_{record.month:02d}.xlsx",
        )

    @app.route("/api/reports/monthly", methods=["GET"], endpoint="reports_monthly")
    @json_endpoint
    def reports_monthly():
        return jsonify(reports.monthly(request.args.get("month"), request.args.get("year")).to_dict())

    @app.route("/api/reports/yearly", methods=["GET"], endpoint="reports_yearly")
    @json_endpoint
    def reports_yearly():
        return jsonify(reports.yearly(request.args.get("year")).to_dict())

    @app.route("/api/reports/employee/<int:employee_id>", methods=["GET"], endpoint="reports_employee")
    @json_endpoint
    def reports_employee(employee_id: int):
        return jsonify(reports.employee_history(employee_id, year=request.args.get("year")).to_dict())
