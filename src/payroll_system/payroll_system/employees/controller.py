from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, json_endpoint
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @json_endpoint
    def employees_list():
        return jsonify([e.to_dict() for e in service.list_employees()])

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @json_endpoint
    def employees_get(employee_id: int):
        return jsonify(service.get_employee(employee_id).to_dict())

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @json_endpoint
    def employees_create():
        employee = service.create_employee(json_body())
        return jsonify(employee.to_dict()), 201

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @json_endpoint
    def employees_update(employee_id: int):
        return jsonify(service.update_employee(employee_id, json_body()).to_dict())

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @json_endpoint
    def employees_delete(employee_id: int):
        service.delete_employee(employee_id)
        return jsonify({"success": True, "message": "Employee deleted"})
