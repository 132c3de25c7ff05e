from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import caller_from_request, int_value, json_body, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/employees", methods=["POST"], endpoint="onboard_employee")
    def onboard_employee():
        data = json_body()
        result = service.onboard_employee(
            caller_from_request(),
            employee_code=data.get("employeeCode") or "",
            full_name=data.get("fullName") or "",
            department=data.get("department"),
            designation=data.get("designation"),
            basic_salary=data.get("basicSalary", 0),
            manager_id=int_value(data.get("managerId"), "managerId"),
            user_id=int_value(data.get("userId"), "userId"),
        )
        return jsonify(to_json(result)), 201

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="get_employee")
    def get_employee(employee_id: int):
        return jsonify(to_json(service.get_employee(caller_from_request(), employee_id)))

    @app.route("/api/employees/<int:employee_id>/status", methods=["POST"], endpoint="set_employee_status")
    def set_employee_status(employee_id: int):
        employee = service.set_status(caller_from_request(), employee_id, json_body().get("status"))
        return jsonify(to_json(employee))

    @app.route("/api/employees/<int:employee_id>/salary", methods=["POST"], endpoint="set_employee_salary")
    def set_employee_salary(employee_id: int):
        employee = service.set_basic_salary(caller_from_request(), employee_id, json_body().get("basicSalary"))
        return jsonify(to_json(employee))
