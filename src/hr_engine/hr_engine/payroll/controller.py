from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import bool_value, caller_from_request, int_value, json_body, to_json
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    engine = container.payroll_engine

    @app.route("/api/payslips/generate", methods=["POST"], endpoint="generate_payslip")
    def generate_payslip():
        data = json_body()
        employee_id = int_value(data.get("employeeId"), "employeeId")
        if employee_id is None:
            raise ValidationError("employeeId, month and year are required")
        payslip = engine.generate_payslip(
            caller_from_request(),
            employee_id,
            data.get("month"),
            data.get("year"),
            overwrite_published=bool_value(data.get("overwritePublished"), "overwritePublished"),
        )
        return jsonify(to_json(payslip))

    @app.route("/api/payslips/<int:payslip_id>/publish", methods=["POST"], endpoint="publish_payslip")
    def publish_payslip(payslip_id: int):
        return jsonify(to_json(engine.publish_payslip(caller_from_request(), payslip_id)))

    @app.route("/api/payslips", methods=["GET"], endpoint="list_payslips")
    def list_payslips():
        payslips = engine.list_payslips(
            caller_from_request(),
            month=int_value(request.args.get("month"), "month"),
            year=int_value(request.args.get("year"), "year"),
            employee_id=int_value(request.args.get("employeeId"), "employeeId"),
        )
        return jsonify(to_json(payslips))

    @app.route("/api/payslips/<int:payslip_id>", methods=["GET"], endpoint="get_payslip")
    def get_payslip(payslip_id: int):
        return jsonify(to_json(engine.get_payslip(caller_from_request(), payslip_id)))
