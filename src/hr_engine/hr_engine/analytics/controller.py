from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.http import caller_from_request, date_value, int_value, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    analytics = container.analytics
    employees = container.employee_service

    @app.route("/api/analytics/score/<int:employee_id>", methods=["GET"], endpoint="attendance_score")
    def attendance_score(employee_id: int):
        employees.get_employee(caller_from_request(), employee_id)
        as_of = date_value(request.args.get("date"), "date", default=now_local().date())
        score = analytics.compute_attendance_score(employee_id, as_of)
        return jsonify({"employeeId": employee_id, "date": as_of.isoformat(), "attendanceScore": score})

    @app.route("/api/analytics/team", methods=["GET"], endpoint="team_snapshot")
    def team_snapshot():
        day = date_value(request.args.get("date"), "date", default=now_local().date())
        return jsonify(to_json(analytics.team_snapshot(caller_from_request(), day)))

    @app.route("/api/analytics/trends", methods=["GET"], endpoint="team_trends")
    def team_trends():
        today = date_value(request.args.get("date"), "date", default=now_local().date())
        return jsonify(to_json(analytics.team_trends(caller_from_request(), today)))

    @app.route("/api/analytics/summary/<int:employee_id>", methods=["GET"], endpoint="monthly_summary")
    def monthly_summary(employee_id: int):
        employees.get_employee(caller_from_request(), employee_id)
        today = now_local().date()
        summary = analytics.monthly_summary(
            employee_id,
            int_value(request.args.get("month"), "month", default=today.month),
            int_value(request.args.get("year"), "year", default=today.year),
        )
        return jsonify(to_json(summary))
