from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.http import caller_from_request, date_value, int_value, json_body, own_employee_id, to_json
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from .status import derive_status


def _with_status(record) -> dict:
    out = to_json(record)
    out["resolved"] = to_json(derive_status(record))
    return out


def register(app: Flask, container: Container) -> None:
    ledger = container.attendance_ledger

    @app.route("/api/attendance/mark-in", methods=["POST"], endpoint="mark_in")
    def mark_in():
        record = ledger.mark_in(own_employee_id(caller_from_request()))
        return jsonify(_with_status(record)), 201

    @app.route("/api/attendance/mark-out", methods=["POST"], endpoint="mark_out")
    def mark_out():
        record = ledger.mark_out(own_employee_id(caller_from_request()))
        return jsonify(_with_status(record))

    @app.route("/api/attendance/me", methods=["GET"], endpoint="my_attendance")
    def my_attendance():
        limit = int_value(request.args.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT)
        records = ledger.get_my_attendance(own_employee_id(caller_from_request()), limit=limit)
        return jsonify([_with_status(r) for r in records])

    @app.route("/api/attendance/<int:employee_id>/status", methods=["PUT"], endpoint="set_attendance_status")
    def set_attendance_status(employee_id: int):
        data = json_body()
        record = ledger.manager_set_status(
            caller_from_request(),
            employee_id,
            date_value(data.get("date"), "date", default=now_local().date()),
            data.get("status"),
            data.get("notes"),
        )
        return jsonify(_with_status(record))

    @app.route("/api/attendance", methods=["GET"], endpoint="list_month_attendance")
    def list_month_attendance():
        today = now_local().date()
        records = ledger.list_month(
            caller_from_request(),
            int_value(request.args.get("month"), "month", default=today.month),
            int_value(request.args.get("year"), "year", default=today.year),
        )
        return jsonify([_with_status(r) for r in records])
