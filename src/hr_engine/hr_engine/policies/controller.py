from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.http import bool_value, caller_from_request, date_value, int_value, json_body, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    store = container.policy_store

    @app.route("/api/leave-types", methods=["GET"], endpoint="list_leave_types")
    def list_leave_types():
        return jsonify(to_json(store.list_active_policies()))

    @app.route("/api/leave-types", methods=["POST"], endpoint="create_leave_type")
    def create_leave_type():
        policy = store.create_leave_type(caller_from_request(), json_body())
        return jsonify(to_json(policy)), 201

    @app.route("/api/leave-types/<int:leave_type_id>", methods=["PATCH"], endpoint="update_leave_type")
    def update_leave_type(leave_type_id: int):
        policy = store.update_leave_type_policy(caller_from_request(), leave_type_id, json_body())
        return jsonify(to_json(policy))

    @app.route("/api/leave-types/<int:leave_type_id>/deactivate", methods=["POST"], endpoint="deactivate_leave_type")
    def deactivate_leave_type(leave_type_id: int):
        policy = store.deactivate_leave_type(caller_from_request(), leave_type_id)
        return jsonify(to_json(policy))

    @app.route("/api/holidays", methods=["GET"], endpoint="list_holidays")
    def list_holidays():
        year = int_value(request.args.get("year"), "year", default=now_local().year)
        return jsonify(to_json(store.get_holidays(year)))

    @app.route("/api/holidays", methods=["POST"], endpoint="create_holiday")
    def create_holiday():
        data = json_body()
        holiday_id = store.create_holiday(
            caller_from_request(),
            name=data.get("name") or "",
            holiday_date=date_value(data.get("date"), "date"),
            holiday_type=data.get("type") or "National",
            is_recurring=bool_value(data.get("isRecurring"), "isRecurring"),
        )
        return jsonify({"holidayId": holiday_id}), 201
