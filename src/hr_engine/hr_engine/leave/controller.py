from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.caller import require_role
from ..common.datetime_utils import now_local
from ..common.http import caller_from_request, date_value, int_value, json_body, own_employee_id, to_json
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    engine = container.leave_engine

    @app.route("/api/leaves", methods=["POST"], endpoint="apply_leave")
    def apply_leave():
        caller = caller_from_request()
        data = json_body()
        outcome = engine.apply_leave(
            own_employee_id(caller),
            data.get("leaveType") or "",
            date_value(data.get("fromDate"), "fromDate"),
            date_value(data.get("toDate"), "toDate"),
            data.get("reason"),
            documentation_ref=data.get("documentationRef"),
        )
        return jsonify(to_json(outcome)), 201

    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    def list_leaves():
        leaves = engine.list_leaves(caller_from_request(), request.args.get("status"))
        return jsonify(to_json(leaves))

    @app.route("/api/leaves/me", methods=["GET"], endpoint="my_leaves")
    def my_leaves():
        requests = engine.list_my_leaves(own_employee_id(caller_from_request()))
        return jsonify(to_json(requests))

    @app.route("/api/leaves/pending", methods=["GET"], endpoint="pending_leaves")
    def pending_leaves():
        return jsonify(to_json(engine.list_pending(caller_from_request())))

    @app.route("/api/leaves/<int:request_id>/decision", methods=["POST"], endpoint="decide_leave")
    def decide_leave(request_id: int):
        outcome = engine.decide_leave(caller_from_request(), request_id, json_body().get("decision") or "")
        return jsonify(to_json(outcome))

    @app.route("/api/leave-balances/<int:employee_id>", methods=["GET"], endpoint="leave_balances")
    def leave_balances(employee_id: int):
        # Visibility follows the employee record rules.
        container.employee_service.get_employee(caller_from_request(), employee_id)
        year = int_value(request.args.get("year"), "year", default=now_local().year)
        return jsonify(to_json(engine.get_balances(employee_id, year)))

    @app.route("/api/leave-balances/initialize", methods=["POST"], endpoint="initialize_balances")
    def initialize_balances():
        require_role(caller_from_request(), Role.ADMIN)
        year = int_value(json_body().get("year"), "year", default=now_local().year)
        return jsonify(to_json(engine.initialize_balances_for_year(year)))

    @app.route("/api/leave-balances/carry-forward", methods=["POST"], endpoint="carry_forward_balances")
    def carry_forward_balances():
        from_year = int_value(json_body().get("fromYear"), "fromYear", default=now_local().year - 1)
        return jsonify(to_json(engine.carry_forward(caller_from_request(), from_year)))

    @app.route(
        "/api/leave-balances/<int:employee_id>/<code>/<int:year>",
        methods=["PUT"],
        endpoint="adjust_leave_balance",
    )
    def adjust_leave_balance(employee_id: int, code: str, year: int):
        balance = engine.adjust_total(caller_from_request(), employee_id, code, year, json_body().get("total"))
        out = to_json(balance)
        out["isOverdrawn"] = balance.is_overdrawn
        return jsonify(out)
