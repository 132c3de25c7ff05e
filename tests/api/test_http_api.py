from __future__ import annotations

import pytest

from src.hr_engine.hr_engine.main import create_app
from tests.support import build_world


@pytest.fixture()
def world():
    return build_world()


@pytest.fixture()
def client(world):
    app = create_app(container=world.container, settings_module="config.testing")
    app.config["TESTING"] = True
    return app.test_client()


def headers(role: str, employee_id=None) -> dict:
    out = {"X-Role": role}
    if employee_id is not None:
        out["X-Employee-Id"] = str(employee_id)
    return out


def test_mark_in_twice_is_a_conflict(world, client):
    employee = world.add_employee("E1")
    h = headers("EMPLOYEE", employee.employee_id)

    first = client.post("/api/attendance/mark-in", headers=h)
    second = client.post("/api/attendance/mark-in", headers=h)

    assert first.status_code == 201
    assert first.get_json()["resolved"]["status"] == "PRESENT_NO_LOGOUT"
    assert second.status_code == 409
    assert second.get_json()["error"] == "AlreadyMarkedIn"


def test_requests_without_a_role_are_forbidden(client):
    response = client.get("/api/payslips")

    assert response.status_code == 403
    assert response.get_json()["error"] == "AuthorizationError"


def test_leave_validation_and_policy_errors(world, client):
    employee = world.add_employee("E1")
    world.add_policy("EL", yearly_limit=2)
    h = headers("EMPLOYEE", employee.employee_id)

    reversed_range = client.post(
        "/api/leaves", headers=h, json={"leaveType": "EL", "fromDate": "2030-03-10", "toDate": "2030-03-01"}
    )
    too_long = client.post(
        "/api/leaves", headers=h, json={"leaveType": "EL", "fromDate": "2030-03-01", "toDate": "2030-03-05"}
    )

    assert reversed_range.status_code == 400
    assert too_long.status_code == 422
    assert too_long.get_json()["rule"] == "balance"


def test_apply_then_approve_over_http(world, client):
    manager = world.add_employee("M1")
    employee = world.add_employee("E1")
    world.add_policy("EL", yearly_limit=10)

    applied = client.post(
        "/api/leaves",
        headers=headers("EMPLOYEE", employee.employee_id),
        json={"leaveType": "EL", "fromDate": "2030-03-04", "toDate": "2030-03-06", "reason": "trip"},
    )
    request_id = applied.get_json()["request"]["request_id"]
    decided = client.post(
        f"/api/leaves/{request_id}/decision",
        headers=headers("MANAGER", manager.employee_id),
        json={"decision": "approve"},
    )
    balances = client.get(
        "/api/leave-balances/%s?year=2030" % employee.employee_id, headers=headers("EMPLOYEE", employee.employee_id)
    )

    assert applied.status_code == 201
    assert decided.status_code == 200
    assert decided.get_json()["request"]["status"] == "APPROVED"
    [row] = balances.get_json()
    assert row["balance"]["used"] == 3
    assert row["balance"]["remaining"] == 7


def test_payslip_generation_and_lookup(world, client):
    employee = world.add_employee("E1", basic_salary="30000")
    admin = headers("ADMIN")

    generated = client.post("/api/payslips/generate", headers=admin, json={"employeeId": employee.employee_id, "month": 4, "year": 2025})
    missing_employee = client.post("/api/payslips/generate", headers=admin, json={"month": 4, "year": 2025})
    unknown = client.get("/api/payslips/999", headers=admin)

    assert generated.status_code == 200
    assert generated.get_json()["net_salary"] == "30000.00"
    assert generated.get_json()["status"] == "DRAFT"
    assert missing_employee.status_code == 400
    assert unknown.status_code == 404


def test_overwriting_a_published_payslip_needs_a_real_boolean(world, client):
    employee = world.add_employee("E1", basic_salary="30000")
    admin = headers("ADMIN")
    body = {"employeeId": employee.employee_id, "month": 4, "year": 2025}
    payslip_id = client.post("/api/payslips/generate", headers=admin, json=body).get_json()["payslip_id"]
    client.post(f"/api/payslips/{payslip_id}/publish", headers=admin)

    as_string = client.post("/api/payslips/generate", headers=admin, json={**body, "overwritePublished": "false"})
    as_false = client.post("/api/payslips/generate", headers=admin, json={**body, "overwritePublished": False})
    as_true = client.post("/api/payslips/generate", headers=admin, json={**body, "overwritePublished": True})

    assert as_string.status_code == 400
    assert as_false.status_code == 409
    assert as_true.status_code == 200
    assert as_true.get_json()["status"] == "PUBLISHED"


def test_leave_listing_over_http(world, client):
    employee = world.add_employee("E1")
    world.add_policy("EL", yearly_limit=10)
    client.post(
        "/api/leaves",
        headers=headers("EMPLOYEE", employee.employee_id),
        json={"leaveType": "EL", "fromDate": "2030-03-04", "toDate": "2030-03-04"},
    )

    pending = client.get("/api/leaves?status=pending", headers=headers("ADMIN"))
    approved = client.get("/api/leaves?status=APPROVED", headers=headers("ADMIN"))
    as_employee = client.get("/api/leaves", headers=headers("EMPLOYEE", employee.employee_id))

    assert [r["status"] for r in pending.get_json()] == ["PENDING"]
    assert approved.get_json() == []
    assert as_employee.status_code == 403
