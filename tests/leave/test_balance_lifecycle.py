from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_engine.hr_engine.core.enums import EmployeeStatus
from src.hr_engine.hr_engine.core.exceptions import AuthorizationError, EmployeeNotFound, ValidationError
from tests.support import ADMIN, all_balances_reconcile, build_world, manager_of


def _rows(world):
    return sorted((b.employee_id, b.leave_type_id, b.year, b.total, b.used) for b in world.db.balances.values())


def test_initialize_balances_for_year_is_idempotent():
    world = build_world()
    world.add_employee("E1")
    world.add_employee("E2", status=EmployeeStatus.ON_LEAVE)
    world.add_employee("E3", status=EmployeeStatus.TERMINATED)
    world.add_policy("EL", yearly_limit=12)
    world.add_policy("SL", yearly_limit=6)
    world.add_policy("OLD", yearly_limit=3, is_active=False)
    engine = world.container.leave_engine

    first = engine.initialize_balances_for_year(2025)
    rows_after_first = _rows(world)
    second = engine.initialize_balances_for_year(2025)

    assert (first.employees_processed, first.leave_types_processed, first.balances_created) == (2, 2, 4)
    assert second.balances_created == 0
    assert _rows(world) == rows_after_first
    assert {row[3] for row in rows_after_first} == {12, 6}
    assert all(b.used == 0 and b.remaining == b.total for b in world.db.balances.values())


def test_initialize_keeps_existing_usage():
    world = build_world()
    employee = world.add_employee("E1")
    policy = world.add_policy("EL", yearly_limit=10, auto_approve_days=5)
    engine = world.container.leave_engine
    engine.apply_leave(employee.employee_id, "EL", date(2025, 3, 10), date(2025, 3, 11), today=date(2025, 3, 1))

    engine.initialize_balances_for_year(2025)

    balance = world.balance(employee, policy, 2025)
    assert (balance.used, balance.remaining) == (2, 8)


def test_get_balances_materializes_rows_and_reports_accrual():
    world = build_world()
    employee = world.add_employee("E1")
    world.add_policy("EL", yearly_limit=18, accrual_rate=Decimal("1.50"))
    world.add_policy("SL", yearly_limit=6)

    views = world.container.leave_engine.get_balances(employee.employee_id, 2025, today=date(2025, 3, 15))

    by_code = {v.leave_type_code: v for v in views}
    assert by_code["EL"].accrued == 4
    assert by_code["EL"].accrued_available == 4
    assert by_code["SL"].accrued is None
    assert by_code["SL"].balance.remaining == 6
    past = world.container.leave_engine.get_balances(employee.employee_id, 2024, today=date(2025, 3, 15))
    assert {v.leave_type_code: v.accrued for v in past}["EL"] == 18


def test_get_balances_for_unknown_employee():
    world = build_world()
    with pytest.raises(EmployeeNotFound):
        world.container.leave_engine.get_balances(42, 2025)


def _with_usage(world, employee, policy, year: int, used: int):
    world.container.leave_engine.materialize_balances(employee.employee_id, year)
    row = world.balance(employee, policy, year)
    world.container.balances_repo.save(row.debit(used))


def test_carry_forward_is_capped_and_rerunnable():
    world = build_world()
    employee = world.add_employee("E1")
    el = world.add_policy("EL", yearly_limit=10, allow_carry_forward=True, max_carry_forward=5)
    sl = world.add_policy("SL", yearly_limit=6)
    _with_usage(world, employee, el, 2024, 2)
    _with_usage(world, employee, sl, 2024, 0)
    engine = world.container.leave_engine

    report = engine.carry_forward(ADMIN, 2024)
    again = engine.carry_forward(ADMIN, 2024)

    assert (report.to_year, report.balances_updated, report.days_carried) == (2025, 1, 5)
    assert again.balances_updated == 0
    carried = world.balance(employee, el, 2025)
    assert (carried.total, carried.carried_forward, carried.remaining) == (15, 5, 15)
    assert world.balance(employee, sl, 2025).total == 6
    assert all_balances_reconcile(world.db)


def test_carry_forward_respects_max_accumulation():
    world = build_world()
    employee = world.add_employee("E1")
    el = world.add_policy("EL", yearly_limit=10, allow_carry_forward=True, max_carry_forward=5, max_accumulation=12)
    _with_usage(world, employee, el, 2024, 0)

    world.container.leave_engine.carry_forward(ADMIN, 2024)

    carried = world.balance(employee, el, 2025)
    assert (carried.total, carried.carried_forward) == (12, 2)


def test_carry_forward_skips_overdrawn_years_and_needs_admin():
    world = build_world()
    manager = world.add_employee("M1")
    employee = world.add_employee("E1")
    el = world.add_policy("EL", yearly_limit=3, allow_carry_forward=True)
    _with_usage(world, employee, el, 2024, 5)

    with pytest.raises(AuthorizationError):
        world.container.leave_engine.carry_forward(manager_of(manager), 2024)
    report = world.container.leave_engine.carry_forward(ADMIN, 2024)

    assert report.days_carried == 0
    assert world.balance(employee, el, 2025).total == 3


def test_correction_below_used_goes_negative_and_is_not_clamped():
    world = build_world()
    employee = world.add_employee("E1")
    el = world.add_policy("EL", yearly_limit=10)
    _with_usage(world, employee, el, 2025, 3)

    updated = world.container.leave_engine.adjust_total(ADMIN, employee.employee_id, "EL", 2025, 2)

    assert (updated.total, updated.used, updated.remaining) == (2, 3, -1)
    assert updated.is_overdrawn
    assert world.balance(employee, el, 2025).remaining == -1
    assert all_balances_reconcile(world.db)


def test_correction_input_and_role_checks():
    world = build_world()
    manager = world.add_employee("M1")
    employee = world.add_employee("E1")
    world.add_policy("EL", yearly_limit=10)
    engine = world.container.leave_engine

    with pytest.raises(ValidationError):
        engine.adjust_total(ADMIN, employee.employee_id, "EL", 2025, -1)
    with pytest.raises(AuthorizationError):
        engine.adjust_total(manager_of(manager), employee.employee_id, "EL", 2025, 5)
