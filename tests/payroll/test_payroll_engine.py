from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.hr_engine.hr_engine.core.enums import AttendanceStatus, NotificationKind, PayslipStatus, RequestStatus
from src.hr_engine.hr_engine.core.exceptions import (
    AuthorizationError,
    InvalidStateTransition,
    PayslipNotFound,
    SalaryNotSet,
    ValidationError,
)
from tests.support import ADMIN, Settings, build_world, employee_caller, manager_of

GENERATED = date(2025, 5, 1)


def _approved_leave(world, employee, start: date, end: date, status=RequestStatus.APPROVED):
    return world.container.leave_requests_repo.create(
        employee_id=employee.employee_id,
        leave_type="LOP",
        from_date=start,
        to_date=end,
        reason=None,
        status=status,
        has_collision=False,
        collision_count=0,
    )


def test_each_approved_request_inside_the_month_is_one_unpaid_day():
    world = build_world()
    employee = world.add_employee("E1", basic_salary=30000)
    _approved_leave(world, employee, date(2025, 4, 14), date(2025, 4, 16))
    for day in (1, 2, 3):
        d = date(2025, 4, day)
        world.add_attendance(employee, d, mark_in=datetime(2025, 4, day, 9), mark_out=datetime(2025, 4, day, 18))

    payslip = world.container.payroll_engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025, today=GENERATED)

    assert payslip.working_days == 30
    assert payslip.present_days == 3.0
    assert payslip.unpaid_leaves == 1.0
    assert payslip.deduction == Decimal("1000.00")
    assert payslip.net_salary == Decimal("29000.00")
    assert payslip.basic_salary == Decimal("30000.00")
    assert payslip.status == PayslipStatus.DRAFT
    assert payslip.generated_date == GENERATED


def test_spanning_and_unapproved_requests_are_not_deducted():
    world = build_world()
    employee = world.add_employee("E1", basic_salary=30000)
    _approved_leave(world, employee, date(2025, 3, 30), date(2025, 4, 2))
    _approved_leave(world, employee, date(2025, 4, 28), date(2025, 5, 1))
    _approved_leave(world, employee, date(2025, 4, 10), date(2025, 4, 10), status=RequestStatus.PENDING)
    _approved_leave(world, employee, date(2025, 4, 11), date(2025, 4, 11), status=RequestStatus.REJECTED)

    payslip = world.container.payroll_engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)

    assert payslip.unpaid_leaves == 0.0
    assert payslip.net_salary == Decimal("30000.00")


def test_missing_salary_fails_without_creating_a_row():
    world = build_world()
    employee = world.add_employee("E1", basic_salary=0)

    with pytest.raises(SalaryNotSet):
        world.container.payroll_engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)

    assert world.payslip_count() == 0


def test_regeneration_updates_the_single_row_and_keeps_its_status():
    world = build_world()
    employee = world.add_employee("E1", basic_salary=30000)
    engine = world.container.payroll_engine
    first = engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)
    _approved_leave(world, employee, date(2025, 4, 14), date(2025, 4, 14))

    second = engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)

    assert second.payslip_id == first.payslip_id
    assert world.payslip_count() == 1
    assert second.net_salary == Decimal("29000.00")
    assert second.status == PayslipStatus.DRAFT


def test_published_payslip_is_only_recomputed_on_explicit_overwrite():
    world = build_world()
    employee = world.add_employee("E1", basic_salary=30000)
    engine = world.container.payroll_engine
    payslip = engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)
    engine.publish_payslip(ADMIN, payslip.payslip_id)
    _approved_leave(world, employee, date(2025, 4, 14), date(2025, 4, 14))

    with pytest.raises(InvalidStateTransition):
        engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)
    assert world.db.payslips[payslip.payslip_id].net_salary == Decimal("30000.00")

    redone = engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025, overwrite_published=True)
    assert redone.net_salary == Decimal("29000.00")
    assert redone.status == PayslipStatus.PUBLISHED
    assert world.payslip_count() == 1


def test_publish_is_terminal_and_notifies_the_employee():
    world = build_world()
    employee = world.add_employee("E1", basic_salary=30000, user_id=55)
    engine = world.container.payroll_engine
    payslip = engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)

    published = engine.publish_payslip(ADMIN, payslip.payslip_id)

    assert published.status == PayslipStatus.PUBLISHED
    assert world.notifier.sent[-1][0] == 55
    assert world.notifier.sent[-1][3] == NotificationKind.PAYROLL
    with pytest.raises(InvalidStateTransition):
        engine.publish_payslip(ADMIN, payslip.payslip_id)
    with pytest.raises(PayslipNotFound):
        engine.publish_payslip(ADMIN, 404)


def test_employees_only_see_their_own_published_payslips():
    world = build_world()
    manager = world.add_employee("M1", basic_salary=50000)
    employee = world.add_employee("E1", basic_salary=30000)
    other = world.add_employee("E2", basic_salary=30000)
    engine = world.container.payroll_engine
    draft = engine.generate_payslip(ADMIN, employee.employee_id, 3, 2025)
    published = engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)
    engine.publish_payslip(ADMIN, published.payslip_id)
    others = engine.generate_payslip(manager_of(manager), other.employee_id, 4, 2025)
    engine.publish_payslip(manager_of(manager), others.payslip_id)

    mine = engine.list_payslips(employee_caller(employee))

    assert [p.payslip_id for p in mine] == [published.payslip_id]
    assert engine.get_payslip(employee_caller(employee), published.payslip_id).payslip_id == published.payslip_id
    with pytest.raises(PayslipNotFound):
        engine.get_payslip(employee_caller(employee), draft.payslip_id)
    with pytest.raises(AuthorizationError):
        engine.get_payslip(employee_caller(employee), others.payslip_id)
    assert len(engine.list_payslips(ADMIN, month=4, year=2025)) == 2
    assert len(engine.list_payslips(manager_of(manager))) == 3


def test_generation_requires_manager_of_the_same_department():
    world = build_world()
    outsider = world.add_employee("M2", department="Sales")
    employee = world.add_employee("E1", basic_salary=30000)

    with pytest.raises(AuthorizationError):
        world.container.payroll_engine.generate_payslip(manager_of(outsider), employee.employee_id, 4, 2025)
    with pytest.raises(AuthorizationError):
        world.container.payroll_engine.generate_payslip(employee_caller(employee), employee.employee_id, 4, 2025)
    with pytest.raises(ValidationError):
        world.container.payroll_engine.generate_payslip(ADMIN, employee.employee_id, 13, 2025)
    assert world.payslip_count() == 0


class WeightedSettings(Settings):
    PAYROLL_PRESENT_DAYS_MODE = "weighted"


@pytest.mark.parametrize("settings, expected", [(Settings, 3.0), (WeightedSettings, 1.5)])
def test_present_days_mode(settings, expected):
    world = build_world(settings)
    employee = world.add_employee("E1", basic_salary=30000)
    world.add_attendance(employee, date(2025, 4, 1), mark_in=datetime(2025, 4, 1, 9), mark_out=datetime(2025, 4, 1, 18))
    world.add_attendance(employee, date(2025, 4, 2), status=AttendanceStatus.HALF_DAY)
    world.add_attendance(employee, date(2025, 4, 3), status=AttendanceStatus.ABSENT)

    payslip = world.container.payroll_engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)

    assert payslip.present_days == expected


class DaysSettings(Settings):
    PAYROLL_UNPAID_LEAVE_MODE = "days"


def test_days_mode_deducts_every_leave_day():
    world = build_world(DaysSettings)
    employee = world.add_employee("E1", basic_salary=30000)
    _approved_leave(world, employee, date(2025, 4, 14), date(2025, 4, 16))

    payslip = world.container.payroll_engine.generate_payslip(ADMIN, employee.employee_id, 4, 2025)

    assert payslip.unpaid_leaves == 3.0
    assert payslip.deduction == Decimal("3000.00")
    assert payslip.net_salary == Decimal("27000.00")
