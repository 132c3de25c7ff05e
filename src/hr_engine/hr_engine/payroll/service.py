from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.caller import CallerContext, require_role
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import require_month
from ..core.enums import NotificationKind, PayslipStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    EmployeeNotFound,
    InvalidStateTransition,
    PayslipNotFound,
    SalaryNotSet,
)
from ..database.unit_of_work import TransactionManager
from ..employees.access import assert_can_manage, managed_department
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leave.repository import LeaveRequestRepository
from ..notifications.dispatcher import NotificationDispatcher
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payslip
from .repository import PayslipRepository

logger = logging.getLogger(__name__)


class PayrollEngine:
    """Sole writer of payslips.

    A payslip is generated only by an explicit call. Regeneration recomputes
    the figures and keeps the status; a PUBLISHED slip is only recomputed when
    the caller asks for it with `overwrite_published=True`.
    """

    def __init__(
        self,
        payslips: PayslipRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        requests: LeaveRequestRepository,
        tx: TransactionManager,
        *,
        notifications: Optional[NotificationDispatcher] = None,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payslips = payslips
        self._employees = employees
        self._attendance = attendance
        self._requests = requests
        self._tx = tx
        self._notifications = notifications or NotificationDispatcher()
        self._calculator = calculator or StandardPayrollCalculator()

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        return employee

    def generate_payslip(
        self,
        caller: CallerContext,
        employee_id: int,
        month: int,
        year: int,
        *,
        overwrite_published: bool = False,
        today: date | None = None,
    ) -> Payslip:
        require_role(caller, Role.ADMIN, Role.MANAGER)
        month, year = require_month(month, year)
        employee = self._get_employee(employee_id)
        assert_can_manage(caller, employee, self._employees)
        if employee.basic_salary is None or employee.basic_salary <= 0:
            raise SalaryNotSet("Employee basic salary not set")

        start, end = month_bounds(month, year)
        records = self._attendance.list_range(start=start, end=end, employee_ids=[employee.employee_id])
        leaves = self._requests.list_approved_within(employee_id=employee.employee_id, start=start, end=end)
        figures = self._calculator.compute(
            basic_salary=employee.basic_salary,
            month=month,
            year=year,
            records=records,
            approved_leaves=leaves,
        )
        generated = today or now_local().date()

        with self._tx.transaction():
            existing = self._payslips.get_for_period(
                employee_id=employee.employee_id, month=month, year=year, for_update=True
            )
            if existing is None:
                payslip_id = self._payslips.create(
                    employee_id=employee.employee_id,
                    month=month,
                    year=year,
                    figures=figures,
                    status=PayslipStatus.DRAFT,
                    generated_date=generated,
                )
                if payslip_id is None:
                    # Concurrent generation inserted the period first; recompute into it.
                    existing = self._payslips.get_for_period(
                        employee_id=employee.employee_id, month=month, year=year, for_update=True
                    )
            if existing is not None:
                if existing.is_published and not overwrite_published:
                    raise InvalidStateTransition(
                        "Payslip is already published; pass overwrite_published to regenerate it"
                    )
                payslip_id = existing.payslip_id
                self._payslips.update_figures(payslip_id=payslip_id, figures=figures, generated_date=generated)
            payslip = self._payslips.get(payslip_id)

        logger.info(
            "Payslip %s generated: employee=%s period=%02d/%s net=%s status=%s",
            payslip.payslip_id,
            employee.employee_id,
            month,
            year,
            payslip.net_salary,
            payslip.status.value,
        )
        return payslip

    def publish_payslip(self, caller: CallerContext, payslip_id: int) -> Payslip:
        require_role(caller, Role.ADMIN, Role.MANAGER)

        with self._tx.transaction():
            payslip = self._payslips.get(int(payslip_id), for_update=True)
            if not payslip:
                raise PayslipNotFound(f"Payslip {payslip_id} not found")
            employee = self._get_employee(payslip.employee_id)
            assert_can_manage(caller, employee, self._employees)
            if payslip.is_published:
                raise InvalidStateTransition("Payslip is already published")
            if not self._payslips.set_status(
                payslip_id=payslip.payslip_id, status=PayslipStatus.PUBLISHED, expected=PayslipStatus.DRAFT
            ):
                raise InvalidStateTransition("Payslip is already published")
            payslip = self._payslips.get(payslip.payslip_id)

        logger.info("Payslip %s published", payslip.payslip_id)
        self._notifications.dispatch(
            employee.user_id,
            "Payslip Published",
            f"Your payslip for {payslip.month:02d}/{payslip.year} is available",
            NotificationKind.PAYROLL,
        )
        return payslip

    def list_payslips(
        self,
        caller: CallerContext,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Payslip]:
        """Employees see only their own PUBLISHED slips; managers their department."""
        if caller.role == Role.EMPLOYEE:
            if caller.employee_id is None:
                raise AuthorizationError("Employee profile not linked")
            return self._payslips.list(
                month=month, year=year, employee_id=int(caller.employee_id), status=PayslipStatus.PUBLISHED
            )

        department = managed_department(caller, self._employees)
        return self._payslips.list(
            month=month,
            year=year,
            employee_id=int(employee_id) if employee_id is not None else None,
            department=department,
        )

    def get_payslip(self, caller: CallerContext, payslip_id: int) -> Payslip:
        payslip = self._payslips.get(int(payslip_id))
        if not payslip:
            raise PayslipNotFound(f"Payslip {payslip_id} not found")

        if caller.role == Role.EMPLOYEE:
            if caller.employee_id != payslip.employee_id:
                raise AuthorizationError("Unauthorized access to this payslip")
            if not payslip.is_published:
                raise PayslipNotFound(f"Payslip {payslip_id} not found")
            return payslip

        assert_can_manage(caller, self._get_employee(payslip.employee_id), self._employees)
        return payslip
