from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..common.caller import CallerContext, require_role
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_decimal, require_non_empty
from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import EmployeeNotFound, ValidationError
from ..database.unit_of_work import TransactionManager
from ..leave.service import LeaveBalanceEngine
from .access import assert_can_manage, assert_can_view
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OnboardingResult:
    employee: Employee
    balances_created: int


class EmployeeService:
    """Employee records: onboarding, status transitions and salary."""

    def __init__(self, employees: EmployeeRepository, leave_engine: LeaveBalanceEngine, tx: TransactionManager):
        self._employees = employees
        self._leave = leave_engine
        self._tx = tx

    def get_employee(self, caller: CallerContext, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        assert_can_view(caller, employee, self._employees)
        return employee

    def onboard_employee(
        self,
        caller: CallerContext,
        *,
        employee_code: str,
        full_name: str,
        department: Optional[str] = None,
        designation: Optional[str] = None,
        basic_salary=0,
        manager_id: Optional[int] = None,
        user_id: Optional[int] = None,
        year: Optional[int] = None,
    ) -> OnboardingResult:
        """Create the employee and its leave balances for `year` atomically."""
        require_role(caller, Role.ADMIN)
        employee_code = require_non_empty(employee_code, "employeeCode")
        full_name = require_non_empty(full_name, "fullName")
        salary = require_decimal(basic_salary if basic_salary is not None else 0, "basicSalary")
        year = int(year or now_local().year)

        if self._employees.get_by_code(employee_code):
            raise ValidationError("Employee code already exists")
        if manager_id is not None and not self._employees.get_by_id(int(manager_id)):
            raise EmployeeNotFound(f"Manager {manager_id} not found")

        with self._tx.transaction():
            employee_id = self._employees.create(
                employee_code=employee_code,
                full_name=full_name,
                department=(department or "").strip() or None,
                designation=(designation or "").strip() or None,
                status=EmployeeStatus.ACTIVE,
                basic_salary=salary,
                manager_id=int(manager_id) if manager_id is not None else None,
                user_id=user_id,
            )
            created = self._leave.materialize_balances(employee_id, year)
            employee = self._employees.get_by_id(employee_id)

        logger.info("Employee %s onboarded (id=%s, %s balances)", employee_code, employee_id, created)
        return OnboardingResult(employee=employee, balances_created=created)

    def set_status(self, caller: CallerContext, employee_id: int, status: str | EmployeeStatus) -> Employee:
        require_role(caller, Role.ADMIN, Role.MANAGER)
        status = parse_enum(EmployeeStatus, status, "status")
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        assert_can_manage(caller, employee, self._employees)

        self._employees.set_status(employee.employee_id, status)
        logger.info("Employee %s status %s -> %s", employee.employee_id, employee.status.value, status.value)
        return self._employees.get_by_id(employee.employee_id)

    def set_basic_salary(self, caller: CallerContext, employee_id: int, basic_salary) -> Employee:
        require_role(caller, Role.ADMIN)
        salary: Decimal = require_decimal(basic_salary, "basicSalary")
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")

        self._employees.set_basic_salary(employee.employee_id, salary)
        return self._employees.get_by_id(employee.employee_id)
