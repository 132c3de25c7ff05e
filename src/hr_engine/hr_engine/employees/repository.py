from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_employed(self) -> Sequence[Employee]:
        """Employees whose status is Active or On Leave."""
        raise NotImplementedError

    def list_by_department(self, department: Optional[str]) -> Sequence[Employee]:
        """All employees, or only those of `department` when given."""
        raise NotImplementedError

    def create(
        self,
        *,
        employee_code: str,
        full_name: str,
        department: Optional[str],
        designation: Optional[str],
        status: EmployeeStatus,
        basic_salary: Decimal,
        manager_id: Optional[int],
        user_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def set_status(self, employee_id: int, status: EmployeeStatus) -> bool:
        raise NotImplementedError

    def set_basic_salary(self, employee_id: int, basic_salary: Decimal) -> bool:
        raise NotImplementedError
