from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee profile fields relevant to leave, attendance and payroll."""

    employee_id: int
    employee_code: str
    full_name: str
    department: Optional[str]
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    basic_salary: Decimal = Decimal("0")
    manager_id: Optional[int] = None
    user_id: Optional[int] = None
    designation: Optional[str] = None

    @property
    def is_employed(self) -> bool:
        return self.status.is_employed
