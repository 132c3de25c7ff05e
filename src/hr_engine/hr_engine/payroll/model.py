from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..core.enums import PayslipStatus


@dataclass(frozen=True)
class PayslipFigures:
    """Computed amounts for one employee and month, before persistence."""

    basic_salary: Decimal
    working_days: int
    present_days: float
    unpaid_leaves: float
    deduction: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class Payslip:
    """Snapshot of a computed salary; basic_salary is copied, not referenced."""

    payslip_id: int
    employee_id: int
    month: int
    year: int
    basic_salary: Decimal
    working_days: int
    present_days: float
    unpaid_leaves: float
    deduction: Decimal
    net_salary: Decimal
    status: PayslipStatus
    generated_date: date

    @property
    def is_published(self) -> bool:
        return self.status == PayslipStatus.PUBLISHED
