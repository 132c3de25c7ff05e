from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import days_in_month
from ...leave.model import LeaveRequest
from ..model import PayslipFigures

CENT = Decimal("0.01")

# "requests": one unpaid day per approved request; "days": inclusive days summed.
UNPAID_LEAVE_MODES = ("requests", "days")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll).

    per-day salary = basic / days in month; deduction = unpaid days * per-day;
    net = basic - deduction. Only approved requests that fit inside the month
    count towards unpaid days.
    """

    def __init__(self, *, unpaid_leave_mode: str = "requests"):
        if unpaid_leave_mode not in UNPAID_LEAVE_MODES:
            raise ValueError(f"unpaid_leave_mode must be one of {UNPAID_LEAVE_MODES}")
        self.unpaid_leave_mode = unpaid_leave_mode

    @abstractmethod
    def present_days(self, records: Sequence[AttendanceRecord]) -> float:
        raise NotImplementedError

    def unpaid_leave_days(self, leaves: Sequence[LeaveRequest]) -> float:
        if self.unpaid_leave_mode == "days":
            return float(sum(r.days for r in leaves))
        return float(len(leaves))

    def compute(
        self,
        *,
        basic_salary: Decimal,
        month: int,
        year: int,
        records: Sequence[AttendanceRecord],
        approved_leaves: Sequence[LeaveRequest],
    ) -> PayslipFigures:
        basic = to_money(Decimal(str(basic_salary)))
        total_days = days_in_month(month, year)
        per_day = basic / Decimal(total_days)

        unpaid = self.unpaid_leave_days(approved_leaves)
        deduction = to_money(per_day * Decimal(str(unpaid)))
        return PayslipFigures(
            basic_salary=basic,
            working_days=total_days,
            present_days=self.present_days(records),
            unpaid_leaves=unpaid,
            deduction=deduction,
            net_salary=basic - deduction,
        )
