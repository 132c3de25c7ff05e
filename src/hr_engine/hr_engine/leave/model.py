from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import inclusive_days, split_by_year
from ..core.enums import RequestStatus


@dataclass(frozen=True)
class LeaveBalance:
    """Ledger row for (employee, leave type, year).

    Invariant: remaining == total - used. `remaining` may go negative after
    an approval or a correction; that is surfaced as a warning, never clamped.
    """

    balance_id: int
    employee_id: int
    leave_type_id: int
    year: int
    total: int
    used: int
    remaining: int
    carried_forward: int = 0

    @property
    def is_overdrawn(self) -> bool:
        return self.remaining < 0

    def debit(self, days: int) -> "LeaveBalance":
        used = self.used + int(days)
        return LeaveBalance(
            balance_id=self.balance_id,
            employee_id=self.employee_id,
            leave_type_id=self.leave_type_id,
            year=self.year,
            total=self.total,
            used=used,
            remaining=self.total - used,
            carried_forward=self.carried_forward,
        )

    def with_total(self, total: int, *, carried_forward: Optional[int] = None) -> "LeaveBalance":
        return LeaveBalance(
            balance_id=self.balance_id,
            employee_id=self.employee_id,
            leave_type_id=self.leave_type_id,
            year=self.year,
            total=int(total),
            used=self.used,
            remaining=int(total) - self.used,
            carried_forward=self.carried_forward if carried_forward is None else int(carried_forward),
        )


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: str
    from_date: date
    to_date: date
    reason: Optional[str]
    status: RequestStatus
    created_at: datetime
    approver_id: Optional[int] = None
    has_collision: bool = False
    collision_count: int = 0
    documentation_ref: Optional[str] = None
    decided_at: Optional[datetime] = None

    @property
    def days(self) -> int:
        return inclusive_days(self.from_date, self.to_date)

    @property
    def days_by_year(self) -> dict[int, int]:
        return split_by_year(self.from_date, self.to_date)


@dataclass(frozen=True)
class BalanceView:
    """Read-model: a balance row with its policy and accrual view."""

    balance: LeaveBalance
    leave_type_code: str
    leave_type_name: str
    yearly_limit: int
    accrued: Optional[int] = None

    @property
    def accrued_available(self) -> Optional[int]:
        if self.accrued is None:
            return None
        return self.accrued - self.balance.used


@dataclass(frozen=True)
class LeaveOutcome:
    """Result of a leave operation: the request, touched balances and warnings."""

    request: LeaveRequest
    balances: tuple[LeaveBalance, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def overdrawn(self) -> bool:
        return any(b.is_overdrawn for b in self.balances)


@dataclass(frozen=True)
class InitializationReport:
    year: int
    employees_processed: int
    leave_types_processed: int
    balances_created: int


@dataclass(frozen=True)
class CarryForwardReport:
    from_year: int
    to_year: int
    balances_updated: int
    days_carried: int
