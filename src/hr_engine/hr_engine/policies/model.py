from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import HolidayType


@dataclass(frozen=True)
class LeaveTypePolicy:
    """Leave type together with its policy configuration."""

    leave_type_id: int
    name: str
    code: str
    yearly_limit: int
    allow_carry_forward: bool = False
    max_carry_forward: Optional[int] = None
    # Requests of duration <= auto_approve_days bypass manual approval.
    auto_approve_days: Optional[int] = None
    require_documentation: bool = False
    min_notice_days: Optional[int] = None
    max_consecutive_days: Optional[int] = None
    # Days per month, e.g. 1.50 for 18 days/year.
    accrual_rate: Optional[Decimal] = None
    max_accumulation: Optional[int] = None
    is_active: bool = True

    def auto_approves(self, days: int) -> bool:
        return self.auto_approve_days is not None and days <= self.auto_approve_days


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    name: str
    holiday_date: date
    holiday_type: HolidayType = HolidayType.NATIONAL
    is_recurring: bool = False
    year: Optional[int] = None
    is_active: bool = True

    def on_year(self, year: int) -> Optional[date]:
        """Date this holiday falls on in `year` (None if it does not occur)."""
        if not self.is_recurring:
            return self.holiday_date if self.holiday_date.year == year else None
        try:
            return self.holiday_date.replace(year=year)
        except ValueError:
            # Feb 29 recurring holiday in a non-leap year.
            return None


POLICY_FIELDS = (
    "name",
    "code",
    "yearly_limit",
    "allow_carry_forward",
    "max_carry_forward",
    "auto_approve_days",
    "require_documentation",
    "min_notice_days",
    "max_consecutive_days",
    "accrual_rate",
    "max_accumulation",
    "is_active",
)
