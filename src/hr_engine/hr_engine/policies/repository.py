from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import HolidayType
from .model import Holiday, LeaveTypePolicy


class PolicyRepository(Protocol):
    """Read/write access to leave type policies and the holiday calendar."""

    def get_by_code(self, code: str) -> Optional[LeaveTypePolicy]:
        raise NotImplementedError

    def get_by_id(self, leave_type_id: int) -> Optional[LeaveTypePolicy]:
        raise NotImplementedError

    def list_active(self) -> Sequence[LeaveTypePolicy]:
        raise NotImplementedError

    def create(self, policy: LeaveTypePolicy) -> int:
        raise NotImplementedError

    def update(self, policy: LeaveTypePolicy) -> bool:
        raise NotImplementedError

    def list_holidays(self, year: int) -> Sequence[Holiday]:
        """Active holidays for `year` plus every active recurring holiday."""
        raise NotImplementedError

    def find_holiday(self, *, holiday_date: date, is_recurring: bool) -> Optional[Holiday]:
        raise NotImplementedError

    def create_holiday(
        self,
        *,
        name: str,
        holiday_date: date,
        holiday_type: HolidayType,
        is_recurring: bool,
        year: Optional[int],
    ) -> int:
        raise NotImplementedError
