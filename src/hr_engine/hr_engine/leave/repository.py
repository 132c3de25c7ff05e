from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveBalance, LeaveRequest


class BalanceRepository(Protocol):
    def get(
        self, *, employee_id: int, leave_type_id: int, year: int, for_update: bool = False
    ) -> Optional[LeaveBalance]:
        """`for_update` takes a row lock inside the current transaction."""
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def create_if_missing(self, *, employee_id: int, leave_type_id: int, year: int, total: int) -> bool:
        """Insert a fresh row (used=0, remaining=total). False if it already exists."""
        raise NotImplementedError

    def save(self, balance: LeaveBalance) -> bool:
        """Persist total/used/remaining/carried_forward of an existing row."""
        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        leave_type: str,
        from_date: date,
        to_date: date,
        reason: Optional[str],
        status: RequestStatus,
        has_collision: bool,
        collision_count: int,
        documentation_ref: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        employee_id: int,
        from_date: date,
        to_date: date,
        statuses: Sequence[RequestStatus],
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: Optional[int],
        decided_at: datetime,
    ) -> bool:
        """Move a PENDING request to a terminal status. False if it was not PENDING."""
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, limit: int = 200) -> Sequence[LeaveRequest]:
        """Newest fromDate first."""
        raise NotImplementedError

    def list_by_status(
        self, *, status: RequestStatus, department: Optional[str] = None, limit: int = 500
    ) -> Sequence[LeaveRequest]:
        """Ordered by fromDate, then creation time."""
        raise NotImplementedError

    def list_all(
        self, *, status: Optional[RequestStatus] = None, department: Optional[str] = None, limit: int = 500
    ) -> Sequence[LeaveRequest]:
        """Newest first; None filters nothing."""
        raise NotImplementedError

    def list_approved_within(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        """APPROVED requests with start <= fromDate and toDate <= end."""
        raise NotImplementedError
