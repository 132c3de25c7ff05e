from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(
        self, employee_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[AttendanceRecord]:
        """`for_update` takes a row lock; call it inside a transaction."""
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        mark_in: Optional[datetime],
        mark_out: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
    ) -> Optional[int]:
        """Insert a day row. Returns None if (employee_id, work_date) already exists."""
        raise NotImplementedError

    def set_mark_in(self, *, attendance_id: int, mark_in: datetime) -> bool:
        """Set mark_in only while it is still empty."""
        raise NotImplementedError

    def set_mark_out(self, *, attendance_id: int, mark_out: datetime) -> bool:
        """Set mark_out only when marked in and not yet marked out."""
        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        mark_in: Optional[datetime],
        mark_out: Optional[datetime],
        status: Optional[AttendanceStatus],
        notes: Optional[str] = None,
    ) -> bool:
        """Manager/admin override; bypasses the mark-in/mark-out state checks."""
        raise NotImplementedError
