from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per employee per calendar date.

    `status` holds only an explicitly stored status; None means it has never
    been set and must be derived from the mark-in/mark-out timestamps.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    mark_in: Optional[datetime]
    mark_out: Optional[datetime]
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
