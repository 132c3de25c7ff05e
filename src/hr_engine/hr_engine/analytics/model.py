from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.status import ResolvedStatus
from ..employees.model import Employee


@dataclass(frozen=True)
class TeamMemberSnapshot:
    employee: Employee
    record: Optional[AttendanceRecord]
    status: ResolvedStatus
    attendance_score: int


@dataclass(frozen=True)
class DepartmentPresence:
    department: Optional[str]
    employees: int
    present_percent: int


@dataclass(frozen=True)
class TeamTrends:
    as_of: date
    weekly_percent: int
    monthly_percent: int
    late_percent: int
    departments: tuple[DepartmentPresence, ...] = ()


@dataclass(frozen=True)
class MonthlySummary:
    employee_id: int
    month: int
    year: int
    status_counts: dict = field(default_factory=dict)
    working_days: int = 0
    good_days: int = 0
    attendance_percent: int = 0
