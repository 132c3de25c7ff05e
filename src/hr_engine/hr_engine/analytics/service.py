from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.status import derive_status
from ..common.caller import CallerContext
from ..common.datetime_utils import iter_days, month_bounds, start_of_week
from ..common.validators import require_month
from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import EmployeeNotFound
from ..employees.access import managed_department
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..policies.service import PolicyStore
from .model import DepartmentPresence, MonthlySummary, TeamMemberSnapshot, TeamTrends


_PRESENT_FOR_TRENDS = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


def percent(part: int, whole: int) -> int:
    """Integer percentage, rounded half up; 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def score_from(good_days: int, days_so_far: int) -> int:
    if days_so_far <= 0:
        # No signal yet is not a penalty.
        return 100
    return min(100, percent(good_days, days_so_far))


class AttendanceAnalytics:
    """Read-only derivations over the attendance ledger.

    Nothing here is persisted; every figure is recomputed from the rows at
    read time through `derive_status`.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        policies: PolicyStore,
        *,
        weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    ):
        self._attendance = attendance
        self._employees = employees
        self._policies = policies
        self._weekend_days = frozenset(int(d) for d in weekend_days)

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        return employee

    def _team(self, caller: CallerContext) -> list[Employee]:
        department = managed_department(caller, self._employees)
        team = [e for e in self._employees.list_by_department(department) if e.is_employed]
        team.sort(key=lambda e: e.full_name)
        return team

    @staticmethod
    def _good_days(records: Iterable[AttendanceRecord]) -> int:
        return sum(1 for r in records if derive_status(r).is_good_day)

    def compute_attendance_score(self, employee_id: int, as_of: date) -> int:
        """0..100: good days this month so far over day-of-month of `as_of`."""
        employee = self._get_employee(employee_id)
        records = self._attendance.list_range(
            start=as_of.replace(day=1), end=as_of, employee_ids=[employee.employee_id]
        )
        return score_from(self._good_days(records), as_of.day)

    def team_snapshot(self, caller: CallerContext, day: date) -> list[TeamMemberSnapshot]:
        team = self._team(caller)
        if not team:
            return []

        records = self._attendance.list_range(
            start=day.replace(day=1), end=day, employee_ids=[e.employee_id for e in team]
        )
        by_employee: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for r in records:
            by_employee[r.employee_id].append(r)

        out = []
        for employee in team:
            rows = by_employee.get(employee.employee_id, [])
            today_row: Optional[AttendanceRecord] = next((r for r in rows if r.work_date == day), None)
            out.append(
                TeamMemberSnapshot(
                    employee=employee,
                    record=today_row,
                    status=derive_status(today_row),
                    attendance_score=score_from(self._good_days(rows), day.day),
                )
            )
        return out

    def team_trends(self, caller: CallerContext, today: date) -> TeamTrends:
        team = self._team(caller)
        if not team:
            return TeamTrends(as_of=today, weekly_percent=0, monthly_percent=0, late_percent=0)

        ids = [e.employee_id for e in team]
        week_start = start_of_week(today)
        month_start = today.replace(day=1)
        records = self._attendance.list_range(start=min(week_start, month_start), end=today, employee_ids=ids)
        statuses = [(r, derive_status(r).status) for r in records]

        def present_between(start: date) -> int:
            return sum(1 for r, s in statuses if r.work_date >= start and s in _PRESENT_FOR_TRENDS)

        days_this_week = (today - week_start).days + 1
        days_this_month = today.day
        late = sum(1 for r, s in statuses if r.work_date >= month_start and s == AttendanceStatus.LATE)

        present_today = {r.employee_id for r, s in statuses if r.work_date == today and s in _PRESENT_FOR_TRENDS}
        dept_count: Counter = Counter()
        dept_present: Counter = Counter()
        for e in team:
            dept_count[e.department] += 1
            if e.employee_id in present_today:
                dept_present[e.department] += 1

        departments = tuple(
            DepartmentPresence(department=d, employees=n, present_percent=percent(dept_present[d], n))
            for d, n in dept_count.items()
        )
        return TeamTrends(
            as_of=today,
            weekly_percent=percent(present_between(week_start), len(team) * days_this_week),
            monthly_percent=percent(present_between(month_start), len(team) * days_this_month),
            late_percent=percent(late, len(team) * days_this_month),
            departments=departments,
        )

    def working_days(self, month: int, year: int) -> list[date]:
        """Days of the month that are neither weekend days nor holidays."""
        start, end = month_bounds(month, year)
        holidays = self._policies.holiday_dates(year)
        return [d for d in iter_days(start, end) if d.weekday() not in self._weekend_days and d not in holidays]

    def monthly_summary(self, employee_id: int, month: int, year: int) -> MonthlySummary:
        month, year = require_month(month, year)
        employee = self._get_employee(employee_id)
        start, end = month_bounds(month, year)
        records: Sequence[AttendanceRecord] = self._attendance.list_range(
            start=start, end=end, employee_ids=[employee.employee_id]
        )

        counts = Counter(derive_status(r).status.value for r in records)
        working = len(self.working_days(month, year))
        good = self._good_days(records)
        return MonthlySummary(
            employee_id=employee.employee_id,
            month=month,
            year=year,
            status_counts=dict(counts),
            working_days=working,
            good_days=good,
            attendance_percent=min(100, percent(good, working)),
        )
