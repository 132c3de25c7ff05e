from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.caller import CallerContext
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import parse_enum, require_month
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_SHIFT_END, DEFAULT_SHIFT_START
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyMarkedIn,
    AlreadyMarkedOut,
    EmployeeNotFound,
    NotMarkedIn,
    StateConflictError,
    ValidationError,
)
from ..database.unit_of_work import TransactionManager
from ..employees.access import assert_can_manage, managed_department
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .status import ResolvedStatus, derive_status

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Sole writer of attendance rows.

    Day record state machine: NONE -> (mark_in) -> IN -> (mark_out) -> COMPLETE,
    plus the administrative edge NONE|IN|COMPLETE -> (manager_set_status) -> ANY.
    No transition deletes a record.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        tx: TransactionManager,
        *,
        shift_start: time = DEFAULT_SHIFT_START,
        shift_end: time = DEFAULT_SHIFT_END,
    ):
        self._attendance = attendance
        self._employees = employees
        self._tx = tx
        self._shift_start = shift_start
        self._shift_end = shift_end

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        return employee

    def _reload(self, employee_id: int, work_date: date, *, for_update: bool = False) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee_id, work_date, for_update=for_update)
        if record is None:
            raise StateConflictError("Attendance record disappeared while updating")
        return record

    def _override_times(
        self, existing: Optional[AttendanceRecord], status: AttendanceStatus, work_date: date
    ) -> tuple[Optional[datetime], Optional[datetime]]:
        mark_in = existing.mark_in if existing else None
        mark_out = existing.mark_out if existing else None
        if status == AttendanceStatus.PRESENT:
            mark_in = mark_in or datetime.combine(work_date, self._shift_start)
            mark_out = mark_out or datetime.combine(work_date, self._shift_end)
        elif status == AttendanceStatus.ABSENT:
            mark_in = None
            mark_out = None
        return mark_in, mark_out

    def mark_in(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        employee = self._get_employee(employee_id)
        if not employee.is_employed:
            raise ValidationError("Employee is not active")

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if existing and existing.mark_in is not None:
            raise AlreadyMarkedIn("Already marked in for today")

        if existing:
            # Row created earlier by a manager override without a mark-in.
            if not self._attendance.set_mark_in(attendance_id=existing.attendance_id, mark_in=now):
                raise AlreadyMarkedIn("Already marked in for today")
        else:
            created = self._attendance.create(employee_id=employee.employee_id, work_date=today, mark_in=now)
            if created is None:
                # Lost a concurrent insert on (employee_id, work_date).
                raise AlreadyMarkedIn("Already marked in for today")

        logger.info("Employee %s marked in at %s", employee.employee_id, now.isoformat())
        return self._reload(employee.employee_id, today)

    def mark_out(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        employee = self._get_employee(employee_id)
        record = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if not record or record.mark_in is None:
            raise NotMarkedIn("Mark in first")
        if record.mark_out is not None:
            raise AlreadyMarkedOut("Already marked out today")
        if now < record.mark_in:
            raise ValidationError("Mark-out time cannot be before mark-in time")

        if not self._attendance.set_mark_out(attendance_id=record.attendance_id, mark_out=now):
            raise AlreadyMarkedOut("Already marked out today")

        logger.info("Employee %s marked out at %s", employee.employee_id, now.isoformat())
        return self._reload(employee.employee_id, today)

    def manager_set_status(
        self,
        caller: CallerContext,
        employee_id: int,
        work_date: date | None,
        status: str | AttendanceStatus,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Administrative upsert of a day record.

        PRESENT without timestamps fills the canonical shift window; ABSENT
        clears both timestamps. Mark-in/mark-out state checks do not apply.
        """

        work_date = work_date or now_local().date()
        status = parse_enum(AttendanceStatus, status, "attendance status")
        employee = self._get_employee(employee_id)
        assert_can_manage(caller, employee, self._employees)

        with self._tx.transaction():
            existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date, for_update=True)
            if existing is None:
                mark_in, mark_out = self._override_times(None, status, work_date)
                created = self._attendance.create(
                    employee_id=employee.employee_id,
                    work_date=work_date,
                    mark_in=mark_in,
                    mark_out=mark_out,
                    status=status,
                    notes=notes,
                )
                if created is None:
                    # A concurrent mark-in inserted the row first; update it instead.
                    existing = self._reload(employee.employee_id, work_date, for_update=True)

            if existing is not None:
                mark_in, mark_out = self._override_times(existing, status, work_date)
                self._attendance.admin_update_record(
                    attendance_id=existing.attendance_id,
                    mark_in=mark_in,
                    mark_out=mark_out,
                    status=status,
                    notes=notes,
                )

            record = self._reload(employee.employee_id, work_date, for_update=True)

        logger.info(
            "Attendance of employee %s on %s set to %s by %s",
            employee.employee_id,
            work_date.isoformat(),
            status.value,
            caller.employee_id,
        )
        return record

    @staticmethod
    def derive_status(record: Optional[AttendanceRecord]) -> ResolvedStatus:
        return derive_status(record)

    def get_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(int(employee_id), work_date)

    def get_my_attendance(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_employee(int(employee_id), limit=int(limit))

    def list_range(
        self, *, start: date, end: date, employee_ids: Optional[Sequence[int]] = None
    ) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("end must be on or after start")
        return self._attendance.list_range(start=start, end=end, employee_ids=employee_ids)

    def list_month(self, caller: CallerContext, month: int, year: int) -> Sequence[AttendanceRecord]:
        """Every row of the month; managers only see their own department."""
        month, year = require_month(month, year)
        department = managed_department(caller, self._employees)
        start, end = month_bounds(month, year)
        if department is None:
            return self._attendance.list_range(start=start, end=end)
        ids = [e.employee_id for e in self._employees.list_by_department(department)]
        if not ids:
            return []
        return self._attendance.list_range(start=start, end=end, employee_ids=ids)
