"""In-memory fakes for the repository protocols, shared by the test modules."""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from src.hr_engine.hr_engine.attendance.model import AttendanceRecord
from src.hr_engine.hr_engine.common.caller import CallerContext
from src.hr_engine.hr_engine.common.datetime_utils import ranges_overlap
from src.hr_engine.hr_engine.container import Container, wire_container
from src.hr_engine.hr_engine.core.enums import (
    AttendanceStatus,
    EmployeeStatus,
    HolidayType,
    NotificationKind,
    PayslipStatus,
    RequestStatus,
    Role,
)
from src.hr_engine.hr_engine.employees.model import Employee
from src.hr_engine.hr_engine.leave.model import LeaveBalance, LeaveRequest
from src.hr_engine.hr_engine.payroll.model import Payslip, PayslipFigures
from src.hr_engine.hr_engine.policies.model import Holiday, LeaveTypePolicy

ADMIN = CallerContext(employee_id=None, role=Role.ADMIN)


class InMemoryDB:
    """All tables of the fake store; the fake unit of work snapshots this object."""

    def __init__(self):
        self.employees: dict[int, Employee] = {}
        self.policies: dict[int, LeaveTypePolicy] = {}
        self.holidays: dict[int, Holiday] = {}
        self.attendance: dict[int, AttendanceRecord] = {}
        self.balances: dict[int, LeaveBalance] = {}
        self.requests: dict[int, LeaveRequest] = {}
        self.payslips: dict[int, Payslip] = {}
        self._last_id = 0

    def next_id(self) -> int:
        self._last_id += 1
        return self._last_id


class FakeTransactionManager:
    """Unit of work over InMemoryDB: restores the snapshot when the block raises."""

    def __init__(self, db: InMemoryDB):
        self.db = db
        self.depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        if self.depth:
            self.depth += 1
            try:
                yield self.db
            finally:
                self.depth -= 1
            return

        snapshot = copy.deepcopy(self.db.__dict__)
        self.depth = 1
        try:
            yield self.db
        except BaseException:
            self.db.__dict__.clear()
            self.db.__dict__.update(snapshot)
            self.rollbacks += 1
            raise
        else:
            self.commits += 1
        finally:
            self.depth = 0


@dataclass
class InMemoryEmployees:
    db: InMemoryDB

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.db.employees.get(int(employee_id))

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        return next((e for e in self.db.employees.values() if e.employee_code == employee_code), None)

    def list_employed(self) -> Sequence[Employee]:
        return [e for _, e in sorted(self.db.employees.items()) if e.is_employed]

    def list_by_department(self, department: Optional[str]) -> Sequence[Employee]:
        return [
            e for _, e in sorted(self.db.employees.items()) if department is None or e.department == department
        ]

    def create(self, *, employee_code, full_name, department, designation, status, basic_salary, manager_id, user_id):
        employee_id = self.db.next_id()
        self.db.employees[employee_id] = Employee(
            employee_id=employee_id,
            employee_code=employee_code,
            full_name=full_name,
            department=department,
            designation=designation,
            status=status,
            basic_salary=Decimal(basic_salary),
            manager_id=manager_id,
            user_id=user_id,
        )
        return employee_id

    def set_status(self, employee_id: int, status: EmployeeStatus) -> bool:
        current = self.db.employees.get(int(employee_id))
        if not current:
            return False
        self.db.employees[current.employee_id] = replace(current, status=status)
        return True

    def set_basic_salary(self, employee_id: int, basic_salary: Decimal) -> bool:
        current = self.db.employees.get(int(employee_id))
        if not current:
            return False
        self.db.employees[current.employee_id] = replace(current, basic_salary=Decimal(basic_salary))
        return True


@dataclass
class InMemoryPolicies:
    db: InMemoryDB

    def get_by_code(self, code: str) -> Optional[LeaveTypePolicy]:
        return next((p for p in self.db.policies.values() if p.code == code), None)

    def get_by_id(self, leave_type_id: int) -> Optional[LeaveTypePolicy]:
        return self.db.policies.get(int(leave_type_id))

    def list_active(self) -> Sequence[LeaveTypePolicy]:
        return [p for _, p in sorted(self.db.policies.items()) if p.is_active]

    def create(self, policy: LeaveTypePolicy) -> int:
        leave_type_id = self.db.next_id()
        self.db.policies[leave_type_id] = replace(policy, leave_type_id=leave_type_id)
        return leave_type_id

    def update(self, policy: LeaveTypePolicy) -> bool:
        if policy.leave_type_id not in self.db.policies:
            return False
        self.db.policies[policy.leave_type_id] = policy
        return True

    def list_holidays(self, year: int) -> Sequence[Holiday]:
        return [
            h
            for _, h in sorted(self.db.holidays.items())
            if h.is_active and (h.is_recurring or h.holiday_date.year == year)
        ]

    def find_holiday(self, *, holiday_date: date, is_recurring: bool) -> Optional[Holiday]:
        return next(
            (
                h
                for h in self.db.holidays.values()
                if h.holiday_date == holiday_date and h.is_recurring == is_recurring
            ),
            None,
        )

    def create_holiday(self, *, name, holiday_date, holiday_type, is_recurring, year) -> int:
        holiday_id = self.db.next_id()
        self.db.holidays[holiday_id] = Holiday(
            holiday_id=holiday_id,
            name=name,
            holiday_date=holiday_date,
            holiday_type=holiday_type,
            is_recurring=is_recurring,
            year=year,
        )
        return holiday_id


@dataclass
class InMemoryAttendance:
    db: InMemoryDB

    def get_for_employee_and_date(self, employee_id: int, work_date: date, *, for_update: bool = False):
        return self._find(employee_id, work_date)

    def _find(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (
                r
                for r in self.db.attendance.values()
                if r.employee_id == int(employee_id) and r.work_date == work_date
            ),
            None,
        )

    def list_for_employee(self, employee_id, *, start=None, end=None, limit=None):
        rows = [
            r
            for r in self.db.attendance.values()
            if r.employee_id == int(employee_id)
            and (start is None or r.work_date >= start)
            and (end is None or r.work_date <= end)
        ]
        rows.sort(key=lambda r: r.work_date, reverse=True)
        return rows[:limit] if limit is not None else rows

    def list_range(self, *, start, end, employee_ids=None):
        rows = [
            r
            for r in self.db.attendance.values()
            if start <= r.work_date <= end and (employee_ids is None or r.employee_id in employee_ids)
        ]
        rows.sort(key=lambda r: (r.work_date, r.employee_id))
        return rows

    def create(self, *, employee_id, work_date, mark_in, mark_out=None, status=None, notes=None):
        if self._find(employee_id, work_date):
            return None
        attendance_id = self.db.next_id()
        self.db.attendance[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=int(employee_id),
            work_date=work_date,
            mark_in=mark_in,
            mark_out=mark_out,
            status=status,
            notes=notes,
        )
        return attendance_id

    def set_mark_in(self, *, attendance_id: int, mark_in: datetime) -> bool:
        current = self.db.attendance.get(attendance_id)
        if not current or current.mark_in is not None:
            return False
        self.db.attendance[attendance_id] = replace(current, mark_in=mark_in)
        return True

    def set_mark_out(self, *, attendance_id: int, mark_out: datetime) -> bool:
        current = self.db.attendance.get(attendance_id)
        if not current or current.mark_in is None or current.mark_out is not None:
            return False
        self.db.attendance[attendance_id] = replace(current, mark_out=mark_out)
        return True

    def admin_update_record(self, *, attendance_id, mark_in, mark_out, status, notes=None) -> bool:
        current = self.db.attendance.get(attendance_id)
        if not current:
            return False
        self.db.attendance[attendance_id] = replace(
            current, mark_in=mark_in, mark_out=mark_out, status=status, notes=notes
        )
        return True


@dataclass
class InMemoryBalances:
    db: InMemoryDB

    def get(self, *, employee_id, leave_type_id, year, for_update=False) -> Optional[LeaveBalance]:
        return next(
            (
                b
                for b in self.db.balances.values()
                if (b.employee_id, b.leave_type_id, b.year) == (int(employee_id), int(leave_type_id), int(year))
            ),
            None,
        )

    def list_for_employee(self, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        rows = [b for b in self.db.balances.values() if b.employee_id == int(employee_id) and b.year == int(year)]
        rows.sort(key=lambda b: b.leave_type_id)
        return rows

    def create_if_missing(self, *, employee_id, leave_type_id, year, total) -> bool:
        if self.get(employee_id=employee_id, leave_type_id=leave_type_id, year=year):
            return False
        balance_id = self.db.next_id()
        self.db.balances[balance_id] = LeaveBalance(
            balance_id=balance_id,
            employee_id=int(employee_id),
            leave_type_id=int(leave_type_id),
            year=int(year),
            total=int(total),
            used=0,
            remaining=int(total),
        )
        return True

    def save(self, balance: LeaveBalance) -> bool:
        if balance.balance_id not in self.db.balances:
            return False
        self.db.balances[balance.balance_id] = balance
        return True


@dataclass
class InMemoryLeaveRequests:
    db: InMemoryDB

    def create(
        self,
        *,
        employee_id,
        leave_type,
        from_date,
        to_date,
        reason,
        status,
        has_collision,
        collision_count,
        documentation_ref=None,
    ) -> int:
        request_id = self.db.next_id()
        self.db.requests[request_id] = LeaveRequest(
            request_id=request_id,
            employee_id=int(employee_id),
            leave_type=leave_type,
            from_date=from_date,
            to_date=to_date,
            reason=reason,
            status=status,
            created_at=datetime(2020, 1, 1) + timedelta(seconds=request_id),
            has_collision=has_collision,
            collision_count=collision_count,
            documentation_ref=documentation_ref,
        )
        return request_id

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        return self.db.requests.get(int(request_id))

    def list_overlapping(self, *, employee_id, from_date, to_date, statuses):
        return [
            r
            for r in self.db.requests.values()
            if r.employee_id == int(employee_id)
            and r.status in statuses
            and ranges_overlap(r.from_date, r.to_date, from_date, to_date)
        ]

    def decide(self, *, request_id, status, approver_id, decided_at) -> bool:
        current = self.db.requests.get(int(request_id))
        if not current or current.status != RequestStatus.PENDING:
            return False
        self.db.requests[current.request_id] = replace(
            current, status=status, approver_id=approver_id, decided_at=decided_at
        )
        return True

    def list_for_employee(self, employee_id: int, *, limit: int = 200):
        rows = [r for r in self.db.requests.values() if r.employee_id == int(employee_id)]
        rows.sort(key=lambda r: (r.from_date, r.created_at), reverse=True)
        return rows[:limit]

    def list_by_status(self, *, status, department=None, limit=500):
        rows = [
            r
            for r in self.db.requests.values()
            if r.status == status
            and (department is None or self.db.employees[r.employee_id].department == department)
        ]
        rows.sort(key=lambda r: (r.from_date, r.created_at))
        return rows[:limit]

    def list_all(self, *, status=None, department=None, limit=500):
        rows = [
            r
            for r in self.db.requests.values()
            if (status is None or r.status == status)
            and (department is None or self.db.employees[r.employee_id].department == department)
        ]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows[:limit]

    def list_approved_within(self, *, employee_id, start, end):
        rows = [
            r
            for r in self.db.requests.values()
            if r.employee_id == int(employee_id)
            and r.status == RequestStatus.APPROVED
            and r.from_date >= start
            and r.to_date <= end
        ]
        rows.sort(key=lambda r: r.from_date)
        return rows


@dataclass
class InMemoryPayslips:
    db: InMemoryDB

    def get(self, payslip_id: int, *, for_update: bool = False) -> Optional[Payslip]:
        return self.db.payslips.get(int(payslip_id))

    def get_for_period(self, *, employee_id, month, year, for_update=False) -> Optional[Payslip]:
        return next(
            (
                p
                for p in self.db.payslips.values()
                if (p.employee_id, p.month, p.year) == (int(employee_id), int(month), int(year))
            ),
            None,
        )

    def create(self, *, employee_id, month, year, figures: PayslipFigures, status, generated_date):
        if self.get_for_period(employee_id=employee_id, month=month, year=year):
            return None
        payslip_id = self.db.next_id()
        self.db.payslips[payslip_id] = Payslip(
            payslip_id=payslip_id,
            employee_id=int(employee_id),
            month=int(month),
            year=int(year),
            status=status,
            generated_date=generated_date,
            **vars(figures),
        )
        return payslip_id

    def update_figures(self, *, payslip_id, figures: PayslipFigures, generated_date) -> bool:
        current = self.db.payslips.get(int(payslip_id))
        if not current:
            return False
        self.db.payslips[current.payslip_id] = replace(current, generated_date=generated_date, **vars(figures))
        return True

    def set_status(self, *, payslip_id, status, expected) -> bool:
        current = self.db.payslips.get(int(payslip_id))
        if not current or current.status != expected:
            return False
        self.db.payslips[current.payslip_id] = replace(current, status=status)
        return True

    def list(self, *, month=None, year=None, employee_id=None, status=None, department=None):
        rows = [
            p
            for p in self.db.payslips.values()
            if (month is None or p.month == month)
            and (year is None or p.year == year)
            and (employee_id is None or p.employee_id == employee_id)
            and (status is None or p.status == status)
            and (department is None or self.db.employees[p.employee_id].department == department)
        ]
        rows.sort(key=lambda p: (p.year, p.month, p.payslip_id), reverse=True)
        return rows


@dataclass
class RecordingNotifier:
    sent: list = field(default_factory=list)
    fail: bool = False

    def notify(self, user_id: int, title: str, message: str, kind: NotificationKind) -> None:
        if self.fail:
            raise RuntimeError("notification service down")
        self.sent.append((user_id, title, message, kind))


class Settings:
    NOTIFICATIONS_ENABLED = True
    WEEKEND_DAYS = (5, 6)
    DEFAULT_SHIFT_START = "09:00"
    DEFAULT_SHIFT_END = "18:00"
    PAYROLL_PRESENT_DAYS_MODE = "rows"
    PAYROLL_UNPAID_LEAVE_MODE = "requests"


@dataclass
class World:
    db: InMemoryDB
    tx: FakeTransactionManager
    notifier: RecordingNotifier
    container: Container

    def add_employee(
        self,
        code: str,
        *,
        department: Optional[str] = "Engineering",
        basic_salary: Decimal | int | str = Decimal("30000"),
        manager_id: Optional[int] = None,
        user_id: Optional[int] = None,
        status: EmployeeStatus = EmployeeStatus.ACTIVE,
    ) -> Employee:
        employee_id = self.container.employees_repo.create(
            employee_code=code,
            full_name=f"Employee {code}",
            department=department,
            designation=None,
            status=status,
            basic_salary=Decimal(str(basic_salary)),
            manager_id=manager_id,
            user_id=user_id,
        )
        return self.db.employees[employee_id]

    def add_policy(self, code: str, *, yearly_limit: int = 10, **fields) -> LeaveTypePolicy:
        policy = LeaveTypePolicy(leave_type_id=0, name=f"{code} leave", code=code, yearly_limit=yearly_limit, **fields)
        leave_type_id = self.container.policies_repo.create(policy)
        return self.db.policies[leave_type_id]

    def add_holiday(self, name: str, on: date, *, recurring: bool = False) -> Holiday:
        holiday_id = self.container.policies_repo.create_holiday(
            name=name,
            holiday_date=on,
            holiday_type=HolidayType.NATIONAL,
            is_recurring=recurring,
            year=None if recurring else on.year,
        )
        return self.db.holidays[holiday_id]

    def add_attendance(
        self,
        employee: Employee,
        day: date,
        *,
        mark_in: Optional[datetime] = None,
        mark_out: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> AttendanceRecord:
        attendance_id = self.container.attendance_repo.create(
            employee_id=employee.employee_id, work_date=day, mark_in=mark_in, mark_out=mark_out, status=status
        )
        return self.db.attendance[attendance_id]

    def balance(self, employee: Employee, policy: LeaveTypePolicy, year: int) -> Optional[LeaveBalance]:
        return self.container.balances_repo.get(
            employee_id=employee.employee_id, leave_type_id=policy.leave_type_id, year=year
        )

    def payslip_count(self) -> int:
        return len(self.db.payslips)


def manager_of(employee: Employee) -> CallerContext:
    return CallerContext(employee_id=employee.employee_id, role=Role.MANAGER)


def employee_caller(employee: Employee) -> CallerContext:
    return CallerContext(employee_id=employee.employee_id, role=Role.EMPLOYEE)


def build_world(settings=Settings) -> World:
    db = InMemoryDB()
    tx = FakeTransactionManager(db)
    notifier = RecordingNotifier()
    container = wire_container(
        tx=tx,
        employees_repo=InMemoryEmployees(db),
        policies_repo=InMemoryPolicies(db),
        attendance_repo=InMemoryAttendance(db),
        balances_repo=InMemoryBalances(db),
        leave_requests_repo=InMemoryLeaveRequests(db),
        payslips_repo=InMemoryPayslips(db),
        settings=settings,
        notifier=notifier,
    )
    return World(db=db, tx=tx, notifier=notifier, container=container)


def all_balances_reconcile(db: InMemoryDB) -> bool:
    return all(b.remaining == b.total - b.used for b in db.balances.values())

