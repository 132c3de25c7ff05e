from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional

from .analytics.service import AttendanceAnalytics
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceLedger
from .core.constants import DEFAULT_SHIFT_END, DEFAULT_SHIFT_START, DEFAULT_WEEKEND_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import TransactionManager
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .leave.mysql_balance_repository import MySQLBalanceRepository
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.repository import BalanceRepository, LeaveRequestRepository
from .leave.service import LeaveBalanceEngine
from .notifications.dispatcher import NotificationDispatcher, Notifier
from .payroll.calculator.factory import calculator_for_mode
from .payroll.mysql_payslip_repository import MySQLPayslipRepository
from .payroll.repository import PayslipRepository
from .payroll.service import PayrollEngine
from .policies.mysql_policy_repository import MySQLPolicyRepository
from .policies.repository import PolicyRepository
from .policies.service import PolicyStore


@dataclass(frozen=True)
class Container:
    tx: TransactionManager

    employees_repo: EmployeeRepository
    policies_repo: PolicyRepository
    attendance_repo: AttendanceRepository
    balances_repo: BalanceRepository
    leave_requests_repo: LeaveRequestRepository
    payslips_repo: PayslipRepository

    policy_store: PolicyStore
    attendance_ledger: AttendanceLedger
    leave_engine: LeaveBalanceEngine
    employee_service: EmployeeService
    analytics: AttendanceAnalytics
    payroll_engine: PayrollEngine


def _parse_time(value: Any, default: time) -> time:
    if value is None:
        return default
    if isinstance(value, time):
        return value
    return datetime.strptime(str(value), "%H:%M").time()


def wire_container(
    *,
    tx: TransactionManager,
    employees_repo: EmployeeRepository,
    policies_repo: PolicyRepository,
    attendance_repo: AttendanceRepository,
    balances_repo: BalanceRepository,
    leave_requests_repo: LeaveRequestRepository,
    payslips_repo: PayslipRepository,
    settings: Any = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    """Composition root: every service gets its collaborators via its constructor."""

    notifications = NotificationDispatcher(
        notifier, enabled=bool(getattr(settings, "NOTIFICATIONS_ENABLED", True))
    )

    policy_store = PolicyStore(policies_repo)
    attendance_ledger = AttendanceLedger(
        attendance_repo,
        employees_repo,
        tx,
        shift_start=_parse_time(getattr(settings, "DEFAULT_SHIFT_START", None), DEFAULT_SHIFT_START),
        shift_end=_parse_time(getattr(settings, "DEFAULT_SHIFT_END", None), DEFAULT_SHIFT_END),
    )
    leave_engine = LeaveBalanceEngine(
        leave_requests_repo,
        balances_repo,
        policy_store,
        employees_repo,
        tx,
        notifications=notifications,
    )
    employee_service = EmployeeService(employees_repo, leave_engine, tx)
    analytics = AttendanceAnalytics(
        attendance_repo,
        employees_repo,
        policy_store,
        weekend_days=getattr(settings, "WEEKEND_DAYS", DEFAULT_WEEKEND_DAYS),
    )
    payroll_engine = PayrollEngine(
        payslips_repo,
        employees_repo,
        attendance_repo,
        leave_requests_repo,
        tx,
        notifications=notifications,
        calculator=calculator_for_mode(
            getattr(settings, "PAYROLL_PRESENT_DAYS_MODE", "rows"),
            getattr(settings, "PAYROLL_UNPAID_LEAVE_MODE", "requests"),
        ),
    )

    return Container(
        tx=tx,
        employees_repo=employees_repo,
        policies_repo=policies_repo,
        attendance_repo=attendance_repo,
        balances_repo=balances_repo,
        leave_requests_repo=leave_requests_repo,
        payslips_repo=payslips_repo,
        policy_store=policy_store,
        attendance_ledger=attendance_ledger,
        leave_engine=leave_engine,
        employee_service=employee_service,
        analytics=analytics,
        payroll_engine=payroll_engine,
    )


def build_container(*, db_config: dict, settings: Any = None, notifier: Optional[Notifier] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire_container(
        tx=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        policies_repo=MySQLPolicyRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        balances_repo=MySQLBalanceRepository(conn),
        leave_requests_repo=MySQLLeaveRequestRepository(conn),
        payslips_repo=MySQLPayslipRepository(conn),
        settings=settings,
        notifier=notifier,
    )
