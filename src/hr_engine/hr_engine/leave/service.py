from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.caller import CallerContext, require_role
from ..common.datetime_utils import now_local, split_by_year
from ..common.validators import parse_enum, require_date_range, require_non_negative_int
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveDecision, NotificationKind, RequestStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    EmployeeNotFound,
    InvalidStateTransition,
    LeaveRequestNotFound,
    ValidationError,
)
from ..database.unit_of_work import TransactionManager
from ..employees.access import assert_can_manage, managed_department
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..notifications.dispatcher import NotificationDispatcher
from ..policies.model import LeaveTypePolicy
from ..policies.service import PolicyStore
from .model import (
    BalanceView,
    CarryForwardReport,
    InitializationReport,
    LeaveBalance,
    LeaveOutcome,
    LeaveRequest,
)
from .repository import BalanceRepository, LeaveRequestRepository
from .rules.base import LeaveCheck
from .rules.factory import LeaveRuleSet

logger = logging.getLogger(__name__)

_BLOCKING_STATUSES = (RequestStatus.PENDING, RequestStatus.APPROVED)


class LeaveBalanceEngine:
    """Owns every EmployeeLeaveBalance mutation.

    Balances are a ledger: approvals are evaluated against the balance
    snapshot locked at decision time, in arrival order, and an approval that
    overdraws a row is committed and reported rather than clamped.

    Days are calendar days (weekends and holidays included). A request that
    crosses Dec 31 debits each year's row for the days falling in that year.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        balances: BalanceRepository,
        policies: PolicyStore,
        employees: EmployeeRepository,
        tx: TransactionManager,
        *,
        notifications: Optional[NotificationDispatcher] = None,
        rules: Optional[LeaveRuleSet] = None,
    ):
        self._requests = requests
        self._balances = balances
        self._policies = policies
        self._employees = employees
        self._tx = tx
        self._notifications = notifications or NotificationDispatcher()
        self._rules = rules or LeaveRuleSet()

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound(f"Employee {employee_id} not found")
        return employee

    def _lock_balances(self, employee_id: int, policy: LeaveTypePolicy, years: Sequence[int]) -> dict[int, LeaveBalance]:
        locked: dict[int, LeaveBalance] = {}
        for year in years:
            self.materialize_balances(employee_id, year)
            balance = self._balances.get(
                employee_id=employee_id, leave_type_id=policy.leave_type_id, year=year, for_update=True
            )
            if balance is None:
                # Inactive leave types are not materialized in bulk; create this one row on demand.
                self._balances.create_if_missing(
                    employee_id=employee_id, leave_type_id=policy.leave_type_id, year=year, total=policy.yearly_limit
                )
                balance = self._balances.get(
                    employee_id=employee_id, leave_type_id=policy.leave_type_id, year=year, for_update=True
                )
            locked[year] = balance
        return locked

    def _debit(self, balances: dict[int, LeaveBalance], days_by_year: dict[int, int]) -> tuple[LeaveBalance, ...]:
        out = []
        for year, days in sorted(days_by_year.items()):
            updated = balances[year].debit(days)
            self._balances.save(updated)
            out.append(updated)
        return tuple(out)

    @staticmethod
    def _overdraw_warnings(policy: LeaveTypePolicy, balances: Sequence[LeaveBalance]) -> tuple[str, ...]:
        return tuple(
            f"{policy.code} balance for {b.year} is overdrawn (remaining {b.remaining})"
            for b in balances
            if b.is_overdrawn
        )

    # -------- Employee actions --------
    def apply_leave(
        self,
        employee_id: int,
        leave_type_code: str,
        from_date: date,
        to_date: date,
        reason: Optional[str] = None,
        *,
        documentation_ref: Optional[str] = None,
        today: date | None = None,
    ) -> LeaveOutcome:
        if not leave_type_code:
            raise ValidationError("leaveType, fromDate and toDate are required")
        require_date_range(from_date, to_date)
        today = today or now_local().date()

        employee = self._get_employee(employee_id)
        if not employee.is_employed:
            raise ValidationError("Employee is not active")
        policy = self._policies.get_active_policy(leave_type_code)

        check = LeaveCheck(
            policy=policy,
            from_date=from_date,
            to_date=to_date,
            today=today,
            documentation_provided=bool(documentation_ref and documentation_ref.strip()),
        )
        self._rules.check_request(check)
        days_by_year = check.days_by_year

        with self._tx.transaction():
            balances = self._lock_balances(employee.employee_id, policy, sorted(days_by_year))
            self._rules.check_balances(
                LeaveCheck(
                    policy=policy,
                    from_date=from_date,
                    to_date=to_date,
                    today=today,
                    documentation_provided=check.documentation_provided,
                    balances=balances,
                )
            )

            # Collisions are advisory for the approver; they never block creation.
            overlapping = self._requests.list_overlapping(
                employee_id=employee.employee_id,
                from_date=from_date,
                to_date=to_date,
                statuses=_BLOCKING_STATUSES,
            )
            auto_approve = policy.auto_approves(check.days)
            request_id = self._requests.create(
                employee_id=employee.employee_id,
                leave_type=policy.code,
                from_date=from_date,
                to_date=to_date,
                reason=(reason or "").strip() or None,
                status=RequestStatus.APPROVED if auto_approve else RequestStatus.PENDING,
                has_collision=bool(overlapping),
                collision_count=len(overlapping),
                documentation_ref=documentation_ref,
            )
            touched: tuple[LeaveBalance, ...] = ()
            if auto_approve:
                touched = self._debit(balances, days_by_year)
            request = self._requests.get(request_id)

        logger.info(
            "Leave request %s: employee=%s type=%s days=%s status=%s collisions=%s",
            request.request_id,
            employee.employee_id,
            policy.code,
            check.days,
            request.status.value,
            request.collision_count,
        )

        if auto_approve:
            self._notifications.dispatch(
                employee.user_id,
                "Leave Auto-Approved",
                "Your leave has been automatically approved",
                NotificationKind.LEAVE,
            )
        else:
            manager = self._employees.get_by_id(employee.manager_id) if employee.manager_id else None
            if manager:
                self._notifications.dispatch(
                    manager.user_id,
                    "New Leave Request",
                    f"{employee.full_name} applied for leave",
                    NotificationKind.LEAVE,
                )

        return LeaveOutcome(request=request, balances=touched)

    def list_my_leaves(self, employee_id: int, *, limit: int = 200) -> Sequence[LeaveRequest]:
        return self._requests.list_for_employee(int(employee_id), limit=int(limit))

    # -------- Manager / Admin --------
    def decide_leave(
        self,
        approver: CallerContext,
        request_id: int,
        decision: str | LeaveDecision,
        *,
        now: datetime | None = None,
    ) -> LeaveOutcome:
        require_role(approver, Role.ADMIN, Role.MANAGER)
        decision = parse_enum(LeaveDecision, decision, "decision")
        now = now or now_local()

        with self._tx.transaction():
            request = self._requests.get(int(request_id), for_update=True)
            if not request:
                raise LeaveRequestNotFound(f"Leave request {request_id} not found")
            employee = self._get_employee(request.employee_id)
            assert_can_manage(approver, employee, self._employees)
            if approver.employee_id is not None and int(approver.employee_id) == request.employee_id:
                raise AuthorizationError("You cannot decide your own leave request")
            if request.status != RequestStatus.PENDING:
                raise InvalidStateTransition(f"Leave already processed ({request.status.value})")

            touched: tuple[LeaveBalance, ...] = ()
            warnings: tuple[str, ...] = ()
            if decision == LeaveDecision.APPROVE:
                policy = self._policies.get_policy(request.leave_type)
                days_by_year = request.days_by_year
                balances = self._lock_balances(request.employee_id, policy, sorted(days_by_year))
                touched = self._debit(balances, days_by_year)
                warnings = self._overdraw_warnings(policy, touched)

            status = RequestStatus.APPROVED if decision == LeaveDecision.APPROVE else RequestStatus.REJECTED
            if not self._requests.decide(
                request_id=request.request_id,
                status=status,
                approver_id=approver.employee_id,
                decided_at=now,
            ):
                raise InvalidStateTransition("Leave already processed")
            request = self._requests.get(request.request_id)

        for warning in warnings:
            logger.warning("Leave request %s approved with %s", request.request_id, warning)
        logger.info("Leave request %s %s by %s", request.request_id, status.value, approver.employee_id)

        self._notifications.dispatch(
            employee.user_id,
            "Leave Status Updated",
            f"Your leave has been {status.value}",
            NotificationKind.LEAVE,
        )
        return LeaveOutcome(request=request, balances=touched, warnings=warnings)

    def list_pending(self, caller: CallerContext, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        department = managed_department(caller, self._employees)
        return self._requests.list_by_status(status=RequestStatus.PENDING, department=department, limit=int(limit))

    def list_leaves(
        self, caller: CallerContext, status: str | RequestStatus | None = None, *, limit: int = DEFAULT_LIST_LIMIT
    ) -> Sequence[LeaveRequest]:
        """Every request (managers: their department only), newest first. "all" or None means any status."""
        department = managed_department(caller, self._employees)
        if status is None or (isinstance(status, str) and status.strip().lower() in ("", "all")):
            wanted = None
        else:
            wanted = parse_enum(RequestStatus, status, "status")
        return self._requests.list_all(status=wanted, department=department, limit=int(limit))

    # -------- Balances --------
    def materialize_balances(self, employee_id: int, year: int) -> int:
        """Create the missing rows for every active leave type. Returns rows created."""
        created = 0
        with self._tx.transaction():
            for policy in self._policies.list_active_policies():
                if self._balances.create_if_missing(
                    employee_id=int(employee_id),
                    leave_type_id=policy.leave_type_id,
                    year=int(year),
                    total=policy.yearly_limit,
                ):
                    created += 1
        return created

    def initialize_balances_for_year(self, year: int) -> InitializationReport:
        """Idempotent: existing (employee, leave type, year) rows are left untouched."""
        year = int(year)
        with self._tx.transaction():
            employees = list(self._employees.list_employed())
            policies = self._policies.list_active_policies()
            created = sum(self.materialize_balances(e.employee_id, year) for e in employees)

        logger.info("Initialized %s leave balances for %s (%s employees)", created, year, len(employees))
        return InitializationReport(
            year=year,
            employees_processed=len(employees),
            leave_types_processed=len(policies),
            balances_created=created,
        )

    def get_balances(self, employee_id: int, year: int, *, today: date | None = None) -> list[BalanceView]:
        employee = self._get_employee(employee_id)
        today = today or now_local().date()
        self.materialize_balances(employee.employee_id, int(year))

        views: list[BalanceView] = []
        for balance in self._balances.list_for_employee(employee.employee_id, int(year)):
            policy = self._policies.get_policy_by_id(balance.leave_type_id)
            views.append(
                BalanceView(
                    balance=balance,
                    leave_type_code=policy.code,
                    leave_type_name=policy.name,
                    yearly_limit=policy.yearly_limit,
                    accrued=self._accrued(policy, balance, today),
                )
            )
        return views

    @staticmethod
    def _accrued(policy: LeaveTypePolicy, balance: LeaveBalance, today: date) -> Optional[int]:
        if policy.accrual_rate is None:
            return None
        if balance.year < today.year:
            months = 12
        elif balance.year > today.year:
            months = 0
        else:
            months = today.month
        earned = math.floor(policy.accrual_rate * months) + balance.carried_forward
        return min(balance.total, earned)

    def adjust_total(
        self, caller: CallerContext, employee_id: int, leave_type_code: str, year: int, total: int
    ) -> LeaveBalance:
        """Admin correction of a balance total. Remaining follows total - used."""
        require_role(caller, Role.ADMIN)
        total = require_non_negative_int(total, "total")
        employee = self._get_employee(employee_id)
        policy = self._policies.get_policy(leave_type_code)

        with self._tx.transaction():
            balance = self._lock_balances(employee.employee_id, policy, [int(year)])[int(year)]
            updated = balance.with_total(total)
            self._balances.save(updated)

        if updated.is_overdrawn:
            logger.warning(
                "Balance correction left employee %s %s/%s with remaining %s (used %s > total %s)",
                employee.employee_id,
                policy.code,
                year,
                updated.remaining,
                updated.used,
                updated.total,
            )
        return updated

    def carry_forward(self, caller: CallerContext, from_year: int) -> CarryForwardReport:
        """Year-end rollover of unused balance into the next year's total.

        Idempotent: the carried amount is stored separately and replaced, not
        added, when the rollover runs again.
        """

        require_role(caller, Role.ADMIN)
        from_year = int(from_year)
        to_year = from_year + 1
        updated_rows = 0
        days_carried = 0

        with self._tx.transaction():
            policies = [p for p in self._policies.list_active_policies() if p.allow_carry_forward]
            for employee in self._employees.list_employed():
                for policy in policies:
                    previous = self._balances.get(
                        employee_id=employee.employee_id, leave_type_id=policy.leave_type_id, year=from_year
                    )
                    if previous is None:
                        continue

                    carry = max(previous.remaining, 0)
                    if policy.max_carry_forward is not None:
                        carry = min(carry, int(policy.max_carry_forward))

                    target = self._lock_balances(employee.employee_id, policy, [to_year])[to_year]
                    base = target.total - target.carried_forward
                    if policy.max_accumulation is not None:
                        carry = max(0, min(carry, int(policy.max_accumulation) - base))

                    if carry == target.carried_forward:
                        continue
                    self._balances.save(target.with_total(base + carry, carried_forward=carry))
                    updated_rows += 1
                    days_carried += carry

        logger.info("Carried forward %s days into %s (%s balances updated)", days_carried, to_year, updated_rows)
        return CarryForwardReport(
            from_year=from_year, to_year=to_year, balances_updated=updated_rows, days_carried=days_carried
        )
