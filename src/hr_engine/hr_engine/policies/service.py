from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Mapping, Optional

from ..common.caller import CallerContext, require_role
from ..common.validators import parse_enum, require_decimal, require_non_empty, require_non_negative_int
from ..core.enums import HolidayType, Role
from ..core.exceptions import PolicyNotFound, ValidationError
from .model import POLICY_FIELDS, Holiday, LeaveTypePolicy
from .repository import PolicyRepository

logger = logging.getLogger(__name__)

_INT_FIELDS = ("max_carry_forward", "auto_approve_days", "min_notice_days", "max_consecutive_days", "max_accumulation")
_BOOL_FIELDS = ("allow_carry_forward", "require_documentation", "is_active")


class PolicyStore:
    """Leave type policies and the holiday calendar.

    Reads are side-effect free. Admin edits never delete a leave type, they
    only deactivate it.
    """

    def __init__(self, policies: PolicyRepository):
        self._policies = policies

    def get_active_policy(self, code: str) -> LeaveTypePolicy:
        policy = self._policies.get_by_code((code or "").strip())
        if not policy or not policy.is_active:
            raise PolicyNotFound(f"Unknown leave type: {code!r}")
        return policy

    def get_policy(self, code: str) -> LeaveTypePolicy:
        """Like get_active_policy but also resolves deactivated types (pending requests may reference one)."""
        policy = self._policies.get_by_code((code or "").strip())
        if not policy:
            raise PolicyNotFound(f"Unknown leave type: {code!r}")
        return policy

    def get_policy_by_id(self, leave_type_id: int) -> LeaveTypePolicy:
        policy = self._policies.get_by_id(int(leave_type_id))
        if not policy:
            raise PolicyNotFound(f"Unknown leave type id: {leave_type_id}")
        return policy

    def list_active_policies(self) -> list[LeaveTypePolicy]:
        return list(self._policies.list_active())

    def get_holidays(self, year: int) -> list[Holiday]:
        """Year-specific and recurring holidays, each dated within `year`."""
        out: list[Holiday] = []
        for h in self._policies.list_holidays(int(year)):
            on = h.on_year(int(year))
            if on is None:
                continue
            out.append(replace(h, holiday_date=on, year=int(year)))
        out.sort(key=lambda h: h.holiday_date)
        return out

    def holiday_dates(self, year: int) -> set[date]:
        return {h.holiday_date for h in self.get_holidays(year)}

    # -------- Admin policy edits --------
    def create_leave_type(self, caller: CallerContext, data: Mapping[str, Any]) -> LeaveTypePolicy:
        require_role(caller, Role.ADMIN)

        fields = self._clean(data, partial=False)
        if self._policies.get_by_code(fields["code"]):
            raise ValidationError("Leave type code already exists")

        policy = LeaveTypePolicy(leave_type_id=0, **fields)
        leave_type_id = self._policies.create(policy)
        logger.info("Leave type %s created (id=%s)", policy.code, leave_type_id)
        return replace(policy, leave_type_id=leave_type_id)

    def update_leave_type_policy(
        self, caller: CallerContext, leave_type_id: int, changes: Mapping[str, Any]
    ) -> LeaveTypePolicy:
        require_role(caller, Role.ADMIN)

        current = self.get_policy_by_id(leave_type_id)
        fields = self._clean(changes, partial=True)
        if "code" in fields and fields["code"] != current.code:
            other = self._policies.get_by_code(fields["code"])
            if other and other.leave_type_id != current.leave_type_id:
                raise ValidationError("Leave type code already exists")

        updated = replace(current, **fields)
        self._policies.update(updated)
        logger.info("Leave type %s policy updated: %s", updated.code, sorted(fields))
        return updated

    def deactivate_leave_type(self, caller: CallerContext, leave_type_id: int) -> LeaveTypePolicy:
        return self.update_leave_type_policy(caller, leave_type_id, {"is_active": False})

    def create_holiday(
        self,
        caller: CallerContext,
        *,
        name: str,
        holiday_date: date,
        holiday_type: str | HolidayType = HolidayType.NATIONAL,
        is_recurring: bool = False,
    ) -> int:
        require_role(caller, Role.ADMIN)
        name = require_non_empty(name, "name")
        if holiday_date is None:
            raise ValidationError("date is required")
        kind = parse_enum(HolidayType, holiday_type, "holiday type")

        if self._policies.find_holiday(holiday_date=holiday_date, is_recurring=bool(is_recurring)):
            raise ValidationError("Holiday already exists for this date")

        return self._policies.create_holiday(
            name=name,
            holiday_date=holiday_date,
            holiday_type=kind,
            is_recurring=bool(is_recurring),
            year=None if is_recurring else holiday_date.year,
        )

    @staticmethod
    def _clean(data: Mapping[str, Any], *, partial: bool) -> dict:
        unknown = set(data) - set(POLICY_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown policy fields: {', '.join(sorted(unknown))}")

        out: dict = {}
        if "name" in data or not partial:
            out["name"] = require_non_empty(data.get("name"), "name")
        if "code" in data or not partial:
            out["code"] = require_non_empty(data.get("code"), "code").upper()
            if len(out["code"]) > 10:
                raise ValidationError("code is at most 10 characters")
        if "yearly_limit" in data or not partial:
            out["yearly_limit"] = require_non_negative_int(data.get("yearly_limit"), "yearly_limit")
        for f in _INT_FIELDS:
            if f in data:
                out[f] = require_non_negative_int(data[f], f, nullable=True)
        for f in _BOOL_FIELDS:
            if f in data:
                out[f] = bool(data[f])
        if "accrual_rate" in data:
            out["accrual_rate"] = require_decimal(data["accrual_rate"], "accrual_rate", nullable=True)
        return out
