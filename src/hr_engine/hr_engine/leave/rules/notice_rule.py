from __future__ import annotations

from datetime import timedelta

from ...core.exceptions import InsufficientNotice
from .base import LeaveCheck, LeaveRule


class MinNoticeRule(LeaveRule):
    """Start date must be at least `min_notice_days` after today.

    Waived when the leave type requires documentation and it was supplied.
    """

    def check(self, request: LeaveCheck) -> None:
        notice = request.policy.min_notice_days
        if not notice:
            return
        if request.policy.require_documentation and request.documentation_provided:
            return

        earliest = request.today + timedelta(days=int(notice))
        if request.from_date < earliest:
            raise InsufficientNotice(
                f"{request.policy.code} requires {notice} days notice (earliest start {earliest.isoformat()})"
            )
