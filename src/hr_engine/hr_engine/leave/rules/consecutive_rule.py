from __future__ import annotations

from ...core.exceptions import ExceedsMaxConsecutiveDays
from .base import LeaveCheck, LeaveRule


class MaxConsecutiveDaysRule(LeaveRule):
    def check(self, request: LeaveCheck) -> None:
        limit = request.policy.max_consecutive_days
        if limit is None:
            return
        if request.days > int(limit):
            raise ExceedsMaxConsecutiveDays(
                f"{request.policy.code} allows at most {limit} consecutive days, requested {request.days}"
            )
