from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .balance_rule import SufficientBalanceRule
from .base import LeaveCheck, LeaveRule
from .consecutive_rule import MaxConsecutiveDaysRule
from .notice_rule import MinNoticeRule


def default_rules() -> list[LeaveRule]:
    return [MinNoticeRule(), MaxConsecutiveDaysRule(), SufficientBalanceRule()]


@dataclass
class LeaveRuleSet:
    """Runs rules in order; the first violation wins."""

    rules: Sequence[LeaveRule] = field(default_factory=default_rules)

    def check_request(self, request: LeaveCheck) -> None:
        for rule in self.rules:
            if not rule.needs_balances:
                rule.check(request)

    def check_balances(self, request: LeaveCheck) -> None:
        for rule in self.rules:
            if rule.needs_balances:
                rule.check(request)
