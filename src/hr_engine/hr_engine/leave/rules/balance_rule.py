from __future__ import annotations

from ...core.exceptions import InsufficientBalance
from .base import LeaveCheck, LeaveRule


class SufficientBalanceRule(LeaveRule):
    """Days falling in each calendar year must fit that year's remaining balance."""

    needs_balances = True

    def check(self, request: LeaveCheck) -> None:
        for year, days in sorted(request.days_by_year.items()):
            balance = request.balances.get(year)
            remaining = balance.remaining if balance else 0
            if days > remaining:
                raise InsufficientBalance(
                    f"Insufficient {request.policy.code} balance for {year}: requested {days}, remaining {remaining}"
                )
