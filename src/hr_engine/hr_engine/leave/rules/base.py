from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Mapping

from ...common.datetime_utils import inclusive_days, split_by_year
from ...policies.model import LeaveTypePolicy
from ..model import LeaveBalance


@dataclass(frozen=True)
class LeaveCheck:
    """Everything a policy rule may look at when judging a request."""

    policy: LeaveTypePolicy
    from_date: date
    to_date: date
    today: date
    documentation_provided: bool = False
    # Balance rows keyed by year, loaded under lock.
    balances: Mapping[int, LeaveBalance] = field(default_factory=dict)

    @property
    def days(self) -> int:
        return inclusive_days(self.from_date, self.to_date)

    @property
    def days_by_year(self) -> dict[int, int]:
        return split_by_year(self.from_date, self.to_date)


class LeaveRule(ABC):
    """Strategy Pattern: one policy rule that can reject a leave request."""

    # Rules that read balances run inside the unit of work, after the rows are locked.
    needs_balances = False

    @abstractmethod
    def check(self, request: LeaveCheck) -> None:
        """Raise a PolicyViolationError subclass when the rule rejects the request."""
        raise NotImplementedError
