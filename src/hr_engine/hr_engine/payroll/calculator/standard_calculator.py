from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...attendance.status import derive_status
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: every attendance row of the month is one present day."""

    def present_days(self, records: Sequence[AttendanceRecord]) -> float:
        return float(len(records))


class WeightedPayrollCalculator(PayrollCalculator):
    """Weights each row by its resolved status: HALF_DAY = 0.5, ABSENT/ON_LEAVE = 0."""

    def present_days(self, records: Sequence[AttendanceRecord]) -> float:
        return float(sum(derive_status(r).present_weight for r in records))
