from __future__ import annotations

from ...core.exceptions import ValidationError
from .base import UNPAID_LEAVE_MODES, PayrollCalculator
from .standard_calculator import StandardPayrollCalculator, WeightedPayrollCalculator

PRESENT_DAYS_MODES = {
    "rows": StandardPayrollCalculator,
    "weighted": WeightedPayrollCalculator,
}


def calculator_for_mode(mode: str, unpaid_leave_mode: str = "requests") -> PayrollCalculator:
    """Factory Pattern: pick the present-days strategy and unpaid-leave counting by config name."""
    try:
        cls = PRESENT_DAYS_MODES[(mode or "rows").strip().lower()]
    except KeyError:
        raise ValidationError(f"Unknown payroll present-days mode: {mode!r}")

    unpaid = (unpaid_leave_mode or "requests").strip().lower()
    if unpaid not in UNPAID_LEAVE_MODES:
        raise ValidationError(f"Unknown payroll unpaid-leave mode: {unpaid_leave_mode!r}")
    return cls(unpaid_leave_mode=unpaid)
