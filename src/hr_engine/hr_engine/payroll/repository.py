from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PayslipStatus
from .model import Payslip, PayslipFigures


class PayslipRepository(Protocol):
    def get(self, payslip_id: int, *, for_update: bool = False) -> Optional[Payslip]:
        raise NotImplementedError

    def get_for_period(
        self, *, employee_id: int, month: int, year: int, for_update: bool = False
    ) -> Optional[Payslip]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        figures: PayslipFigures,
        status: PayslipStatus,
        generated_date: date,
    ) -> Optional[int]:
        """Insert a payslip. Returns None if the (employee, month, year) row already exists."""
        raise NotImplementedError

    def update_figures(self, *, payslip_id: int, figures: PayslipFigures, generated_date: date) -> bool:
        """Recompute amounts in place; status is left as it is."""
        raise NotImplementedError

    def set_status(self, *, payslip_id: int, status: PayslipStatus, expected: PayslipStatus) -> bool:
        """Change status only while it still equals `expected`."""
        raise NotImplementedError

    def list(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[PayslipStatus] = None,
        department: Optional[str] = None,
    ) -> Sequence[Payslip]:
        """Newest period first."""
        raise NotImplementedError
