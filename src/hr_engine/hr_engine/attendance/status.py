"""Attendance status resolution.

Every consumer (ledger views, scoring, payroll weighting) goes through
`derive_status` so they cannot disagree about what a day counts as.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import HALF_DAY_WEIGHT
from ..core.enums import AttendanceStatus, StatusProvenance
from .model import AttendanceRecord

GOOD_STATUSES = frozenset(
    {
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.HALF_DAY,
        AttendanceStatus.PRESENT_NO_LOGOUT,
    }
)

PRESENT_DAY_WEIGHTS = {
    AttendanceStatus.PRESENT: 1.0,
    AttendanceStatus.LATE: 1.0,
    AttendanceStatus.PRESENT_NO_LOGOUT: 1.0,
    AttendanceStatus.HALF_DAY: HALF_DAY_WEIGHT,
    AttendanceStatus.ABSENT: 0.0,
    AttendanceStatus.ON_LEAVE: 0.0,
}


@dataclass(frozen=True)
class ResolvedStatus:
    status: AttendanceStatus
    provenance: StatusProvenance

    @property
    def is_explicit(self) -> bool:
        return self.provenance == StatusProvenance.EXPLICIT

    @property
    def is_good_day(self) -> bool:
        return self.status in GOOD_STATUSES

    @property
    def present_weight(self) -> float:
        return PRESENT_DAY_WEIGHTS[self.status]


def derive_status(record: Optional[AttendanceRecord]) -> ResolvedStatus:
    """Explicit status always wins; otherwise derive it from the timestamps."""
    if record is None:
        return ResolvedStatus(AttendanceStatus.ABSENT, StatusProvenance.DERIVED)
    if record.status is not None:
        return ResolvedStatus(record.status, StatusProvenance.EXPLICIT)
    if record.mark_in and record.mark_out:
        return ResolvedStatus(AttendanceStatus.PRESENT, StatusProvenance.DERIVED)
    if record.mark_in:
        return ResolvedStatus(AttendanceStatus.PRESENT_NO_LOGOUT, StatusProvenance.DERIVED)
    return ResolvedStatus(AttendanceStatus.ABSENT, StatusProvenance.DERIVED)
