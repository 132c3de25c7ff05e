from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for authorization."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    TERMINATED = "Terminated"

    @property
    def is_employed(self) -> bool:
        return self in (EmployeeStatus.ACTIVE, EmployeeStatus.ON_LEAVE)


class AttendanceStatus(str, Enum):
    """Canonical attendance statuses stored in the DB."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    PRESENT_NO_LOGOUT = "PRESENT_NO_LOGOUT"
    ON_LEAVE = "ON_LEAVE"


class StatusProvenance(str, Enum):
    """Where an attendance status came from."""

    EXPLICIT = "EXPLICIT"
    DERIVED = "DERIVED"


class RequestStatus(str, Enum):
    """Leave request workflow state."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self != RequestStatus.PENDING


class LeaveDecision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class PayslipStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class HolidayType(str, Enum):
    NATIONAL = "National"
    REGIONAL = "Regional"
    COMPANY = "Company"
    OPTIONAL = "Optional"


class NotificationKind(str, Enum):
    LEAVE = "LEAVE"
    ATTENDANCE = "ATTENDANCE"
    PAYROLL = "PAYROLL"
