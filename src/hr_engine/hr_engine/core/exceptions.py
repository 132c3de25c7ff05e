class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed (missing fields, bad date ranges)."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class EmployeeNotFound(NotFoundError):
    pass


class PolicyNotFound(NotFoundError):
    pass


class LeaveRequestNotFound(NotFoundError):
    pass


class PayslipNotFound(NotFoundError):
    pass


class StateConflictError(DomainError):
    """Raised when an action conflicts with the current state of a record."""


class AlreadyMarkedIn(StateConflictError):
    pass


class AlreadyMarkedOut(StateConflictError):
    pass


class NotMarkedIn(StateConflictError):
    pass


class InvalidStateTransition(StateConflictError):
    pass


class PolicyViolationError(DomainError):
    """Raised when a leave policy rule rejects a request.

    `rule` names the violated rule so callers can report it.
    """

    rule = "policy"

    def __init__(self, message: str, *, rule: str | None = None):
        super().__init__(message)
        if rule is not None:
            self.rule = rule


class InsufficientNotice(PolicyViolationError):
    rule = "min_notice_days"


class ExceedsMaxConsecutiveDays(PolicyViolationError):
    rule = "max_consecutive_days"


class InsufficientBalance(PolicyViolationError):
    rule = "balance"


class SalaryNotSet(ValidationError):
    """Raised when payroll runs for an employee without a basic salary."""
