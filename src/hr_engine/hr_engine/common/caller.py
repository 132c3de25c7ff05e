from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


@dataclass(frozen=True)
class CallerContext:
    """Already-authenticated caller, as handed over by the identity layer."""

    employee_id: Optional[int]
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


def require_role(caller: CallerContext, *roles: Role) -> None:
    if caller.role not in roles:
        raise AuthorizationError("You are not allowed to perform this action")
