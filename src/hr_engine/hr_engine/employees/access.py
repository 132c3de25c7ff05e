from __future__ import annotations

from typing import Optional

from ..common.caller import CallerContext, require_role
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import Employee
from .repository import EmployeeRepository


def managed_department(caller: CallerContext, employees: EmployeeRepository) -> Optional[str]:
    """Department a caller may act on; None means every department (admin)."""
    require_role(caller, Role.ADMIN, Role.MANAGER)
    if caller.is_admin:
        return None

    if caller.employee_id is None:
        raise AuthorizationError("Manager employee profile not linked")
    manager = employees.get_by_id(int(caller.employee_id))
    if not manager:
        raise AuthorizationError("Manager employee profile not found")
    return manager.department


def assert_can_manage(caller: CallerContext, target: Employee, employees: EmployeeRepository) -> None:
    department = managed_department(caller, employees)
    if department is not None and department != target.department:
        raise AuthorizationError("Not allowed to act on employees of another department")


def assert_can_view(caller: CallerContext, target: Employee, employees: EmployeeRepository) -> None:
    if caller.role == Role.EMPLOYEE or caller.employee_id == target.employee_id:
        if caller.employee_id != target.employee_id:
            raise AuthorizationError("You can only view your own records")
        return
    assert_can_manage(caller, target, employees)
