from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, employee_code, full_name, department, designation, status, basic_salary, manager_id, user_id"


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        department=r.get("department"),
        designation=r.get("designation"),
        status=EmployeeStatus(r["status"]),
        basic_salary=Decimal(r["basic_salary"] or 0),
        manager_id=r.get("manager_id"),
        user_id=r.get("user_id"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_code=%s", (employee_code,))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_employed(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE status IN (%s, %s) ORDER BY employee_id ASC",
                (EmployeeStatus.ACTIVE.value, EmployeeStatus.ON_LEAVE.value),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def list_by_department(self, department: Optional[str]) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            if department is None:
                cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY full_name ASC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM employees WHERE department=%s ORDER BY full_name ASC",
                    (department,),
                )
            return [_to_employee(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_code: str,
        full_name: str,
        department: Optional[str],
        designation: Optional[str],
        status: EmployeeStatus,
        basic_salary: Decimal,
        manager_id: Optional[int],
        user_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    employee_code, full_name, department, designation, status, basic_salary, manager_id, user_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (employee_code, full_name, department, designation, status.value, basic_salary, manager_id, user_id),
            )
            return int(cur.lastrowid)

    def set_status(self, employee_id: int, status: EmployeeStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET status=%s WHERE employee_id=%s", (status.value, int(employee_id)))
            return cur.rowcount > 0

    def set_basic_salary(self, employee_id: int, basic_salary: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET basic_salary=%s WHERE employee_id=%s", (basic_salary, int(employee_id)))
            return cur.rowcount > 0
