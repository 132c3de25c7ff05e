from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import LeaveBalance
from .repository import BalanceRepository

_COLUMNS = "balance_id, employee_id, leave_type_id, year, total, used, remaining, carried_forward"


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        leave_type_id=int(r["leave_type_id"]),
        year=int(r["year"]),
        total=int(r["total"]),
        used=int(r["used"]),
        remaining=int(r["remaining"]),
        carried_forward=int(r.get("carried_forward") or 0),
    )


class MySQLBalanceRepository(BalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(
        self, *, employee_id: int, leave_type_id: int, year: int, for_update: bool = False
    ) -> Optional[LeaveBalance]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_leave_balances
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s{lock}
                """,
                (int(employee_id), int(leave_type_id), int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def list_for_employee(self, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_leave_balances
                WHERE employee_id=%s AND year=%s
                ORDER BY leave_type_id ASC
                """,
                (int(employee_id), int(year)),
            )
            return [_to_balance(r) for r in fetchall(cur)]

    def create_if_missing(self, *, employee_id: int, leave_type_id: int, year: int, total: int) -> bool:
        if self.get(employee_id=employee_id, leave_type_id=leave_type_id, year=year):
            return False
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employee_leave_balances(employee_id, leave_type_id, year, total, used, remaining)
                    VALUES(%s,%s,%s,%s,0,%s)
                    """,
                    (int(employee_id), int(leave_type_id), int(year), int(total), int(total)),
                )
                return True
        except mysql.connector.IntegrityError as e:
            # Another request materialized the same (employee, type, year) row first.
            if is_duplicate_key(e):
                return False
            raise

    def save(self, balance: LeaveBalance) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_leave_balances
                SET total=%s, used=%s, remaining=%s, carried_forward=%s
                WHERE balance_id=%s
                """,
                (balance.total, balance.used, balance.remaining, balance.carried_forward, balance.balance_id),
            )
            return cur.rowcount > 0
