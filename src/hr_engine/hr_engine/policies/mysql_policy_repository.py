from __future__ import annotations

from dataclasses import astuple
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import HolidayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Holiday, LeaveTypePolicy
from .repository import PolicyRepository

_POLICY_COLUMNS = """
    leave_type_id, name, code, yearly_limit, allow_carry_forward, max_carry_forward,
    auto_approve_days, require_documentation, min_notice_days, max_consecutive_days,
    accrual_rate, max_accumulation, is_active
"""

_HOLIDAY_COLUMNS = "holiday_id, name, holiday_date, holiday_type, is_recurring, year, is_active"


def _to_policy(r: dict) -> LeaveTypePolicy:
    return LeaveTypePolicy(
        leave_type_id=int(r["leave_type_id"]),
        name=r["name"],
        code=r["code"],
        yearly_limit=int(r["yearly_limit"]),
        allow_carry_forward=bool(r["allow_carry_forward"]),
        max_carry_forward=r.get("max_carry_forward"),
        auto_approve_days=r.get("auto_approve_days"),
        require_documentation=bool(r["require_documentation"]),
        min_notice_days=r.get("min_notice_days"),
        max_consecutive_days=r.get("max_consecutive_days"),
        accrual_rate=Decimal(r["accrual_rate"]) if r.get("accrual_rate") is not None else None,
        max_accumulation=r.get("max_accumulation"),
        is_active=bool(r["is_active"]),
    )


def _to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        name=r["name"],
        holiday_date=r["holiday_date"],
        holiday_type=HolidayType(r["holiday_type"]),
        is_recurring=bool(r["is_recurring"]),
        year=r.get("year"),
        is_active=bool(r["is_active"]),
    )


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_code(self, code: str) -> Optional[LeaveTypePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_POLICY_COLUMNS} FROM leave_types WHERE code=%s", (code,))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def get_by_id(self, leave_type_id: int) -> Optional[LeaveTypePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_POLICY_COLUMNS} FROM leave_types WHERE leave_type_id=%s", (int(leave_type_id),))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def list_active(self) -> Sequence[LeaveTypePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_POLICY_COLUMNS} FROM leave_types WHERE is_active=1 ORDER BY name ASC")
            return [_to_policy(r) for r in fetchall(cur)]

    def create(self, policy: LeaveTypePolicy) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_types(
                    name, code, yearly_limit, allow_carry_forward, max_carry_forward,
                    auto_approve_days, require_documentation, min_notice_days, max_consecutive_days,
                    accrual_rate, max_accumulation, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                astuple(policy)[1:],
            )
            return int(cur.lastrowid)

    def update(self, policy: LeaveTypePolicy) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_types
                SET name=%s, code=%s, yearly_limit=%s, allow_carry_forward=%s, max_carry_forward=%s,
                    auto_approve_days=%s, require_documentation=%s, min_notice_days=%s,
                    max_consecutive_days=%s, accrual_rate=%s, max_accumulation=%s, is_active=%s
                WHERE leave_type_id=%s
                """,
                astuple(policy)[1:] + (policy.leave_type_id,),
            )
            return cur.rowcount > 0

    def list_holidays(self, year: int) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_HOLIDAY_COLUMNS}
                FROM holidays
                WHERE is_active=1 AND (year=%s OR is_recurring=1)
                ORDER BY holiday_date ASC
                """,
                (int(year),),
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def find_holiday(self, *, holiday_date: date, is_recurring: bool) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            if is_recurring:
                cur.execute(
                    f"""
                    SELECT {_HOLIDAY_COLUMNS} FROM holidays
                    WHERE MONTH(holiday_date)=%s AND DAY(holiday_date)=%s AND is_recurring=1
                    """,
                    (holiday_date.month, holiday_date.day),
                )
            else:
                cur.execute(
                    f"SELECT {_HOLIDAY_COLUMNS} FROM holidays WHERE holiday_date=%s AND year=%s",
                    (holiday_date, holiday_date.year),
                )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def create_holiday(
        self,
        *,
        name: str,
        holiday_date: date,
        holiday_type: HolidayType,
        is_recurring: bool,
        year: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(name, holiday_date, holiday_type, is_recurring, year, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (name, holiday_date, holiday_type.value, int(is_recurring), year),
            )
            return int(cur.lastrowid)
