from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import PayslipStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Payslip, PayslipFigures
from .repository import PayslipRepository

_COLUMNS = (
    "p.payslip_id, p.employee_id, p.month, p.year, p.basic_salary, p.working_days, p.present_days, "
    "p.unpaid_leaves, p.deduction, p.net_salary, p.status, p.generated_date"
)


def _to_payslip(r: dict) -> Payslip:
    return Payslip(
        payslip_id=int(r["payslip_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        basic_salary=Decimal(str(r["basic_salary"])),
        working_days=int(r["working_days"]),
        present_days=float(r["present_days"]),
        unpaid_leaves=float(r["unpaid_leaves"]),
        deduction=Decimal(str(r["deduction"])),
        net_salary=Decimal(str(r["net_salary"])),
        status=PayslipStatus(r["status"]),
        generated_date=r["generated_date"],
    )


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, payslip_id: int, *, for_update: bool = False) -> Optional[Payslip]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payslips p WHERE p.payslip_id=%s{lock}", (int(payslip_id),))
            r = fetchone(cur)
            return _to_payslip(r) if r else None

    def get_for_period(
        self, *, employee_id: int, month: int, year: int, for_update: bool = False
    ) -> Optional[Payslip]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payslips p
                WHERE p.employee_id=%s AND p.month=%s AND p.year=%s{lock}
                """,
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _to_payslip(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payslips(
                        employee_id, month, year, basic_salary, working_days, present_days,
                        unpaid_leaves, deduction, net_salary, status, generated_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        int(month),
                        int(year),
                        figures.basic_salary,
                        figures.working_days,
                        figures.present_days,
                        figures.unpaid_leaves,
                        figures.deduction,
                        figures.net_salary,
                        status.value,
                        generated_date,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                return None
            raise

    def update_figures(self, *, payslip_id: int, figures: PayslipFigures, generated_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payslips
                SET basic_salary=%s, working_days=%s, present_days=%s, unpaid_leaves=%s,
                    deduction=%s, net_salary=%s, generated_date=%s
                WHERE payslip_id=%s
                """,
                (
                    figures.basic_salary,
                    figures.working_days,
                    figures.present_days,
                    figures.unpaid_leaves,
                    figures.deduction,
                    figures.net_salary,
                    generated_date,
                    int(payslip_id),
                ),
            )
            return cur.rowcount > 0

    def set_status(self, *, payslip_id: int, status: PayslipStatus, expected: PayslipStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payslips SET status=%s WHERE payslip_id=%s AND status=%s",
                (status.value, int(payslip_id), expected.value),
            )
            return cur.rowcount > 0

    def list(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[PayslipStatus] = None,
        department: Optional[str] = None,
    ) -> Sequence[Payslip]:
        where = ["1=1"]
        params: list = []
        if month is not None:
            where.append("p.month=%s")
            params.append(int(month))
        if year is not None:
            where.append("p.year=%s")
            params.append(int(year))
        if employee_id is not None:
            where.append("p.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            where.append("p.status=%s")
            params.append(status.value)
        if department is not None:
            where.append("e.department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payslips p
                JOIN employees e ON e.employee_id = p.employee_id
                WHERE {" AND ".join(where)}
                ORDER BY p.year DESC, p.month DESC, p.payslip_id DESC
                """,
                tuple(params),
            )
            return [_to_payslip(r) for r in fetchall(cur)]
