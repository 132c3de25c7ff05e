from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    r.request_id, r.employee_id, r.leave_type, r.from_date, r.to_date, r.reason, r.status,
    r.created_at, r.approver_id, r.has_collision, r.collision_count, r.documentation_ref, r.decided_at
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=r["leave_type"],
        from_date=r["from_date"],
        to_date=r["to_date"],
        reason=r.get("reason"),
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        approver_id=r.get("approver_id"),
        has_collision=bool(r.get("has_collision")),
        collision_count=int(r.get("collision_count") or 0),
        documentation_ref=r.get("documentation_ref"),
        decided_at=r.get("decided_at"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        leave_type: str,
        from_date: date,
        to_date: date,
        reason: Optional[str],
        status: RequestStatus,
        has_collision: bool,
        collision_count: int,
        documentation_ref: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, from_date, to_date, reason, status,
                    has_collision, collision_count, documentation_ref
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type,
                    from_date,
                    to_date,
                    reason,
                    status.value,
                    int(has_collision),
                    int(collision_count),
                    documentation_ref,
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests r WHERE r.request_id=%s{lock}", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_overlapping(
        self,
        *,
        employee_id: int,
        from_date: date,
        to_date: date,
        statuses: Sequence[RequestStatus],
    ) -> Sequence[LeaveRequest]:
        if not statuses:
            return []
        placeholders = ", ".join(["%s"] * len(statuses))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests r
                WHERE r.employee_id=%s
                  AND r.status IN ({placeholders})
                  AND r.from_date <= %s
                  AND r.to_date >= %s
                ORDER BY r.from_date ASC
                """,
                (int(employee_id), *[s.value for s in statuses], to_date, from_date),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: Optional[int],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, approver_id, decided_at, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_for_employee(self, employee_id: int, *, limit: int = 200) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests r
                WHERE r.employee_id=%s
                ORDER BY r.from_date DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_by_status(
        self, *, status: RequestStatus, department: Optional[str] = None, limit: int = 500
    ) -> Sequence[LeaveRequest]:
        clauses = ["r.status=%s"]
        params: list[object] = [status.value]
        if department is not None:
            clauses.append("e.department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            # Inner join drops orphaned requests without an employee profile.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                WHERE {' AND '.join(clauses)}
                ORDER BY r.from_date ASC, r.created_at ASC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_all(
        self, *, status: Optional[RequestStatus] = None, department: Optional[str] = None, limit: int = 500
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if department is not None:
            clauses.append("e.department=%s")
            params.append(department)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                WHERE {' AND '.join(clauses)}
                ORDER BY r.created_at DESC, r.request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_approved_within(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests r
                WHERE r.employee_id=%s AND r.status=%s AND r.from_date >= %s AND r.to_date <= %s
                ORDER BY r.from_date ASC
                """,
                (int(employee_id), RequestStatus.APPROVED.value, start, end),
            )
            return [_to_request(r) for r in fetchall(cur)]
