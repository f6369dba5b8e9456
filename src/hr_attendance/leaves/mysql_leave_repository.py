from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import OffDayKind, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause, normalize_mysql_date, normalize_mysql_time
from .model import LeaveRequest, OffDayEvent, ShortLeave
from .repository import LeaveRepository, OffDayRepository


def _employee_filter(column: str, employee_ids: Optional[Sequence[int]], params: list[object]) -> str:
    if not employee_ids:
        return ""
    params.extend(int(i) for i in employee_ids)
    return f" AND {column} IN ({in_clause(employee_ids)})"


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]],
        status: Optional[RequestStatus],
    ) -> Sequence[LeaveRequest]:
        params: list[object] = [end_date, start_date]
        extra = ""
        if status is not None:
            params.append(status.value)
            extra = " AND status=%s"
        extra += _employee_filter("employee_id", employee_ids, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT leave_id, employee_id, start_date, end_date, status, paid_leave, unpaid_leave, reason
                FROM leave_requests
                WHERE start_date<=%s AND end_date>=%s{extra}
                ORDER BY start_date, leave_id
                """,
                tuple(params),
            )
            return [
                LeaveRequest(
                    leave_id=int(r["leave_id"]),
                    employee_id=int(r["employee_id"]),
                    start_date=normalize_mysql_date(r["start_date"]),
                    end_date=normalize_mysql_date(r["end_date"]),
                    status=RequestStatus(r["status"]),
                    paid_leave=int(r.get("paid_leave") or 0),
                    unpaid_leave=int(r.get("unpaid_leave") or 0),
                    reason=r.get("reason"),
                )
                for r in fetchall(cur)
            ]

    def list_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[LeaveRequest]:
        return self._select_leaves(start_date=start_date, end_date=end_date, employee_ids=employee_ids, status=None)

    def list_approved_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[LeaveRequest]:
        return self._select_leaves(
            start_date=start_date, end_date=end_date, employee_ids=employee_ids, status=RequestStatus.APPROVED
        )

    def list_approved_short_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[ShortLeave]:
        params: list[object] = [RequestStatus.APPROVED.value, start_date, end_date]
        extra = _employee_filter("employee_id", employee_ids, params)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT short_leave_id, employee_id, leave_date, start_time, end_time,
                       duration_hours, status, reason
                FROM short_leaves
                WHERE status=%s AND leave_date BETWEEN %s AND %s{extra}
                ORDER BY leave_date, short_leave_id
                """,
                tuple(params),
            )
            return [
                ShortLeave(
                    short_leave_id=int(r["short_leave_id"]),
                    employee_id=int(r["employee_id"]),
                    date=normalize_mysql_date(r["leave_date"]),
                    duration_hours=float(r.get("duration_hours") or 0),
                    status=RequestStatus(r["status"]),
                    start_time=normalize_mysql_time(r.get("start_time")),
                    end_time=normalize_mysql_time(r.get("end_time")),
                    reason=r.get("reason") or "",
                )
                for r in fetchall(cur)
            ]


class MySQLOffDayRepository(OffDayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_events(self, *, start_date: date, end_date: date) -> Sequence[OffDayEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, title, type, start_date, end_date
                FROM events
                WHERE type IN (%s, %s) AND start_date<=%s AND end_date>=%s
                ORDER BY start_date
                """,
                (OffDayKind.HOLIDAY.value, OffDayKind.WEEKEND.value, end_date, start_date),
            )
            return [
                OffDayEvent(
                    event_id=int(r["event_id"]),
                    title=r["title"],
                    kind=OffDayKind(r["type"]),
                    start_date=normalize_mysql_date(r["start_date"]),
                    end_date=normalize_mysql_date(r["end_date"]),
                )
                for r in fetchall(cur)
            ]
