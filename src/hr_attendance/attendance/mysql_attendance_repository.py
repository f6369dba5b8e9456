from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus, CheckoutSource, ShiftKind
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    is_duplicate_key,
    normalize_mysql_date,
    normalize_mysql_datetime,
    normalize_mysql_time,
    to_mysql_datetime,
)
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, anchor_date, shift_kind,
    shift_start, shift_grace, shift_end,
    check_in, check_out, status, is_status_updated, manually_created,
    checkout_source, late_reason, remarks
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: tzinfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_record(self, r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            employee_id=int(r["employee_id"]),
            anchor_date=normalize_mysql_date(r["anchor_date"]),
            shift_kind=ShiftKind(r["shift_kind"]),
            check_in=normalize_mysql_datetime(r.get("check_in"), self._tz),
            check_out=normalize_mysql_datetime(r.get("check_out"), self._tz),
            status=AttendanceStatus(r["status"]),
            shift_start=normalize_mysql_time(r.get("shift_start")),
            shift_grace=normalize_mysql_time(r.get("shift_grace")),
            shift_end=normalize_mysql_time(r.get("shift_end")),
            is_status_updated=bool(r.get("is_status_updated")),
            manually_created=bool(r.get("manually_created")),
            checkout_source=CheckoutSource(r["checkout_source"]) if r.get("checkout_source") else None,
            late_reason=r.get("late_reason"),
            remarks=r.get("remarks"),
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, anchor_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND anchor_date=%s",
                (int(employee_id), anchor_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE employee_id=%s
                ORDER BY anchor_date DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["anchor_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_ids:
            clauses.append(f"employee_id IN ({in_clause(employee_ids)})")
            params.extend(int(i) for i in employee_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY anchor_date, employee_id
                """,
                tuple(params),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_open(self, *, anchor_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        clauses = ["check_in IS NOT NULL", "check_out IS NULL"]
        params: list[object] = []
        if anchor_date is not None:
            clauses.append("anchor_date=%s")
            params.append(anchor_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY anchor_date, attendance_id
                """,
                tuple(params),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def create(self, record: NewAttendance) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, anchor_date, shift_kind, shift_start, shift_grace, shift_end,
                        check_in, check_out, status, is_status_updated, manually_created,
                        checkout_source, late_reason, remarks
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.employee_id),
                        record.anchor_date,
                        record.shift_kind.value,
                        record.shift.start,
                        record.shift.effective_grace,
                        record.shift.end,
                        to_mysql_datetime(record.check_in, self._tz),
                        to_mysql_datetime(record.check_out, self._tz),
                        record.status.value,
                        int(record.is_status_updated),
                        int(record.manually_created),
                        record.checkout_source.value if record.checkout_source else None,
                        record.late_reason,
                        record.remarks,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateRecordError("Already checked in for this work shift") from exc
            raise

    def close(self, *, attendance_id: int, check_out: datetime, source: CheckoutSource) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out=%s, checkout_source=%s
                WHERE attendance_id=%s AND check_out IS NULL
                """,
                (to_mysql_datetime(check_out, self._tz), source.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def admin_update(
        self,
        *,
        attendance_id: int,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        status: AttendanceStatus,
        is_status_updated: bool,
        remarks: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET checkout_source=CASE
                        WHEN %s IS NULL THEN NULL
                        WHEN check_out <=> %s THEN checkout_source
                        ELSE 'manual'
                    END,
                    check_in=%s, check_out=%s, status=%s, is_status_updated=%s, remarks=%s
                WHERE attendance_id=%s
                """,
                (
                    to_mysql_datetime(check_out, self._tz),
                    to_mysql_datetime(check_out, self._tz),
                    to_mysql_datetime(check_in, self._tz),
                    to_mysql_datetime(check_out, self._tz),
                    status.value,
                    int(is_status_updated),
                    remarks,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0
