from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, CheckoutSource
from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, anchor_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_open(self, *, anchor_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        """Records with a check-in and no check-out, optionally for one anchor date."""

        raise NotImplementedError

    def create(self, record: NewAttendance) -> int:
        """Insert atomically.

        Raises DuplicateRecordError when the (employee, anchor date) pair already
        has a record.
        """

        raise NotImplementedError

    def close(self, *, attendance_id: int, check_out: datetime, source: CheckoutSource) -> bool:
        """Set the check-out only if it is still unset. Returns False when nothing changed."""

        raise NotImplementedError

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
        """Admin-only override."""

        raise NotImplementedError
