from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus, CheckoutSource, ShiftKind
from ..shifts.model import ShiftConfig


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee's attendance for one anchor date.

    ``shift_start``/``shift_grace``/``shift_end`` snapshot the working hours in
    effect at check-in so later config edits never reclassify history.
    """

    attendance_id: int
    employee_id: int
    anchor_date: date
    shift_kind: ShiftKind
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
    shift_start: Optional[time] = None
    shift_grace: Optional[time] = None
    shift_end: Optional[time] = None
    is_status_updated: bool = False
    manually_created: bool = False
    checkout_source: Optional[CheckoutSource] = None
    late_reason: Optional[str] = None
    remarks: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_in is not None and self.check_out is None

    @property
    def is_auto_checkout(self) -> bool:
        return self.checkout_source == CheckoutSource.AUTO

    def shift_snapshot(self) -> Optional[ShiftConfig]:
        if self.shift_start is None or self.shift_end is None:
            return None
        return ShiftConfig(start=self.shift_start, end=self.shift_end, grace=self.shift_grace)


@dataclass(frozen=True)
class NewAttendance:
    """Values for inserting a record; the store assigns the id."""

    employee_id: int
    anchor_date: date
    shift_kind: ShiftKind
    shift: ShiftConfig
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    is_status_updated: bool = False
    manually_created: bool = False
    checkout_source: Optional[CheckoutSource] = None
    late_reason: Optional[str] = None
    remarks: Optional[str] = None
