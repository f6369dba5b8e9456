from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..common.datetime_utils import at, format_hhmm, is_before, now_local, parse_hhmm, to_local
from ..common.validators import optional_text
from ..core.constants import CHECKIN_BLOCKED_STATUSES, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, CheckoutSource, Role, ShiftKind
from ..core.exceptions import AuthorizationError, NotFoundError, PolicyViolation, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leaves.calendar import OffDayCalendar
from ..leaves.repository import LeaveRepository, OffDayRepository
from ..shifts.model import AdminConfig, ShiftConfig
from ..shifts.repository import AdminConfigRepository
from .classifier import AttendanceClassifier
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Check-in/check-out workflow plus the admin record actions.

    Per anchor date a record moves ``NoRecord -> CheckedIn -> CheckedOut``.
    Every rejection raises before anything is written.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        leaves: LeaveRepository,
        off_days: OffDayRepository,
        configs: AdminConfigRepository,
        *,
        classifier: AttendanceClassifier,
    ):
        self._attendance = attendance
        self._employees = employees
        self._leaves = leaves
        self._off_days = off_days
        self._configs = configs
        self._classifier = classifier
        self._calculator = classifier.calculator
        self._tz = classifier.calculator.tz

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_local(now, self._tz) if now else now_local(self._tz)

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _require_config(self) -> AdminConfig:
        config = self._configs.get()
        if not config:
            raise NotFoundError("Admin configuration not found; working hours must be set first")
        return config

    def _short_leave_for(self, employee_id: int, day: date):
        found = self._leaves.list_approved_short_leaves(start_date=day, end_date=day, employee_ids=[employee_id])
        return found[0] if found else None

    def _is_on_leave(self, employee_id: int, day: date) -> bool:
        found = self._leaves.list_approved_leaves(start_date=day, end_date=day, employee_ids=[employee_id])
        return any(leave.covers(day) for leave in found)

    def _is_off_day(self, day: date) -> bool:
        events = self._off_days.list_events(start_date=day, end_date=day)
        return OffDayCalendar.from_events(events, start=day, end=day).is_off_day(day)

    def check_in(self, employee_id: int, *, now: Optional[datetime] = None, late_reason: Optional[str] = None) -> AttendanceRecord:
        now = self._now(now)

        employee = self._require_employee(employee_id)
        if employee.status in CHECKIN_BLOCKED_STATUSES:
            raise PolicyViolation(f"{employee.status.value} employees cannot check in")

        config = self._require_config()
        kind = employee.shift
        shift = config.shift_for(kind)

        anchor_date = self._calculator.resolve_anchor_date(shift=shift, kind=kind, now=now)
        short_leave = self._short_leave_for(employee_id, anchor_date)
        window = self._classifier.effective_window(
            shift=shift, kind=kind, anchor_date=anchor_date, short_leave=short_leave, now=now
        )

        if is_before(now, window.earliest_allowed):
            earliest = window.earliest_allowed.strftime("%I:%M %p")
            raise PolicyViolation(f"Attendance not allowed before {earliest} for {kind.value.lower()} shift employees")
        if self._is_on_leave(employee_id, anchor_date):
            raise PolicyViolation("Cannot check in while on leave")
        if self._attendance.get_for_employee_and_date(employee_id, anchor_date):
            raise PolicyViolation("Already checked in for this work shift")
        if self._is_off_day(anchor_date):
            raise PolicyViolation("Cannot check in on an off day")

        decision = self._classifier.classify_checkin(check_in=now, window=window)
        attendance_id = self._attendance.create(
            NewAttendance(
                employee_id=employee_id,
                anchor_date=anchor_date,
                shift_kind=kind,
                shift=shift,
                status=decision.status,
                check_in=now,
                late_reason=optional_text(late_reason),
                remarks=decision.note,
            )
        )
        logger.info(
            "Employee %s checked in for %s at %s (%s)",
            employee_id, anchor_date, format_hhmm(now), decision.status.value,
        )
        return self._attendance.get_by_id(attendance_id)

    def check_out(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = self._now(now)

        employee = self._require_employee(employee_id)
        config = self._require_config()
        shift = config.shift_for(employee.shift)

        record = None
        closed = None
        candidates = self._calculator.checkout_candidates(shift=shift, kind=employee.shift, now=now)
        for index, anchor_date in enumerate(candidates):
            candidate = self._attendance.get_for_employee_and_date(employee_id, anchor_date)
            if candidate is None:
                continue
            if candidate.is_open:
                record = candidate
                break
            # The current shift is already closed; an older open record is not this check-out.
            if index == 0:
                raise PolicyViolation("Already checked out for this work shift")
            closed = closed or candidate

        if record is None:
            if closed is not None:
                raise PolicyViolation("Already checked out for this work shift")
            raise NotFoundError("No check-in found for this work shift")

        window = self._calculator.window(
            shift=self._classifier.shift_for_record(record, config),
            kind=record.shift_kind,
            anchor_date=record.anchor_date,
            now=now,
        )
        if is_before(window.latest_allowed_checkout, now):
            latest = window.latest_allowed_checkout.strftime("%Y-%m-%d %I:%M %p")
            raise PolicyViolation(f"Check-out not allowed after {latest}")

        if not self._attendance.close(attendance_id=record.attendance_id, check_out=now, source=CheckoutSource.MANUAL):
            raise PolicyViolation("Already checked out for this work shift")

        logger.info("Employee %s checked out for %s at %s", employee_id, record.anchor_date, format_hhmm(now))
        return self._attendance.get_by_id(record.attendance_id)

    def create_manual(
        self,
        *,
        current_role: Role,
        employee_id: int,
        anchor_date: date,
        check_in: str,
        check_out: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        remarks: Optional[str] = None,
    ) -> AttendanceRecord:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create attendance records")

        employee = self._require_employee(employee_id)
        config = self._require_config()
        shift = config.shift_for(employee.shift)

        check_in_at = self._anchor_clock(check_in, anchor_date=anchor_date, kind=employee.shift, shift=shift)
        check_out_at = None
        if check_out:
            check_out_at = self._anchor_clock(check_out, anchor_date=anchor_date, kind=employee.shift, shift=shift)
            if not is_before(check_in_at, check_out_at):
                raise ValidationError("Check-out must be after check-in")

        if status is None:
            short_leave = self._short_leave_for(employee_id, anchor_date)
            window = self._classifier.effective_window(
                shift=shift, kind=employee.shift, anchor_date=anchor_date, short_leave=short_leave
            )
            status = self._classifier.classify_checkin(check_in=check_in_at, window=window).status
            overridden = False
        else:
            overridden = True

        attendance_id = self._attendance.create(
            NewAttendance(
                employee_id=employee_id,
                anchor_date=anchor_date,
                shift_kind=employee.shift,
                shift=shift,
                status=status,
                check_in=check_in_at,
                check_out=check_out_at,
                is_status_updated=overridden,
                manually_created=True,
                checkout_source=CheckoutSource.MANUAL if check_out_at else None,
                remarks=optional_text(remarks),
            )
        )
        logger.info("Manual attendance %s created for employee %s on %s", attendance_id, employee_id, anchor_date)
        return self._attendance.get_by_id(attendance_id)

    def update_record(
        self,
        *,
        current_role: Role,
        attendance_id: int,
        check_in: Optional[str] = None,
        check_out: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
        remarks: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin edit. Setting a status pins it against later reclassification."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can edit attendance records")

        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        config = self._require_config()
        shift = self._classifier.shift_for_record(record, config)

        check_in_at = record.check_in
        if check_in:
            check_in_at = self._anchor_clock(check_in, anchor_date=record.anchor_date, kind=record.shift_kind, shift=shift)
        check_out_at = record.check_out
        if check_out:
            check_out_at = self._anchor_clock(check_out, anchor_date=record.anchor_date, kind=record.shift_kind, shift=shift)
        if check_in_at and check_out_at and not is_before(check_in_at, check_out_at):
            raise ValidationError("Check-out must be after check-in")

        is_status_updated = record.is_status_updated
        new_status = record.status
        if status is not None:
            new_status = status
            is_status_updated = True
        elif check_in and not record.is_status_updated:
            short_leave = self._short_leave_for(record.employee_id, record.anchor_date)
            window = self._classifier.effective_window(
                shift=shift, kind=record.shift_kind, anchor_date=record.anchor_date, short_leave=short_leave
            )
            new_status = self._classifier.classify_checkin(check_in=check_in_at, window=window).status

        self._attendance.admin_update(
            attendance_id=record.attendance_id,
            check_in=check_in_at,
            check_out=check_out_at,
            status=new_status,
            is_status_updated=is_status_updated,
            remarks=optional_text(remarks) if remarks is not None else record.remarks,
        )
        logger.info("Attendance %s updated by admin (status=%s)", attendance_id, new_status.value)
        return self._attendance.get_by_id(record.attendance_id)

    def _anchor_clock(self, value: str, *, anchor_date: date, kind: ShiftKind, shift: ShiftConfig) -> datetime:
        """Place an admin-entered HH:MM on the record's attendance day.

        Night-shift clock times before noon belong to the morning after the anchor date.
        """
        clock = parse_hhmm(value)
        day = anchor_date
        if kind == ShiftKind.NIGHT and shift.crosses_midnight and clock < time(12, 0):
            day = anchor_date + timedelta(days=1)
        return at(day, clock, self._tz)

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def get_history(
        self,
        employee_id: int,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        """Newest first. With a date range every record in it is returned and ``limit`` is ignored."""
        self._require_employee(employee_id)
        if start is None and end is None:
            rows = self._attendance.get_recent_for_employee(employee_id, limit)
            return [self._to_ui(r) for r in rows]

        if start is None or end is None:
            raise ValidationError("start_date and end_date must be given together")
        if start > end:
            raise ValidationError("Start date must not be after end date")
        rows = self._attendance.list_between(start_date=start, end_date=end, employee_ids=[employee_id])
        return [self._to_ui(r) for r in sorted(rows, key=lambda r: r.anchor_date, reverse=True)]

    def _to_ui(self, r: AttendanceRecord) -> dict:
        return {
            "attendance_id": r.attendance_id,
            "date": r.anchor_date.isoformat(),
            "shift": r.shift_kind.value,
            "check_in": format_hhmm(r.check_in) if r.check_in else "-",
            "check_out": format_hhmm(r.check_out) if r.check_out else "-",
            "status": r.status.value,
            "is_status_updated": r.is_status_updated,
            "is_auto_checkout": r.is_auto_checkout,
            "manually_created": r.manually_created,
            "late_reason": r.late_reason,
            "remarks": r.remarks,
        }
