from __future__ import annotations

import calendar as month_calendar
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..attendance.classifier import AttendanceClassifier, DayMetrics
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import date_range, format_duration_hhmm, format_hhmm, now_local, to_local
from ..core.constants import EMPLOYMENT_ENDED_STATUSES
from ..core.enums import AttendanceStatus, DayCode, EmploymentStatus, LeaveDayKind, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leaves.calendar import OffDayCalendar, allocate_leave_days
from ..leaves.model import LeaveRequest, ShortLeave
from ..leaves.repository import LeaveRepository, OffDayRepository
from ..shifts.model import AdminConfig
from ..shifts.repository import AdminConfigRepository

logger = logging.getLogger(__name__)

_LEAVE_CODES = {
    LeaveDayKind.PAID: DayCode.PAID_LEAVE,
    LeaveDayKind.UNPAID: DayCode.UNPAID_LEAVE,
    LeaveDayKind.NON_WORKING: DayCode.LEAVE,
}


@dataclass
class _Context:
    """Everything the reports read for one date range, fetched once."""

    records: dict[tuple[int, date], AttendanceRecord]
    leaves: dict[int, list[LeaveRequest]]
    short_leaves: dict[tuple[int, date], ShortLeave]
    calendar: OffDayCalendar
    allocations: dict[int, dict[date, LeaveDayKind]] = field(default_factory=dict)

    def leave_days(self, employee_id: int) -> dict[date, LeaveDayKind]:
        if employee_id not in self.allocations:
            self.allocations[employee_id] = allocate_leave_days(self.leaves.get(employee_id, []), self.calendar)
        return self.allocations[employee_id]


def _round(value: float) -> float:
    return round(value, 2)


class AttendanceReportService:
    """Read-only aggregations over attendance, leave and off-day calendars."""

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
        self._tz = classifier.calculator.tz

    # ------------------------------------------------------------------ helpers

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_local(now, self._tz) if now else now_local(self._tz)

    def today(self) -> date:
        return self._now(None).date()

    def _require_config(self) -> AdminConfig:
        config = self._configs.get()
        if not config:
            raise NotFoundError("Admin configuration not found; working hours must be set first")
        return config

    def _load(self, *, start: date, end: date, employee_ids: Sequence[int]) -> _Context:
        ids = list(employee_ids)
        records = {
            (r.employee_id, r.anchor_date): r
            for r in self._attendance.list_between(start_date=start, end_date=end, employee_ids=ids)
        }

        leaves: dict[int, list[LeaveRequest]] = defaultdict(list)
        calendar_start, calendar_end = start, end
        for leave in self._leaves.list_approved_leaves(start_date=start, end_date=end, employee_ids=ids):
            leaves[leave.employee_id].append(leave)
            # Allocation walks each whole leave, so the calendar spans it too.
            calendar_start = min(calendar_start, leave.start_date)
            calendar_end = max(calendar_end, leave.end_date)

        short_leaves: dict[tuple[int, date], ShortLeave] = {}
        for sl in self._leaves.list_approved_short_leaves(start_date=start, end_date=end, employee_ids=ids):
            short_leaves.setdefault((sl.employee_id, sl.date), sl)

        events = self._off_days.list_events(start_date=calendar_start, end_date=calendar_end)
        return _Context(
            records=records,
            leaves=dict(leaves),
            short_leaves=short_leaves,
            calendar=OffDayCalendar.from_events(events, start=calendar_start, end=calendar_end),
        )

    def _reportable_employees(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        department_ids: Optional[Sequence[int]] = None,
        include_admins: bool = True,
    ) -> list[Employee]:
        employees = self._employees.list_employees(employee_ids=employee_ids, department_ids=department_ids)
        return [
            e
            for e in employees
            if e.status != EmploymentStatus.PENDING and (include_admins or e.role != Role.ADMIN)
        ]

    def _metrics(self, record: AttendanceRecord, config: AdminConfig, short_leave: Optional[ShortLeave]) -> DayMetrics:
        window = self._classifier.window_for_record(record, config, short_leave=short_leave)
        return self._classifier.day_metrics(
            record,
            shift=self._classifier.shift_for_record(record, config),
            window=window,
            short_leave=short_leave,
        )

    # --------------------------------------------------------------- work stats

    def work_stats(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Per-day worked/late/graced/overtime hours for one employee.

        The range defaults to January 1st of the current year through today.
        """
        now = self._now(now)
        start, end = self._default_range(start, end, now)

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        config = self._require_config()

        if employee.status == EmploymentStatus.PENDING:
            return self._empty_stats(employee, config, start, end, message="Employee is pending; no attendance recorded yet")

        ctx = self._load(start=start, end=end, employee_ids=[employee.employee_id])
        return self._employee_stats(employee, config, ctx, start=start, end=end, now=now)

    def bulk_work_stats(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        department_ids: Optional[Sequence[int]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        now = self._now(now)
        start, end = self._default_range(start, end, now)
        config = self._require_config()

        employees = self._reportable_employees(employee_ids=employee_ids, department_ids=department_ids)
        ctx = self._load(start=start, end=end, employee_ids=[e.employee_id for e in employees])

        stats = [self._employee_stats(e, config, ctx, start=start, end=end, now=now) for e in employees]
        logger.info("Built work stats for %d employees (%s..%s)", len(stats), start, end)
        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "employees": stats,
        }

    @staticmethod
    def _default_range(start: Optional[date], end: Optional[date], now: datetime) -> tuple[date, date]:
        today = now.date()
        start = start or date(today.year, 1, 1)
        end = end or today
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return start, end

    def _empty_stats(self, employee: Employee, config: AdminConfig, start: date, end: date, *, message: str) -> dict:
        return {
            "employee_id": employee.employee_id,
            "full_name": employee.full_name,
            "shift": employee.shift.value,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "work_hours": config.nominal_hours(employee.shift),
            "days": [],
            "totals": self._totals([]),
            "message": message,
        }

    def _employee_stats(
        self,
        employee: Employee,
        config: AdminConfig,
        ctx: _Context,
        *,
        start: date,
        end: date,
        now: datetime,
    ) -> dict:
        period = employee.employment_period(start, end)
        if period is None:
            return self._empty_stats(employee, config, start, end, message="Outside employment period")

        today = now.date()
        leave_days = ctx.leave_days(employee.employee_id)
        days = []
        for day in date_range(*period):
            record = ctx.records.get((employee.employee_id, day))
            short_leave = ctx.short_leaves.get((employee.employee_id, day))

            day_type = self._day_type(day, record, leave_days, ctx.calendar, today)
            metrics = DayMetrics()
            if day_type == _WORKED:
                metrics = self._metrics(record, config, short_leave)
                day_type = metrics.status.value

            days.append(
                {
                    "date": day.isoformat(),
                    "day_type": day_type,
                    "check_in": format_hhmm(record.check_in) if record and record.check_in else None,
                    "check_out": format_hhmm(record.check_out) if record and record.check_out else None,
                    "worked_hours": metrics.worked_hours,
                    "late_hours": metrics.late_hours,
                    "graced_hours": metrics.graced_hours,
                    "overtime_hours": metrics.overtime_hours,
                    "is_auto_checkout": bool(record and record.is_auto_checkout),
                    "short_leave": self._short_leave_info(employee, config, record, short_leave, day, now),
                }
            )

        return {
            "employee_id": employee.employee_id,
            "full_name": employee.full_name,
            "shift": employee.shift.value,
            "start_date": period[0].isoformat(),
            "end_date": period[1].isoformat(),
            "work_hours": config.nominal_hours(employee.shift),
            "days": days,
            "totals": self._totals(days),
            "message": None,
        }

    @staticmethod
    def _day_type(
        day: date,
        record: Optional[AttendanceRecord],
        leave_days: dict[date, LeaveDayKind],
        calendar: OffDayCalendar,
        today: date,
    ) -> str:
        """Holiday, then weekend, then leave, then the record, then absent."""
        if calendar.is_holiday(day):
            return "holiday"
        if calendar.is_weekend(day):
            return "weekend"
        if day in leave_days:
            return leave_days[day].value
        if record is not None and record.check_in is not None:
            return _WORKED
        if day > today:
            return ""
        return AttendanceStatus.ABSENT.value

    def _short_leave_info(
        self,
        employee: Employee,
        config: AdminConfig,
        record: Optional[AttendanceRecord],
        short_leave: Optional[ShortLeave],
        day: date,
        now: datetime,
    ) -> dict:
        if short_leave is None:
            return {"has_short_leave_today": False, "is_currently_on_short_leave": False}

        currently = False
        if day == now.date():
            # A recorded day keeps the hours it was checked in under.
            if record is not None:
                shift, kind = self._classifier.shift_for_record(record, config), record.shift_kind
            else:
                shift, kind = config.find_shift(employee.shift), employee.shift
            if shift is not None:
                placed = self._classifier.adjuster.place(short_leave, shift=shift, kind=kind, anchor_date=day)
                currently = bool(placed and placed.contains(now))
        info = short_leave.to_dict()
        info.update({"has_short_leave_today": True, "is_currently_on_short_leave": currently})
        return info

    @staticmethod
    def _totals(days: list[dict]) -> dict:
        return {
            "worked_hours": _round(sum(d["worked_hours"] for d in days)),
            "late_hours": _round(sum(d["late_hours"] for d in days)),
            "graced_hours": _round(sum(d["graced_hours"] for d in days)),
            "overtime_hours": _round(sum(d["overtime_hours"] for d in days)),
            "worked_days": sum(1 for d in days if d["day_type"] in _WORKED_STATUSES),
            "late_days": sum(1 for d in days if d["day_type"] == AttendanceStatus.LATE.value),
        }

    # -------------------------------------------------------- attendance stats

    def attendance_stats(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        department_ids: Optional[Sequence[int]] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Per-employee present/graced/late/absent counts, leave days and leave request counts."""
        now = self._now(now)
        start, end = self._default_range(start, end, now)
        today = now.date()
        config = self._require_config()

        employees = self._reportable_employees(department_ids=department_ids)
        ids = [e.employee_id for e in employees]
        leave_stats = {"requested": 0, "pending": 0, "approved": 0, "rejected": 0}
        if not employees:
            return {
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "stats": [],
                "totals": _empty_stat_totals(),
                "leave_stats": leave_stats,
                "leave_totals": {"total_leave_days": 0},
            }

        ctx = self._load(start=start, end=end, employee_ids=ids)
        stats = [self._stats_row(e, ctx, config, start=start, end=end, today=today) for e in employees]

        for leave in self._leaves.list_leaves(start_date=start, end_date=end, employee_ids=ids):
            leave_stats["requested"] += 1
            leave_stats[leave.status.value] += 1

        totals = _empty_stat_totals()
        for row in stats:
            totals["total_present"] += row["present_count"]
            totals["total_graced"] += row["graced_count"]
            totals["total_late"] += row["late_count"]
            totals["total_absent"] += row["absent_count"]

        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "stats": stats,
            "totals": totals,
            "leave_stats": leave_stats,
            "leave_totals": {"total_leave_days": sum(row["leave_count"] for row in stats)},
        }

    def _stats_row(
        self,
        employee: Employee,
        ctx: _Context,
        config: AdminConfig,
        *,
        start: date,
        end: date,
        today: date,
    ) -> dict:
        counts = {AttendanceStatus.PRESENT: 0, AttendanceStatus.GRACED: 0, AttendanceStatus.LATE: 0}
        absent = 0
        leave_counts = {kind: 0 for kind in LeaveDayKind}

        leave_days = ctx.leave_days(employee.employee_id)
        period = employee.employment_period(start, end)
        for day in date_range(*period) if period else ():
            record = ctx.records.get((employee.employee_id, day))
            day_type = self._day_type(day, record, leave_days, ctx.calendar, today)
            if day_type == _WORKED:
                short_leave = ctx.short_leaves.get((employee.employee_id, day))
                window = self._classifier.window_for_record(record, config, short_leave=short_leave)
                status = self._classifier.status_for(record, window)
                if status in counts:
                    counts[status] += 1
                elif status == AttendanceStatus.ABSENT:
                    absent += 1
            elif day_type == AttendanceStatus.ABSENT.value:
                absent += 1
            elif day in leave_days:
                leave_counts[leave_days[day]] += 1

        return {
            "employee_id": employee.employee_id,
            "full_name": employee.full_name,
            "department_id": employee.department_id,
            "present_count": counts[AttendanceStatus.PRESENT],
            "graced_count": counts[AttendanceStatus.GRACED],
            "late_count": counts[AttendanceStatus.LATE],
            "absent_count": absent,
            "leave_count": sum(leave_counts.values()),
            "paid_leave_count": leave_counts[LeaveDayKind.PAID],
            "unpaid_leave_count": leave_counts[LeaveDayKind.UNPAID],
        }

    # ------------------------------------------------------- attendance summary

    def attendance_summary(
        self,
        *,
        start: date,
        end: date,
        department_ids: Optional[Sequence[int]] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Per-day status of every reportable employee, with daily and overall counts.

        Admins and pending employees are left out. Off days list no employees.
        Future days are not counted as absent.
        """
        if start > end:
            raise ValidationError("Start date must not be after end date")
        now = self._now(now)
        today = now.date()
        config = self._require_config()

        employees = self._reportable_employees(department_ids=department_ids, include_admins=False)
        ctx = self._load(start=start, end=end, employee_ids=[e.employee_id for e in employees])

        overall = _empty_counts()
        days = []
        for day in date_range(start, end):
            counts = _empty_counts()
            if ctx.calendar.is_off_day(day):
                days.append(
                    {
                        "date": day.isoformat(),
                        "is_off_day": True,
                        "off_day_type": "holiday" if ctx.calendar.is_holiday(day) else "weekend",
                        "employees": [],
                        "counts": counts,
                    }
                )
                continue

            rows = []
            for employee in employees:
                if not employee.is_employed_on(day):
                    continue
                row = self._summary_row(employee, day, ctx, config, today)
                if row is None:
                    continue
                _count(counts, row["status"])
                rows.append(row)

            for key, value in counts.items():
                overall[key] += value
            days.append({"date": day.isoformat(), "is_off_day": False, "off_day_type": None, "employees": rows, "counts": counts})

        return {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "days": days,
            "counts": overall,
        }

    def _summary_row(
        self,
        employee: Employee,
        day: date,
        ctx: _Context,
        config: AdminConfig,
        today: date,
    ) -> Optional[dict]:
        record = ctx.records.get((employee.employee_id, day))
        leave_kind = ctx.leave_days(employee.employee_id).get(day)

        if leave_kind is not None:
            status = leave_kind.value
        elif record is not None and record.check_in is not None:
            window = self._classifier.window_for_record(
                record, config, short_leave=ctx.short_leaves.get((employee.employee_id, day))
            )
            status = self._classifier.status_for(record, window).value
        elif day > today:
            return None
        else:
            status = AttendanceStatus.ABSENT.value

        return {
            "employee_id": employee.employee_id,
            "full_name": employee.full_name,
            "department_id": employee.department_id,
            "status": status,
            "check_in": format_hhmm(record.check_in) if record and record.check_in else None,
            "check_out": format_hhmm(record.check_out) if record and record.check_out else None,
            "late_reason": record.late_reason if record else None,
            "is_auto_checkout": bool(record and record.is_auto_checkout),
            "manually_created": bool(record and record.manually_created),
        }

    # ---------------------------------------------------------- detailed report

    def detailed_report(
        self,
        *,
        year: int,
        month: int,
        day: Optional[date] = None,
        department_ids: Optional[Sequence[int]] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Monthly day-code grid per employee, plus a daily summary when ``day`` is given."""
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")
        now = self._now(now)
        today = now.date()
        config = self._require_config()

        first = date(int(year), int(month), 1)
        last = date(int(year), int(month), month_calendar.monthrange(int(year), int(month))[1])
        load_start, load_end = first, last
        if day is not None:
            load_start, load_end = min(first, day), max(last, day)

        employees = self._reportable_employees(department_ids=department_ids, include_admins=False)
        ctx = self._load(start=load_start, end=load_end, employee_ids=[e.employee_id for e in employees])

        rows = [
            self._detailed_row(index, employee, ctx, config, first=first, last=last, today=today)
            for index, employee in enumerate(employees, start=1)
        ]
        return {
            "year": int(year),
            "month": int(month),
            "employees": rows,
            "daily_summary": self._daily_summary(employees, ctx, config, day) if day is not None else None,
        }

    def _detailed_row(
        self,
        index: int,
        employee: Employee,
        ctx: _Context,
        config: AdminConfig,
        *,
        first: date,
        last: date,
        today: date,
    ) -> dict:
        counters = {
            "total_present": 0,
            "late_present": 0,
            "half_or_early_leave": 0,
            "weekly_holiday": 0,
            "govt_holiday": 0,
            "paid_leave": 0,
            "unpaid_leave": 0,
            "absent": 0,
        }
        leave_days = ctx.leave_days(employee.employee_id)
        extra_days = 0
        summary = []

        for day in date_range(first, last):
            if not employee.is_employed_on(day):
                extra_days += 1
                continue
            if day > today:
                summary.append({"date": day.isoformat(), "status": DayCode.FUTURE.value})
                continue

            record = ctx.records.get((employee.employee_id, day))
            code = self._day_code(employee, day, record, leave_days, ctx, config)
            if code == DayCode.GOVT_HOLIDAY:
                counters["govt_holiday"] += 1
            elif code == DayCode.WEEKLY_HOLIDAY:
                counters["weekly_holiday"] += 1
            elif code == DayCode.PAID_LEAVE:
                counters["paid_leave"] += 1
            elif code == DayCode.UNPAID_LEAVE:
                counters["unpaid_leave"] += 1
            elif code == DayCode.ABSENT:
                counters["absent"] += 1
            elif code in (DayCode.HALF_DAY, DayCode.EARLY_LEAVE, DayCode.LATE_PRESENT, DayCode.PRESENT):
                counters["total_present"] += 1
                if code in (DayCode.HALF_DAY, DayCode.EARLY_LEAVE):
                    counters["half_or_early_leave"] += 1
                elif code == DayCode.LATE_PRESENT:
                    counters["late_present"] += 1
            summary.append({"date": day.isoformat(), "status": code.value})

        row = {
            "sl": index,
            "employee_id": employee.employee_id,
            "name": employee.full_name,
            "designation": employee.designation or "N/A",
            "total_days": (last - first).days + 1,
            "extra_days": extra_days,
            "summary": summary,
        }
        row.update(counters)
        return row

    def _day_code(
        self,
        employee: Employee,
        day: date,
        record: Optional[AttendanceRecord],
        leave_days: dict[date, LeaveDayKind],
        ctx: _Context,
        config: AdminConfig,
    ) -> DayCode:
        if ctx.calendar.is_holiday(day):
            return DayCode.GOVT_HOLIDAY
        if ctx.calendar.is_weekend(day):
            return DayCode.WEEKLY_HOLIDAY
        if day in leave_days:
            return _LEAVE_CODES[leave_days[day]]
        if record is None:
            return DayCode.ABSENT

        short_leave = ctx.short_leaves.get((employee.employee_id, day))
        window = self._classifier.window_for_record(record, config, short_leave=short_leave)
        return self._classifier.report_code(record, window=window, short_leave=short_leave)

    def _daily_summary(self, employees: list[Employee], ctx: _Context, config: AdminConfig, day: date) -> dict:
        active = [e for e in employees if e.status == EmploymentStatus.ACTIVE and e.is_employed_on(day)]
        resigned_today = [e for e in employees if e.termination_date == day and e.status in EMPLOYMENT_ENDED_STATUSES]

        present = 0
        on_leave = 0
        late_employees = []
        for employee in employees:
            if day in ctx.leave_days(employee.employee_id):
                on_leave += 1
                continue

            record = ctx.records.get((employee.employee_id, day))
            if record is None or record.check_in is None:
                continue
            present += 1

            short_leave = ctx.short_leaves.get((employee.employee_id, day))
            metrics = self._metrics(record, config, short_leave)
            if metrics.status == AttendanceStatus.LATE:
                late_employees.append(
                    {
                        "employee_id": employee.employee_id,
                        "name": employee.full_name,
                        "designation": employee.designation or "N/A",
                        "check_in": format_hhmm(record.check_in),
                        "late_time": format_duration_hhmm(timedelta(hours=metrics.late_hours)),
                        "reason": record.late_reason or "",
                    }
                )

        return {
            "date": day.isoformat(),
            "present_count": present,
            "on_leave_count": on_leave,
            "resigned_today_count": len(resigned_today),
            "late_count": len(late_employees),
            "absent_count": max(0, len(active) - present - on_leave - len(resigned_today)),
            "late_employees": late_employees,
        }


_WORKED = "worked"
_WORKED_STATUSES = frozenset(
    {AttendanceStatus.PRESENT.value, AttendanceStatus.GRACED.value, AttendanceStatus.LATE.value}
)

_COUNT_KEYS = {
    AttendanceStatus.PRESENT.value: "present",
    AttendanceStatus.GRACED.value: "graced",
    AttendanceStatus.LATE.value: "late",
    AttendanceStatus.ABSENT.value: "absent",
    AttendanceStatus.ON_LEAVE.value: "on_leave",
}


def _empty_counts() -> dict:
    return {
        "present": 0,
        "graced": 0,
        "late": 0,
        "absent": 0,
        "on_leave": 0,
        "paid_leave": 0,
        "unpaid_leave": 0,
    }


def _count(counts: dict, status: str) -> None:
    if status == LeaveDayKind.PAID.value:
        counts["paid_leave"] += 1
        counts["on_leave"] += 1
    elif status == LeaveDayKind.UNPAID.value:
        counts["unpaid_leave"] += 1
        counts["on_leave"] += 1
    elif status in _COUNT_KEYS:
        counts[_COUNT_KEYS[status]] += 1


def _empty_stat_totals() -> dict:
    return {"total_present": 0, "total_graced": 0, "total_late": 0, "total_absent": 0}
