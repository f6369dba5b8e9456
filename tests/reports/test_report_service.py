from datetime import date, time

import pytest

from fakes import DAY_SHIFT, dt, record
from hr_attendance.core.enums import AttendanceStatus, EmploymentStatus, OffDayKind, RequestStatus, Role, ShiftKind
from hr_attendance.core.exceptions import NotFoundError
from hr_attendance.employees.model import Employee
from hr_attendance.leaves.model import LeaveRequest, OffDayEvent, ShortLeave
from hr_attendance.shifts.model import AdminConfig

MAY = [date(2024, 5, d) for d in range(1, 32)]
NOW = dt(date(2024, 5, 6), 10)


@pytest.fixture
def seeded(repos):
    """Employee 1 works the day shift; 2 works nights and is left out of most checks.

    May 3rd is a holiday and May 4th a weekend.
    """
    employees = repos["employees_repo"]
    employees.add(Employee(3, "Admin User", ShiftKind.DAY, EmploymentStatus.ACTIVE, role=Role.ADMIN))
    employees.add(Employee(4, "Gone Soon", ShiftKind.DAY, EmploymentStatus.RESIGNED, termination_date=MAY[1]))
    employees.add(Employee(5, "On Leave", ShiftKind.DAY, EmploymentStatus.ACTIVE, designation="Analyst"))
    employees.add(Employee(6, "Not Started", ShiftKind.DAY, EmploymentStatus.PENDING))

    repos["off_days_repo"].events.extend(
        [
            OffDayEvent(1, "May Day", OffDayKind.HOLIDAY, MAY[2], MAY[2]),
            OffDayEvent(2, "Weekend", OffDayKind.WEEKEND, MAY[3], MAY[3]),
        ]
    )
    repos["leaves_repo"].leaves.append(
        LeaveRequest(
            leave_id=1, employee_id=5, start_date=MAY[0], end_date=MAY[1], status=RequestStatus.APPROVED, paid_leave=1
        )
    )

    attendance = repos["attendance_repo"]
    attendance.add(record(1, 1, MAY[0], dt(MAY[0], 9), dt(MAY[0], 18)))
    attendance.add(
        record(2, 1, MAY[1], dt(MAY[1], 9, 30), dt(MAY[1], 18, 30), status=AttendanceStatus.LATE, late_reason="Bus")
    )
    attendance.add(record(3, 1, MAY[4], dt(MAY[4], 9), dt(MAY[4], 16)))
    return repos


def test_work_stats_per_day_types_and_totals(container, seeded):
    stats = container.report_service.work_stats(1, start=MAY[0], end=MAY[5], now=NOW)

    assert [d["day_type"] for d in stats["days"]] == ["present", "late", "holiday", "weekend", "present", "absent"]
    late_day = stats["days"][1]
    assert late_day["late_hours"] == 0.25
    assert late_day["overtime_hours"] == 0.5
    assert stats["totals"]["worked_hours"] == 25.0
    assert stats["totals"]["worked_days"] == 3
    assert stats["totals"]["late_days"] == 1
    assert stats["work_hours"] == 8.0


def test_work_stats_zero_hours_on_off_days_and_leave(container, seeded):
    stats = container.report_service.work_stats(5, start=MAY[0], end=MAY[3], now=NOW)

    assert [d["day_type"] for d in stats["days"]] == ["paid leave", "unpaid leave", "holiday", "weekend"]
    assert all(d["worked_hours"] == 0 for d in stats["days"])


def test_work_stats_future_days_are_blank(container, seeded):
    stats = container.report_service.work_stats(1, start=MAY[5], end=MAY[7], now=NOW)

    assert [d["day_type"] for d in stats["days"]] == ["absent", "", ""]


def test_work_stats_clipped_to_employment_period(container, seeded):
    stats = container.report_service.work_stats(4, start=MAY[0], end=MAY[5], now=NOW)

    assert stats["end_date"] == "2024-05-02"
    assert len(stats["days"]) == 2


def test_work_stats_for_pending_employee_is_empty(container, seeded):
    stats = container.report_service.work_stats(6, start=MAY[0], end=MAY[5], now=NOW)

    assert stats["days"] == []
    assert stats["message"]


def test_work_stats_unknown_employee(container, seeded):
    with pytest.raises(NotFoundError):
        container.report_service.work_stats(404, now=NOW)


def test_bulk_work_stats_filters_by_department(container, seeded):
    result = container.report_service.bulk_work_stats(department_ids=[10], start=MAY[0], end=MAY[1], now=NOW)

    assert [e["employee_id"] for e in result["employees"]] == [1]


def test_attendance_summary_counts(container, seeded):
    summary = container.report_service.attendance_summary(
        start=MAY[0], end=MAY[2], department_ids=None, now=NOW
    )
    first, second, holiday = summary["days"]

    by_id = {row["employee_id"]: row["status"] for row in first["employees"]}
    assert 3 not in by_id and 6 not in by_id
    assert by_id[1] == "present"
    assert by_id[4] == "absent"
    assert by_id[5] == "paid leave"

    assert second["counts"]["late"] == 1
    assert second["counts"]["unpaid_leave"] == 1
    assert holiday["is_off_day"] and holiday["employees"] == []

    assert summary["counts"]["present"] == 1
    assert summary["counts"]["late"] == 1
    assert summary["counts"]["on_leave"] == 2
    assert summary["counts"]["paid_leave"] == 1


def test_attendance_summary_does_not_mark_future_absent(container, seeded):
    summary = container.report_service.attendance_summary(start=MAY[5], end=MAY[6], now=NOW)

    assert summary["days"][1]["employees"] == []
    assert summary["days"][1]["counts"]["absent"] == 0


def test_detailed_report_codes_and_counters(container, seeded):
    report = container.report_service.detailed_report(year=2024, month=5, now=NOW)
    rows = {row["employee_id"]: row for row in report["employees"]}

    assert set(rows) == {1, 2, 4, 5}
    day_worker = rows[1]
    codes = [d["status"] for d in day_worker["summary"]]
    assert codes[:7] == ["P", "LP", "GH", "WH", "EL", "A", ""]
    assert day_worker["total_days"] == 31
    assert day_worker["total_present"] == 3
    assert day_worker["late_present"] == 1
    assert day_worker["half_or_early_leave"] == 1
    assert day_worker["govt_holiday"] == 1
    assert day_worker["weekly_holiday"] == 1
    assert day_worker["absent"] == 1

    assert [d["status"] for d in rows[5]["summary"]][:2] == ["PL", "UL"]
    assert rows[5]["designation"] == "Analyst"
    assert rows[4]["extra_days"] == 29


def test_detailed_report_daily_summary(container, seeded):
    report = container.report_service.detailed_report(year=2024, month=5, day=MAY[1], now=NOW)
    daily = report["daily_summary"]

    assert daily["present_count"] == 1
    assert daily["on_leave_count"] == 1
    assert daily["resigned_today_count"] == 1
    assert daily["late_count"] == 1
    assert daily["late_employees"][0]["late_time"] == "00:15"
    assert daily["late_employees"][0]["reason"] == "Bus"


def test_attendance_stats_counts_per_employee(container, seeded):
    seeded["leaves_repo"].leaves.extend(
        [
            LeaveRequest(leave_id=2, employee_id=5, start_date=MAY[4], end_date=MAY[4], status=RequestStatus.PENDING),
            LeaveRequest(leave_id=3, employee_id=5, start_date=MAY[5], end_date=MAY[5], status=RequestStatus.REJECTED),
        ]
    )

    result = container.report_service.attendance_stats(start=MAY[0], end=MAY[5], now=NOW)
    rows = {row["employee_id"]: row for row in result["stats"]}

    assert 6 not in rows
    day_worker = rows[1]
    assert (day_worker["present_count"], day_worker["graced_count"], day_worker["late_count"]) == (2, 0, 1)
    assert day_worker["absent_count"] == 1
    on_leave = rows[5]
    assert (on_leave["leave_count"], on_leave["paid_leave_count"], on_leave["unpaid_leave_count"]) == (2, 1, 1)
    assert on_leave["absent_count"] == 2
    assert result["leave_stats"] == {"requested": 3, "pending": 1, "approved": 1, "rejected": 1}
    assert result["leave_totals"] == {"total_leave_days": 2}
    assert result["totals"]["total_present"] == 2
    assert result["totals"]["total_late"] == 1


def test_attendance_stats_uses_recomputed_status(container, seeded):
    seeded["attendance_repo"].add(
        record(9, 1, MAY[5], dt(MAY[5], 9, 10), dt(MAY[5], 18), status=AttendanceStatus.LATE)
    )

    result = container.report_service.attendance_stats(department_ids=[10], start=MAY[0], end=MAY[5], now=NOW)

    [row] = result["stats"]
    assert (row["present_count"], row["graced_count"], row["late_count"], row["absent_count"]) == (2, 1, 1, 0)
    assert result["totals"] == {"total_present": 2, "total_graced": 1, "total_late": 1, "total_absent": 0}
    assert result["leave_stats"]["requested"] == 0


def test_attendance_stats_for_empty_department(container, seeded):
    result = container.report_service.attendance_stats(department_ids=[99], start=MAY[0], end=MAY[5], now=NOW)

    assert result["stats"] == []
    assert result["totals"]["total_absent"] == 0
    assert result["leave_totals"] == {"total_leave_days": 0}


def test_short_leave_flag_for_night_employee_without_night_config(container, repos):
    repos["configs_repo"].config = AdminConfig(working_hours=DAY_SHIFT)
    repos["attendance_repo"].add(record(1, 2, MAY[0], dt(MAY[0], 22), kind=ShiftKind.NIGHT))
    repos["leaves_repo"].short_leaves.extend(
        ShortLeave(i, 2, day, 1, RequestStatus.APPROVED, start_time=time(23, 0)) for i, day in enumerate(MAY[:2], 1)
    )

    recorded = container.report_service.work_stats(2, start=MAY[0], end=MAY[0], now=dt(MAY[0], 23, 30))
    unrecorded = container.report_service.work_stats(2, start=MAY[1], end=MAY[1], now=dt(MAY[1], 23, 30))

    assert recorded["days"][0]["short_leave"]["is_currently_on_short_leave"] is True
    assert unrecorded["days"][0]["short_leave"]["has_short_leave_today"] is True
    assert unrecorded["days"][0]["short_leave"]["is_currently_on_short_leave"] is False
