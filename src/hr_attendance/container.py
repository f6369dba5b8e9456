from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.auto_checkout import AutoCheckoutJob
from .attendance.classifier import AttendanceClassifier
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import get_timezone
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DatabaseConnection, DBConfig
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository, MySQLOffDayRepository
from .leaves.repository import LeaveRepository, OffDayRepository
from .leaves.short_leave import ShortLeaveGraceAdjuster
from .reports.service import AttendanceReportService
from .shifts.mysql_admin_config_repository import MySQLAdminConfigRepository
from .shifts.repository import AdminConfigRepository
from .shifts.window import ShiftWindowCalculator


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    employees_repo: EmployeeRepository
    leaves_repo: LeaveRepository
    off_days_repo: OffDayRepository
    configs_repo: AdminConfigRepository

    classifier: AttendanceClassifier
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    auto_checkout_job: AutoCheckoutJob

    conn: Optional[DatabaseConnection] = None


def build_classifier(timezone: str = DEFAULT_TIMEZONE) -> AttendanceClassifier:
    tz = get_timezone(timezone)
    return AttendanceClassifier(
        ShiftWindowCalculator(tz),
        ShortLeaveGraceAdjuster(tz),
        strategy_factory=AttendanceStrategyFactory(),
    )


def wire_container(
    *,
    attendance_repo: AttendanceRepository,
    employees_repo: EmployeeRepository,
    leaves_repo: LeaveRepository,
    off_days_repo: OffDayRepository,
    configs_repo: AdminConfigRepository,
    timezone: str = DEFAULT_TIMEZONE,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""
    classifier = build_classifier(timezone)

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        leaves_repo,
        off_days_repo,
        configs_repo,
        classifier=classifier,
    )
    report_service = AttendanceReportService(
        attendance_repo,
        employees_repo,
        leaves_repo,
        off_days_repo,
        configs_repo,
        classifier=classifier,
    )
    auto_checkout_job = AutoCheckoutJob(attendance_repo, configs_repo, classifier=classifier)

    return Container(
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        leaves_repo=leaves_repo,
        off_days_repo=off_days_repo,
        configs_repo=configs_repo,
        classifier=classifier,
        attendance_service=attendance_service,
        report_service=report_service,
        auto_checkout_job=auto_checkout_job,
        conn=conn,
    )


def build_container(*, db_config: dict, timezone: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    tz = get_timezone(timezone)

    return wire_container(
        attendance_repo=MySQLAttendanceRepository(conn, tz=tz),
        employees_repo=MySQLEmployeeRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        off_days_repo=MySQLOffDayRepository(conn),
        configs_repo=MySQLAdminConfigRepository(conn),
        timezone=timezone,
        conn=conn,
    )
