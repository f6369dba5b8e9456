from __future__ import annotations

from datetime import date

import pytest

from fakes import (
    InMemoryAttendance,
    InMemoryConfigs,
    InMemoryEmployees,
    InMemoryLeaves,
    InMemoryOffDays,
    make_config,
)
from hr_attendance.attendance.classifier import AttendanceClassifier
from hr_attendance.container import build_classifier, wire_container
from hr_attendance.core.enums import EmploymentStatus, ShiftKind
from hr_attendance.employees.model import Employee


@pytest.fixture
def classifier() -> AttendanceClassifier:
    return build_classifier("Asia/Dhaka")


@pytest.fixture
def repos():
    employees = InMemoryEmployees()
    employees.add(
        Employee(
            employee_id=1,
            full_name="Day Worker",
            shift=ShiftKind.DAY,
            status=EmploymentStatus.ACTIVE,
            department_id=10,
            designation="Engineer",
            start_date=date(2024, 1, 1),
        )
    )
    employees.add(
        Employee(
            employee_id=2,
            full_name="Night Worker",
            shift=ShiftKind.NIGHT,
            status=EmploymentStatus.ACTIVE,
            department_id=20,
            designation="Operator",
            start_date=date(2024, 1, 1),
        )
    )
    return {
        "attendance_repo": InMemoryAttendance(),
        "employees_repo": employees,
        "leaves_repo": InMemoryLeaves(),
        "off_days_repo": InMemoryOffDays(),
        "configs_repo": InMemoryConfigs(make_config()),
    }


@pytest.fixture
def container(repos):
    return wire_container(timezone="Asia/Dhaka", **repos)
