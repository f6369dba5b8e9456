from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    DEPARTMENT_HEAD = "DepartmentHead"
    EMPLOYEE = "Employee"


class ShiftKind(str, Enum):
    DAY = "Day"
    NIGHT = "Night"


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    TERMINATED = "Terminated"
    RESIGNED = "Resigned"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record."""

    PRESENT = "present"
    GRACED = "graced"
    LATE = "late"
    ABSENT = "absent"
    ON_LEAVE = "on leave"


class RequestStatus(str, Enum):
    """Approval state of leave and short-leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CheckoutSource(str, Enum):
    MANUAL = "manual"
    AUTO = "auto"


class OffDayKind(str, Enum):
    HOLIDAY = "holiday"
    WEEKEND = "weekend"


class LeaveDayKind(str, Enum):
    """How a single day inside an approved leave request is counted."""

    PAID = "paid leave"
    UNPAID = "unpaid leave"
    NON_WORKING = "on leave"


class DayCode(str, Enum):
    """Codes used by the monthly detailed report."""

    PRESENT = "P"
    LATE_PRESENT = "LP"
    EARLY_LEAVE = "EL"
    HALF_DAY = "HL"
    GOVT_HOLIDAY = "GH"
    WEEKLY_HOLIDAY = "WH"
    PAID_LEAVE = "PL"
    UNPAID_LEAVE = "UL"
    LEAVE = "L"
    ABSENT = "A"
    FUTURE = ""
