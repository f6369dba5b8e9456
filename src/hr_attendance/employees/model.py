from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import EMPLOYMENT_ENDED_STATUSES
from ..core.enums import EmploymentStatus, Role, ShiftKind


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee as the attendance engine needs it."""

    employee_id: int
    full_name: str
    shift: ShiftKind
    status: EmploymentStatus
    role: Role = Role.EMPLOYEE
    department_id: Optional[int] = None
    designation: Optional[str] = None
    start_date: Optional[date] = None
    termination_date: Optional[date] = None

    def employment_period(self, start: date, end: date) -> Optional[tuple[date, date]]:
        """Clip [start, end] to the days this employee was employed, or None if disjoint."""
        if self.start_date and self.start_date > start:
            start = self.start_date
        if self.status in EMPLOYMENT_ENDED_STATUSES and self.termination_date and self.termination_date < end:
            end = self.termination_date
        if start > end:
            return None
        return start, end

    def is_employed_on(self, day: date) -> bool:
        return self.employment_period(day, day) is not None
