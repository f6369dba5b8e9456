from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import OffDayKind, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    """A full-day leave request spanning one or more calendar dates."""

    leave_id: int
    employee_id: int
    start_date: date
    end_date: date
    status: RequestStatus
    paid_leave: int = 0
    unpaid_leave: int = 0
    reason: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.status == RequestStatus.APPROVED

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class ShortLeave:
    """A partial-day absence. Only approved intervals affect attendance."""

    short_leave_id: int
    employee_id: int
    date: date
    duration_hours: float
    status: RequestStatus
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    reason: str = ""

    @property
    def is_approved(self) -> bool:
        return self.status == RequestStatus.APPROVED

    def to_dict(self) -> dict:
        return {
            "duration": self.duration_hours,
            "reason": self.reason,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
        }


@dataclass(frozen=True)
class OffDayEvent:
    event_id: int
    title: str
    kind: OffDayKind
    start_date: date
    end_date: date
