from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import date_range
from ..core.enums import LeaveDayKind, OffDayKind
from .model import LeaveRequest, OffDayEvent


@dataclass(frozen=True)
class OffDayCalendar:
    """Holiday and weekend dates, expanded from their event ranges."""

    holidays: frozenset[date] = field(default_factory=frozenset)
    weekends: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def from_events(
        cls,
        events: Iterable[OffDayEvent],
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> "OffDayCalendar":
        holidays: set[date] = set()
        weekends: set[date] = set()
        for event in events:
            first = max(event.start_date, start) if start else event.start_date
            last = min(event.end_date, end) if end else event.end_date
            target = holidays if event.kind == OffDayKind.HOLIDAY else weekends
            target.update(date_range(first, last))
        return cls(holidays=frozenset(holidays), weekends=frozenset(weekends))

    def is_holiday(self, day: date) -> bool:
        return day in self.holidays

    def is_weekend(self, day: date) -> bool:
        return day in self.weekends

    def is_off_day(self, day: date) -> bool:
        return day in self.holidays or day in self.weekends


def allocate_leave_days(leaves: Iterable[LeaveRequest], calendar: OffDayCalendar) -> dict[date, LeaveDayKind]:
    """Label every date covered by one employee's approved leaves.

    Requests are walked in start-date order. Within a request, working days
    consume its paid allowance first and the rest are unpaid. Off days inside
    a leave are labelled non-working and consume nothing. A date already
    labelled by an earlier overlapping request keeps its label.
    """
    allocation: dict[date, LeaveDayKind] = {}
    for leave in sorted(leaves, key=lambda lv: (lv.start_date, lv.leave_id)):
        if not leave.is_approved:
            continue
        working_index = 0
        for day in date_range(leave.start_date, leave.end_date):
            if day in allocation:
                continue
            if calendar.is_off_day(day):
                allocation[day] = LeaveDayKind.NON_WORKING
                continue
            working_index += 1
            allocation[day] = LeaveDayKind.PAID if working_index <= leave.paid_leave else LeaveDayKind.UNPAID
    return allocation
