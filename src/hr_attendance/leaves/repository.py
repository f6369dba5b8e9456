from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import LeaveRequest, OffDayEvent, ShortLeave


class LeaveRepository(Protocol):
    def list_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[LeaveRequest]:
        """Leave requests of any status overlapping [start_date, end_date]."""

        raise NotImplementedError

    def list_approved_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[LeaveRequest]:
        """Approved leave requests overlapping [start_date, end_date]."""

        raise NotImplementedError

    def list_approved_short_leaves(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[ShortLeave]:
        raise NotImplementedError


class OffDayRepository(Protocol):
    def list_events(self, *, start_date: date, end_date: date) -> Sequence[OffDayEvent]:
        """Holiday and weekend events overlapping [start_date, end_date]."""

        raise NotImplementedError
