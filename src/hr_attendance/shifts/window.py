from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from ..common.datetime_utils import at, end_of_day, shift_by, to_local
from ..core.constants import (
    CHECKOUT_GRACE,
    DAY_SHIFT_EARLIEST_CHECKIN,
    DAY_SHIFT_LATEST_CHECKOUT_HOUR,
    NIGHT_SHIFT_EARLY_CHECKIN,
)
from ..core.enums import ShiftKind
from .model import ShiftConfig


@dataclass(frozen=True)
class ShiftWindow:
    """Instants bounding one attendance day. Derived, never persisted."""

    anchor_date: date
    earliest_allowed: datetime
    window_start: datetime
    grace_cutoff: datetime
    window_end: datetime
    latest_allowed_checkout: datetime

    def adjusted(self, *, window_start: datetime, grace_cutoff: datetime) -> "ShiftWindow":
        return replace(self, window_start=window_start, grace_cutoff=grace_cutoff)


class ShiftWindowCalculator:
    """Anchors a shift configuration to calendar dates.

    Every instant is built on the same anchor date and only moved to the next
    day at the midnight crossing, so callers never compare bare clock times.
    """

    def __init__(self, tz: tzinfo):
        self._tz = tz

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def resolve_anchor_date(self, *, shift: ShiftConfig, kind: ShiftKind, now: datetime) -> date:
        """Calendar date an action at ``now`` belongs to.

        Early-morning actions on a cross-midnight night shift belong to the shift
        that started the previous evening.
        """
        now = to_local(now, self._tz)
        if self._in_night_tail(shift=shift, kind=kind, hour=now.hour, slack=0):
            return now.date() - timedelta(days=1)
        return now.date()

    def checkout_candidates(self, *, shift: ShiftConfig, kind: ShiftKind, now: datetime) -> list[date]:
        """Anchor dates searched, in order, for an open record at check-out."""
        now = to_local(now, self._tz)
        today = now.date()
        yesterday = today - timedelta(days=1)
        if self._in_night_tail(shift=shift, kind=kind, hour=now.hour, slack=1):
            return [yesterday, today]
        return [today, yesterday]

    def window(
        self,
        *,
        shift: ShiftConfig,
        kind: ShiftKind,
        anchor_date: date,
        now: Optional[datetime] = None,
    ) -> ShiftWindow:
        next_day = anchor_date + timedelta(days=1)

        window_start = at(anchor_date, shift.start, self._tz)
        grace = shift.effective_grace
        if _clock(grace) >= _clock(shift.start):
            grace_cutoff = at(anchor_date, grace, self._tz)
        elif shift.crosses_midnight:
            grace_cutoff = at(next_day, grace, self._tz)
        else:
            grace_cutoff = window_start

        if shift.crosses_midnight:
            window_end = at(next_day, shift.end, self._tz)
        else:
            window_end = at(anchor_date, shift.end, self._tz)

        if kind == ShiftKind.NIGHT:
            opens = max(0, shift.start.hour - int(NIGHT_SHIFT_EARLY_CHECKIN.total_seconds() // 3600))
            earliest_allowed = at(anchor_date, time(opens, 0), self._tz)
        else:
            earliest_allowed = at(anchor_date, DAY_SHIFT_EARLIEST_CHECKIN, self._tz)

        return ShiftWindow(
            anchor_date=anchor_date,
            earliest_allowed=earliest_allowed,
            window_start=window_start,
            grace_cutoff=grace_cutoff,
            window_end=window_end,
            latest_allowed_checkout=self._latest_checkout(
                shift=shift, kind=kind, anchor_date=anchor_date, window_end=window_end, now=now
            ),
        )

    def auto_checkout_at(self, *, shift: ShiftConfig, kind: ShiftKind, anchor_date: date) -> datetime:
        """Instant written as the system-generated checkout."""
        return self.window(shift=shift, kind=kind, anchor_date=anchor_date).window_end

    def _latest_checkout(
        self,
        *,
        shift: ShiftConfig,
        kind: ShiftKind,
        anchor_date: date,
        window_end: datetime,
        now: Optional[datetime],
    ) -> datetime:
        if kind == ShiftKind.DAY:
            hour = min(DAY_SHIFT_LATEST_CHECKOUT_HOUR, shift.end.hour + 1)
            return at(anchor_date, time(hour, shift.end.minute), self._tz)

        if not shift.crosses_midnight:
            return shift_by(window_end, CHECKOUT_GRACE)

        if now is None or to_local(now, self._tz).hour <= shift.end.hour + 1:
            return shift_by(window_end, CHECKOUT_GRACE)
        return end_of_day(anchor_date, self._tz)

    @staticmethod
    def _in_night_tail(*, shift: ShiftConfig, kind: ShiftKind, hour: int, slack: int) -> bool:
        if kind != ShiftKind.NIGHT or not shift.crosses_midnight:
            return False
        return 0 <= hour <= shift.end.hour + slack


def _clock(value: time) -> tuple[int, int]:
    return value.hour, value.minute
