from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from ..common.datetime_utils import at, elapsed, is_before, latest, shift_by
from ..core.enums import ShiftKind
from ..shifts.model import ShiftConfig
from ..shifts.window import ShiftWindow
from .model import ShortLeave


@dataclass(frozen=True)
class PlacedShortLeave:
    """A short leave anchored to real instants of one attendance day."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return elapsed(self.start, self.end)

    def contains(self, instant: datetime) -> bool:
        return not is_before(instant, self.start) and not is_before(self.end, instant)


class ShortLeaveGraceAdjuster:
    """Moves the start and grace boundaries past a short leave that covers the shift start."""

    def __init__(self, tz: tzinfo):
        self._tz = tz

    def place(
        self,
        short_leave: Optional[ShortLeave],
        *,
        shift: ShiftConfig,
        kind: ShiftKind,
        anchor_date: date,
    ) -> Optional[PlacedShortLeave]:
        if short_leave is None or not short_leave.is_approved:
            return None
        if short_leave.start_time is None or not short_leave.duration_hours:
            return None

        day = anchor_date
        clock = short_leave.start_time
        # On a cross-midnight shift the early-morning tail belongs to the next calendar day.
        if (
            kind == ShiftKind.NIGHT
            and shift.crosses_midnight
            and (clock.hour, clock.minute) < (shift.start.hour, shift.start.minute)
            and clock.hour <= shift.end.hour
        ):
            day = anchor_date + timedelta(days=1)

        start = at(day, clock, self._tz)
        return PlacedShortLeave(start=start, end=shift_by(start, timedelta(hours=float(short_leave.duration_hours))))

    def adjust(
        self,
        window: ShiftWindow,
        short_leave: Optional[ShortLeave],
        *,
        shift: ShiftConfig,
        kind: ShiftKind,
    ) -> ShiftWindow:
        placed = self.place(short_leave, shift=shift, kind=kind, anchor_date=window.anchor_date)
        if placed is None or is_before(window.window_start, placed.start):
            return window
        return window.adjusted(
            window_start=latest(window.window_start, placed.end),
            grace_cutoff=latest(window.grace_cutoff, placed.end),
        )
