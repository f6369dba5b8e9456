from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import elapsed, is_before, overlap
from ..core.constants import HALF_DAY_SHORT_LEAVE_HOURS
from ..core.enums import AttendanceStatus, DayCode, ShiftKind
from ..leaves.model import ShortLeave
from ..leaves.short_leave import ShortLeaveGraceAdjuster
from ..shifts.model import AdminConfig, ShiftConfig
from ..shifts.window import ShiftWindow, ShiftWindowCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .strategies.base import StatusDecision


@dataclass(frozen=True)
class DayMetrics:
    """Hours derived from one attendance record, rounded to 2 decimals."""

    worked_hours: float = 0.0
    late_hours: float = 0.0
    graced_hours: float = 0.0
    overtime_hours: float = 0.0
    status: Optional[AttendanceStatus] = None


def _hours(delta: timedelta) -> float:
    return round(max(timedelta(0), delta).total_seconds() / 3600, 2)


class AttendanceClassifier:
    """Single entry point for check-in status and per-day hour metrics.

    The workflow, the auto checkout job and every report call through here so
    that night-shift and short-leave handling lives in one place.
    """

    def __init__(
        self,
        calculator: ShiftWindowCalculator,
        adjuster: ShortLeaveGraceAdjuster,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._calculator = calculator
        self._adjuster = adjuster
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def calculator(self) -> ShiftWindowCalculator:
        return self._calculator

    @property
    def adjuster(self) -> ShortLeaveGraceAdjuster:
        return self._adjuster

    def effective_window(
        self,
        *,
        shift: ShiftConfig,
        kind: ShiftKind,
        anchor_date: date,
        short_leave: Optional[ShortLeave] = None,
        now: Optional[datetime] = None,
    ) -> ShiftWindow:
        window = self._calculator.window(shift=shift, kind=kind, anchor_date=anchor_date, now=now)
        return self._adjuster.adjust(window, short_leave, shift=shift, kind=kind)

    def classify_checkin(self, *, check_in: datetime, window: ShiftWindow) -> StatusDecision:
        strategy = self._factory.for_checkin(check_in=check_in, window=window)
        return strategy.decide_checkin(check_in=check_in, window=window)

    @staticmethod
    def shift_for_record(record: AttendanceRecord, config: AdminConfig) -> ShiftConfig:
        return record.shift_snapshot() or config.shift_for(record.shift_kind)

    def window_for_record(
        self,
        record: AttendanceRecord,
        config: AdminConfig,
        *,
        short_leave: Optional[ShortLeave] = None,
    ) -> ShiftWindow:
        return self.effective_window(
            shift=self.shift_for_record(record, config),
            kind=record.shift_kind,
            anchor_date=record.anchor_date,
            short_leave=short_leave,
        )

    def status_for(self, record: AttendanceRecord, window: ShiftWindow) -> AttendanceStatus:
        """Stored status when a human overrode it, otherwise recomputed from the window."""
        if record.is_status_updated or record.check_in is None:
            return record.status
        return self.classify_checkin(check_in=record.check_in, window=window).status

    def day_metrics(
        self,
        record: AttendanceRecord,
        *,
        shift: ShiftConfig,
        window: ShiftWindow,
        short_leave: Optional[ShortLeave] = None,
    ) -> DayMetrics:
        if record.check_in is None:
            return DayMetrics(status=record.status)

        status = self.status_for(record, window)
        check_in = record.check_in

        late = timedelta(0)
        graced = timedelta(0)
        if status == AttendanceStatus.LATE:
            # Manual overrides measure lateness from the shift start.
            late = elapsed(window.window_start if record.is_status_updated else window.grace_cutoff, check_in)
        elif status == AttendanceStatus.GRACED:
            graced = elapsed(window.window_start, check_in)

        worked = timedelta(0)
        overtime = timedelta(0)
        if record.check_out is not None:
            worked = self._worked(record, shift=shift, window=window, short_leave=short_leave)
            overtime = elapsed(window.window_end, record.check_out)

        return DayMetrics(
            worked_hours=_hours(worked),
            late_hours=_hours(late),
            graced_hours=_hours(graced),
            overtime_hours=_hours(overtime),
            status=status,
        )

    def _worked(
        self,
        record: AttendanceRecord,
        *,
        shift: ShiftConfig,
        window: ShiftWindow,
        short_leave: Optional[ShortLeave],
    ) -> timedelta:
        raw = max(timedelta(0), elapsed(record.check_in, record.check_out))
        if short_leave is None or not short_leave.is_approved or not short_leave.duration_hours:
            return raw

        placed = self._adjuster.place(short_leave, shift=shift, kind=record.shift_kind, anchor_date=window.anchor_date)
        if placed is None:
            # No start time recorded: subtract the whole duration.
            excused = timedelta(hours=float(short_leave.duration_hours))
        else:
            excused = overlap(record.check_in, record.check_out, placed.start, placed.end)
        return min(raw, max(timedelta(0), raw - excused))

    @staticmethod
    def is_early_leave(record: AttendanceRecord, window: ShiftWindow) -> bool:
        return record.check_out is not None and is_before(record.check_out, window.window_end)

    def report_code(
        self,
        record: AttendanceRecord,
        *,
        window: ShiftWindow,
        short_leave: Optional[ShortLeave] = None,
    ) -> DayCode:
        """Monthly report code for a day that has an attendance record."""
        if record.check_in is None:
            return DayCode.ABSENT
        if (
            short_leave is not None
            and short_leave.is_approved
            and float(short_leave.duration_hours or 0) >= HALF_DAY_SHORT_LEAVE_HOURS
        ):
            return DayCode.HALF_DAY
        if self.is_early_leave(record, window):
            return DayCode.EARLY_LEAVE
        if self.status_for(record, window) == AttendanceStatus.LATE:
            return DayCode.LATE_PRESENT
        return DayCode.PRESENT
