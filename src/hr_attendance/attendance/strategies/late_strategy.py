from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import elapsed, format_duration_hhmm
from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow
from .base import CheckInStrategy, StatusDecision


class LateStrategy(CheckInStrategy):
    """Late check-in."""

    def decide_checkin(self, *, check_in: datetime, window: ShiftWindow) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            note=f"Late by {format_duration_hhmm(elapsed(window.grace_cutoff, check_in))}",
        )
