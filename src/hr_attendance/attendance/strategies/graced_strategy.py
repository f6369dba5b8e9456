from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import elapsed, format_duration_hhmm
from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow
from .base import CheckInStrategy, StatusDecision


class GracedStrategy(CheckInStrategy):
    """Check-in after the shift start but within the grace period."""

    def decide_checkin(self, *, check_in: datetime, window: ShiftWindow) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.GRACED,
            note=f"Within grace by {format_duration_hhmm(elapsed(window.window_start, check_in))}",
        )
