from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow
from .base import CheckInStrategy, StatusDecision


class PresentStrategy(CheckInStrategy):
    """Check-in at or before the shift start."""

    def decide_checkin(self, *, check_in: datetime, window: ShiftWindow) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
