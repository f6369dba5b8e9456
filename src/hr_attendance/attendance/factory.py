from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import is_before
from ..shifts.window import ShiftWindow
from .strategies.base import CheckInStrategy
from .strategies.graced_strategy import GracedStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the check-in strategy from the (adjusted) window."""

    def for_checkin(self, *, check_in: datetime, window: ShiftWindow) -> CheckInStrategy:
        if is_before(window.grace_cutoff, check_in):
            return LateStrategy()
        if is_before(window.window_start, check_in):
            return GracedStrategy()
        return PresentStrategy()
