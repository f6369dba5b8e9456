from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.window import ShiftWindow


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class CheckInStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in instant maps to a status."""

    @abstractmethod
    def decide_checkin(self, *, check_in: datetime, window: ShiftWindow) -> StatusDecision:
        raise NotImplementedError
