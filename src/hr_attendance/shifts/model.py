from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.constants import DEFAULT_WORK_HOURS
from ..core.enums import ShiftKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ShiftConfig:
    """Wall-clock working hours of one shift kind.

    An ``end`` hour before the ``start`` hour means the shift crosses midnight.
    """

    start: time
    end: time
    grace: Optional[time] = None

    @classmethod
    def from_strings(cls, start: str, end: str, grace: Optional[str] = None) -> "ShiftConfig":
        return cls(
            start=parse_hhmm(start),
            end=parse_hhmm(end),
            grace=parse_hhmm(grace) if grace else None,
        )

    @property
    def effective_grace(self) -> time:
        return self.grace or self.start

    @property
    def crosses_midnight(self) -> bool:
        return self.end.hour < self.start.hour

    def to_dict(self) -> dict:
        return {
            "start": format_hhmm(self.start),
            "grace": format_hhmm(self.effective_grace),
            "end": format_hhmm(self.end),
        }


@dataclass(frozen=True)
class AdminConfig:
    """Organization-wide working hours, maintained by admins."""

    working_hours: ShiftConfig
    night_shift_working_hours: Optional[ShiftConfig] = None
    work_hour_per_day: float = DEFAULT_WORK_HOURS
    work_hour_per_night: float = DEFAULT_WORK_HOURS

    def find_shift(self, kind: ShiftKind) -> Optional[ShiftConfig]:
        if kind == ShiftKind.NIGHT:
            return self.night_shift_working_hours
        return self.working_hours

    def shift_for(self, kind: ShiftKind) -> ShiftConfig:
        shift = self.find_shift(kind)
        if shift is None:
            raise ValidationError("Night shift working hours are not configured")
        return shift

    def nominal_hours(self, kind: ShiftKind) -> float:
        if kind == ShiftKind.NIGHT:
            return float(self.work_hour_per_night or DEFAULT_WORK_HOURS)
        return float(self.work_hour_per_day or DEFAULT_WORK_HOURS)
