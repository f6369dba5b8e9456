from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import is_before, now_local, shift_by, to_local
from ..core.constants import AUTO_CHECKOUT_GRACE
from ..core.enums import CheckoutSource, ShiftKind
from ..shifts.repository import AdminConfigRepository
from ..shifts.window import ShiftWindowCalculator
from .classifier import AttendanceClassifier
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoCheckoutResult:
    scope: str
    scanned: int = 0
    processed: int = 0
    failed: int = 0
    skipped: int = 0
    day_shift: int = 0
    night_shift: int = 0
    already_running: bool = False

    def to_dict(self) -> dict:
        return {
            "scope": self.scope,
            "scanned": self.scanned,
            "processed": self.processed,
            "failed": self.failed,
            "skipped": self.skipped,
            "day_shift": self.day_shift,
            "night_shift": self.night_shift,
            "already_running": self.already_running,
        }


class AutoCheckoutJob:
    """Closes attendance records whose shift ended without a check-out.

    The written check-out is the shift end itself, and only once more than
    ``grace`` has passed since it. Runs never overlap; a run started while another is still
    writing returns immediately.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        configs: AdminConfigRepository,
        *,
        classifier: AttendanceClassifier,
        grace: timedelta = AUTO_CHECKOUT_GRACE,
    ):
        self._attendance = attendance
        self._configs = configs
        self._classifier = classifier
        self._calculator: ShiftWindowCalculator = classifier.calculator
        self._grace = grace
        self._lock = threading.Lock()

    def run(self, *, now: Optional[datetime] = None, process_all: bool = False) -> AutoCheckoutResult:
        tz = self._calculator.tz
        now = to_local(now, tz) if now else now_local(tz)
        yesterday = now.date() - timedelta(days=1)
        scope = "all dates" if process_all else yesterday.isoformat()

        if not self._lock.acquire(blocking=False):
            logger.warning("Auto checkout for %s skipped: previous run still in progress", scope)
            return AutoCheckoutResult(scope=scope, already_running=True)
        try:
            return self._sweep(now=now, yesterday=yesterday, process_all=process_all, scope=scope)
        finally:
            self._lock.release()

    def _sweep(self, *, now: datetime, yesterday, process_all: bool, scope: str) -> AutoCheckoutResult:
        logger.info("Running auto checkout for %s", scope)

        config = self._configs.get()
        if config is None:
            logger.warning("Auto checkout skipped: working hours are not configured")
            return AutoCheckoutResult(scope=scope)

        records = self._attendance.list_open(anchor_date=None if process_all else yesterday)
        if not records:
            logger.info("No incomplete attendance records found for auto checkout")
            return AutoCheckoutResult(scope=scope)

        counts = {"processed": 0, "failed": 0, "skipped": 0, ShiftKind.DAY: 0, ShiftKind.NIGHT: 0}
        for record in records:
            try:
                if not process_all and record.shift_kind == ShiftKind.NIGHT and record.anchor_date == yesterday:
                    logger.info(
                        "Skipping night shift employee %s for %s: manual checkout required",
                        record.employee_id, record.anchor_date,
                    )
                    counts["skipped"] += 1
                    continue

                checkout_at = self._calculator.auto_checkout_at(
                    shift=self._classifier.shift_for_record(record, config),
                    kind=record.shift_kind,
                    anchor_date=record.anchor_date,
                )
                if not is_before(shift_by(checkout_at, self._grace), now):
                    logger.debug(
                        "Skipping %s shift employee %s: not yet time for auto checkout",
                        record.shift_kind.value, record.employee_id,
                    )
                    counts["skipped"] += 1
                    continue

                if not self._attendance.close(
                    attendance_id=record.attendance_id, check_out=checkout_at, source=CheckoutSource.AUTO
                ):
                    # Checked out by hand since the scan.
                    counts["skipped"] += 1
                    continue

                logger.info(
                    "Auto checkout completed for employee %s on %s at %s (%s shift)",
                    record.employee_id, record.anchor_date, checkout_at.isoformat(), record.shift_kind.value,
                )
                counts["processed"] += 1
                counts[record.shift_kind] += 1
            except Exception:
                logger.exception("Failed to auto checkout attendance %s", record.attendance_id)
                counts["failed"] += 1

        result = AutoCheckoutResult(
            scope=scope,
            scanned=len(records),
            processed=counts["processed"],
            failed=counts["failed"],
            skipped=counts["skipped"],
            day_shift=counts[ShiftKind.DAY],
            night_shift=counts[ShiftKind.NIGHT],
        )
        logger.info(
            "Auto checkout completed for %s: %d successful, %d failed, %d night shift, %d day shift",
            scope, result.processed, result.failed, result.night_shift, result.day_shift,
        )
        return result
