"""Policy constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time, timedelta

from .enums import EmploymentStatus

DEFAULT_TIMEZONE = "Asia/Dhaka"
DEFAULT_HISTORY_LIMIT = 30

# Day shift employees cannot check in before this wall-clock time.
DAY_SHIFT_EARLIEST_CHECKIN = time(8, 0)
# Day shift check-out is never allowed past this hour.
DAY_SHIFT_LATEST_CHECKOUT_HOUR = 22
# Night shift check-in opens this long before the shift start hour.
NIGHT_SHIFT_EARLY_CHECKIN = timedelta(hours=1)
# Check-out stays open this long after the shift end.
CHECKOUT_GRACE = timedelta(hours=1)
# Auto checkout only closes a record once the shift ended at least this long ago.
AUTO_CHECKOUT_GRACE = timedelta(hours=1)

HALF_DAY_SHORT_LEAVE_HOURS = 4
DEFAULT_WORK_HOURS = 8

CHECKIN_BLOCKED_STATUSES = frozenset(
    {EmploymentStatus.TERMINATED, EmploymentStatus.PENDING, EmploymentStatus.RESIGNED}
)
# Employment ends on the termination date only for these statuses.
EMPLOYMENT_ENDED_STATUSES = frozenset({EmploymentStatus.TERMINATED, EmploymentStatus.RESIGNED})
