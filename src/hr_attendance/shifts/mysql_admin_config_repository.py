from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_WORK_HOURS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import AdminConfig, ShiftConfig
from .repository import AdminConfigRepository


class MySQLAdminConfigRepository(AdminConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[AdminConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT day_start, day_grace, day_end,
                       night_start, night_grace, night_end,
                       work_hour_per_day, work_hour_per_night
                FROM admin_config
                ORDER BY config_id
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r or r.get("day_start") is None or r.get("day_end") is None:
                return None

            night = None
            if r.get("night_start") is not None and r.get("night_end") is not None:
                night = ShiftConfig(
                    start=normalize_mysql_time(r["night_start"]),
                    end=normalize_mysql_time(r["night_end"]),
                    grace=normalize_mysql_time(r.get("night_grace")),
                )

            return AdminConfig(
                working_hours=ShiftConfig(
                    start=normalize_mysql_time(r["day_start"]),
                    end=normalize_mysql_time(r["day_end"]),
                    grace=normalize_mysql_time(r.get("day_grace")),
                ),
                night_shift_working_hours=night,
                work_hour_per_day=float(r.get("work_hour_per_day") or DEFAULT_WORK_HOURS),
                work_hour_per_night=float(r.get("work_hour_per_night") or DEFAULT_WORK_HOURS),
            )
