"""Create the database (if missing) and apply schema.sql.

Usage: APP_ENV=development python scripts/init_db.py
"""

from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from hr_attendance.database.bootstrap import apply_schema, list_tables
from hr_attendance.main import configure_logging
from hr_attendance.settings import get_settings_module

logger = logging.getLogger("hr_attendance.scripts.init_db")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    statements = apply_schema(db_config)
    tables = list_tables(db_config)
    logger.info(
        "Applied %d statements -> %s@%s:%s/%s (tables=%d)",
        statements,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
