"""Run one auto checkout sweep, e.g. from cron instead of the in-process scheduler.

Usage: python scripts/run_auto_checkout.py [--all]
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging

from dotenv import load_dotenv

from hr_attendance.container import build_container
from hr_attendance.main import configure_logging
from hr_attendance.settings import get_settings_module

logger = logging.getLogger("hr_attendance.scripts.auto_checkout")


def main() -> None:
    parser = argparse.ArgumentParser(description="Close attendance records left open past their shift end.")
    parser.add_argument(
        "--all",
        action="store_true",
        help="process every open record instead of yesterday's only (night shifts included)",
    )
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), timezone=settings.TIMEZONE)
    result = container.auto_checkout_job.run(process_all=args.all)
    logger.info("Auto checkout result: %s", json.dumps(result.to_dict()))


if __name__ == "__main__":
    main()
