from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .attendance.scheduler import build_auto_checkout_scheduler
from .common.datetime_utils import get_timezone
from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE
from .database.bootstrap import apply_schema
from .reports.controller import register as register_reports
from .settings import get_settings_module

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
    # APScheduler logs every job execution at INFO.
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def create_app(container: Optional[Container] = None, *, start_scheduler: Optional[bool] = None) -> Flask:
    """Application factory.

    ``container`` lets tests inject in-memory repositories; without it the
    MySQL-backed container is built from the active settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    timezone = getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)
    app.config["TIMEZONE"] = timezone

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s tz=%s",
            settings_module, db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"), timezone,
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
        container = build_container(db_config=db_config, timezone=timezone)

    app.extensions["hr_attendance"] = container

    register_attendance(app, container)
    register_reports(app, container)

    if start_scheduler is None:
        start_scheduler = bool(getattr(settings, "AUTO_CHECKOUT_ENABLED", False))
    if start_scheduler:
        scheduler = build_auto_checkout_scheduler(
            container.auto_checkout_job,
            tz=get_timezone(timezone),
            interval_minutes=int(getattr(settings, "AUTO_CHECKOUT_INTERVAL_MINUTES", 5)),
            process_all=bool(getattr(settings, "AUTO_CHECKOUT_PROCESS_ALL", True)),
        )
        scheduler.start()
        app.extensions["hr_attendance_scheduler"] = scheduler

    return app
