from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.work_calendar import WorkCalendar
from .config import get_settings_module
from .container import Container, build_mysql_container
from .core.constants import DEFAULT_COUNT_WEEKENDS, DEFAULT_LOG_LEVEL
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", DEFAULT_LOG_LEVEL))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config)

        calendar = WorkCalendar.from_settings(
            count_weekends=getattr(settings, "COUNT_WEEKENDS", DEFAULT_COUNT_WEEKENDS),
            holidays=getattr(settings, "HOLIDAYS", []),
        )
        container = build_mysql_container(db_config=db_config, calendar=calendar)

    app.extensions["crew_attendance"] = container
    register_attendance(app, container)
    return app
