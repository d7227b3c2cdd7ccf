from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from .clock.controller import register as register_clock
from .common.logging_config import configure_logging
from .config import get_settings_module
from .container import build_container
from .workday.controller import register as register_workday

logger = logging.getLogger(__name__)


def create_app(container=None) -> Flask:
    """Flask app factory.

    ``container`` lets tests wire in-memory services instead of MySQL.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            day_boundary_timezone=getattr(settings, "DAY_BOUNDARY_TIMEZONE", "UTC"),
            max_backdate_days=int(getattr(settings, "MAX_BACKDATE_DAYS", 7)),
            tolerance_minutes=int(getattr(settings, "SCHEDULE_TOLERANCE_MINUTES", 15)),
        )

    register_clock(app, container)
    register_workday(app, container)

    return app
