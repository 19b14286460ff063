from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.decorators import CONTAINER_KEY
from .common.http import ApiJSONProvider, register_error_handlers
from .container import Container, build_container
from .core.constants import REMINDER_WINDOW_END_HOURS, REMINDER_WINDOW_START_HOURS
from .database.bootstrap import apply_schema, ensure_admin_user, ensure_settings_row, list_tables
from .enrollments.controller import register as register_enrollments
from .events.controller import register as register_events
from .settings.controller import register as register_settings
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = ApiJSONProvider(app)

    settings_module = settings_module or get_settings_module()
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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_ADMIN", False)):
            ensure_admin_user(
                db_config,
                username=getattr(settings, "ADMIN_USERNAME", "admin"),
                password=getattr(settings, "ADMIN_PASSWORD"),
                first_name=getattr(settings, "ADMIN_FIRST_NAME", "Admin"),
                last_name=getattr(settings, "ADMIN_LAST_NAME", "User"),
            )
            ensure_settings_row(db_config)

        container = build_container(
            db_config=db_config,
            reminder_window=(
                int(getattr(settings, "REMINDER_WINDOW_START_HOURS", REMINDER_WINDOW_START_HOURS)),
                int(getattr(settings, "REMINDER_WINDOW_END_HOURS", REMINDER_WINDOW_END_HOURS)),
            ),
        )

    app.extensions[CONTAINER_KEY] = container
    register_error_handlers(app)

    register_users(app, container)
    register_attendance(app, container)
    register_settings(app, container)
    register_events(app, container)
    register_enrollments(app, container)

    @app.cli.command("send-reminders")
    def send_reminders_command():
        """Run one event reminder sweep (schedule hourly)."""
        result = container.reminder_service.send_event_reminders()
        logger.info(
            "Reminder sweep: events=%s sent=%s cleared_tokens=%s skipped=%s",
            result.events,
            result.sent,
            result.cleared_tokens,
            result.skipped,
        )

    return app
