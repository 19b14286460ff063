"""Run one event reminder sweep.

Schedule hourly, e.g. crontab: `0 * * * * python scripts/send_reminders.py`.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.event_points.event_points.container import build_container

logger = logging.getLogger("send_reminders")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        reminder_window=(settings.REMINDER_WINDOW_START_HOURS, settings.REMINDER_WINDOW_END_HOURS),
    )
    result = container.reminder_service.send_event_reminders()
    logger.info(
        "events=%s sent=%s cleared_tokens=%s skipped=%s",
        result.events,
        result.sent,
        result.cleared_tokens,
        result.skipped,
    )


if __name__ == "__main__":
    main()
