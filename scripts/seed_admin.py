from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.event_points.event_points.database.bootstrap import ensure_admin_user, ensure_settings_row

logger = logging.getLogger("seed_admin")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    created = ensure_admin_user(
        db_config,
        username=settings.ADMIN_USERNAME,
        password=settings.ADMIN_PASSWORD,
        first_name=settings.ADMIN_FIRST_NAME,
        last_name=settings.ADMIN_LAST_NAME,
    )
    ensure_settings_row(db_config)
    if created:
        logger.info("Admin user %s created", settings.ADMIN_USERNAME)
    else:
        logger.info("An admin user already exists, nothing to do")


if __name__ == "__main__":
    main()
