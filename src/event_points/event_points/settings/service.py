from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..core.exceptions import ValidationError
from .model import MISSING_ROW_POLICY, AppSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def effective_settings(repo: SettingsRepository) -> AppSettings:
    """Stored switches, or the defaults (everything on) when no row exists."""
    return repo.get() or AppSettings()


def enforced_settings(repo: SettingsRepository) -> AppSettings:
    """Switches that gate behavior. A missing row disables the opt-in policies."""
    return repo.get() or MISSING_ROW_POLICY


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get_settings(self) -> AppSettings:
        return effective_settings(self._settings)

    def update_settings(
        self,
        *,
        auto_approve_points: Optional[bool] = None,
        allow_custom_events: Optional[bool] = None,
        notify_on_event_create: Optional[bool] = None,
        event_reminders: Optional[bool] = None,
    ) -> AppSettings:
        changes = {
            k: v
            for k, v in (
                ("auto_approve_points", auto_approve_points),
                ("allow_custom_events", allow_custom_events),
                ("notify_on_event_create", notify_on_event_create),
                ("event_reminders", event_reminders),
            )
            if v is not None
        }
        if not changes:
            raise ValidationError("No valid fields provided for update")

        updated = replace(self.get_settings(), **changes)
        self._settings.save(updated)
        logger.info("Admin settings updated: %s", changes)
        return updated
