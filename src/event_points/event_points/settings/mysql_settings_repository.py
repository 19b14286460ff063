from __future__ import annotations

from typing import Optional

from ..database.mysql_base import MySQLRepository, fetchone
from .model import AppSettings
from .repository import SettingsRepository

SETTINGS_ROW_ID = 1


class MySQLSettingsRepository(MySQLRepository, SettingsRepository):
    def get(self) -> Optional[AppSettings]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT auto_approve_points, allow_custom_events, notify_on_event_create, event_reminders
                FROM app_settings
                WHERE setting_id=%s
                """,
                (SETTINGS_ROW_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AppSettings(
                auto_approve_points=bool(r["auto_approve_points"]),
                allow_custom_events=bool(r["allow_custom_events"]),
                notify_on_event_create=bool(r["notify_on_event_create"]),
                event_reminders=bool(r["event_reminders"]),
            )

    def save(self, settings: AppSettings) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO app_settings(
                    setting_id, auto_approve_points, allow_custom_events, notify_on_event_create, event_reminders
                )
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    auto_approve_points=VALUES(auto_approve_points),
                    allow_custom_events=VALUES(allow_custom_events),
                    notify_on_event_create=VALUES(notify_on_event_create),
                    event_reminders=VALUES(event_reminders)
                """,
                (
                    SETTINGS_ROW_ID,
                    int(settings.auto_approve_points),
                    int(settings.allow_custom_events),
                    int(settings.notify_on_event_create),
                    int(settings.event_reminders),
                ),
            )
