from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import event_start, now_utc
from ..core.constants import REMINDER_WINDOW_END_HOURS, REMINDER_WINDOW_START_HOURS
from ..enrollments.repository import EnrollmentRepository
from ..settings.repository import SettingsRepository
from ..settings.service import enforced_settings
from ..users.repository import UserRepository
from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderRunResult:
    events: int = 0
    sent: int = 0
    cleared_tokens: int = 0
    skipped: bool = False


class ReminderService:
    """Hourly sweep: remind enrolled users about events starting in ~24h.

    Each enrollment is reminded at most once (`reminder_sent_at`), so
    overlapping windows of consecutive runs do not repeat a reminder.
    """

    def __init__(
        self,
        enrollments: EnrollmentRepository,
        users: UserRepository,
        settings: SettingsRepository,
        dispatcher: NotificationDispatcher,
        *,
        window_start_hours: int = REMINDER_WINDOW_START_HOURS,
        window_end_hours: int = REMINDER_WINDOW_END_HOURS,
    ):
        self._enrollments = enrollments
        self._users = users
        self._settings = settings
        self._dispatcher = dispatcher
        self._window_start = timedelta(hours=window_start_hours)
        self._window_end = timedelta(hours=window_end_hours)

    def send_event_reminders(self, now: Optional[datetime] = None) -> ReminderRunResult:
        now = now or now_utc()
        settings = enforced_settings(self._settings)
        if not settings.event_reminders:
            logger.info("Event reminders are disabled by the administrator")
            return ReminderRunResult(skipped=True)

        start, end = now + self._window_start, now + self._window_end
        candidates = self._enrollments.list_reminder_candidates(start_date=start.date(), end_date=end.date())

        by_event: "OrderedDict[int, list]" = OrderedDict()
        for c in candidates:
            starts_at = event_start(c.event.event_date, c.event.event_time)
            if starts_at is None:
                logger.warning("Event %s has unparseable time %r, skipped", c.event.event_id, c.event.event_time)
                continue
            if start <= starts_at <= end:
                by_event.setdefault(c.event.event_id, []).append(c)

        if not by_event:
            logger.info("No upcoming events in reminder window")
            return ReminderRunResult()

        logger.info("Found %s event(s) for reminders", len(by_event))
        sent = 0
        cleared = 0
        for group in by_event.values():
            event = group[0].event
            tokens = list(dict.fromkeys(c.push_token for c in group))
            try:
                result = self._dispatcher.send_bulk_push(
                    tokens,
                    "Event Reminder",
                    f'Your event "{event.title}" starts tomorrow at {event.event_time}! Don\'t miss it.',
                    {"eventType": "event_reminder", "eventId": str(event.event_id)},
                )
            except Exception:
                # Not marked: the next run retries this event.
                logger.exception("Reminder dispatch failed for event %s", event.event_id)
                continue

            failed = set(result.failed_tokens)
            if failed:
                cleared += self._users.clear_push_tokens(failed)
                logger.info("Cleaned %s invalid push tokens", len(failed))

            delivered = [c.enrollment_id for c in group if c.push_token not in failed]
            self._enrollments.mark_reminded(delivered, at=now)
            sent += result.success_count

        return ReminderRunResult(events=len(by_event), sent=sent, cleared_tokens=cleared)
