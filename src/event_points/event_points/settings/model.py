from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppSettings:
    """Global admin policy switches (a single row)."""

    auto_approve_points: bool = True
    allow_custom_events: bool = True
    notify_on_event_create: bool = True
    event_reminders: bool = True

    def to_dict(self) -> dict:
        return {
            "adminAutoApprovePoint": self.auto_approve_points,
            "adminAllowCustomPoint": self.allow_custom_events,
            "adminCreateEventNotify": self.notify_on_event_create,
            "adminEventReminders": self.event_reminders,
        }


# Used by enforcement paths when the settings row is missing.
MISSING_ROW_POLICY = AppSettings(auto_approve_points=False, allow_custom_events=False, notify_on_event_create=False)


SETTINGS_FIELDS = {
    "auto_approve_points": ("adminAutoApprovePoint", "auto_approve_points"),
    "allow_custom_events": ("adminAllowCustomPoint", "allow_custom_events"),
    "notify_on_event_create": ("adminCreateEventNotify", "notify_on_event_create"),
    "event_reminders": ("adminEventReminders", "event_reminders"),
}
