from __future__ import annotations

from datetime import date, datetime

from src.event_points.event_points.core.enums import EnrollmentStatus

NOW = datetime(2026, 3, 9, 10, 0)
TOMORROW = date(2026, 3, 10)


def _sweep(world, now=NOW):
    return world.container.reminder_service.send_event_reminders(now)


def test_reminds_enrolled_users_inside_window(world):
    soon = world.add_event(title="soon", event_date=TOMORROW, event_time="10:30")
    too_late = world.add_event(title="too late", event_date=TOMORROW, event_time="11:30")
    alice = world.add_user("alice", push_token="tok-alice")
    bob = world.add_user("bob", push_token="tok-bob")
    world.enroll(alice, soon)
    world.enroll(bob, too_late)

    result = _sweep(world)

    assert result.events == 1
    assert result.sent == 1
    assert [(token, title) for token, title, _, _ in world.dispatcher.sent] == [("tok-alice", "Event Reminder")]
    assert world.dispatcher.sent[0][3] == {"eventType": "event_reminder", "eventId": str(soon.event_id)}


def test_reminder_is_sent_at_most_once(world):
    event = world.add_event(event_date=TOMORROW, event_time="10:30")
    alice = world.add_user("alice", push_token="tok-alice")
    enrollment = world.enroll(alice, event)

    _sweep(world)
    second = _sweep(world, now=datetime(2026, 3, 9, 11, 0))

    assert len(world.dispatcher.sent) == 1
    assert second.sent == 0
    assert world.enrollment(enrollment.enrollment_id).reminder_sent_at == NOW


def test_skips_opted_out_inactive_and_tokenless_users(world):
    event = world.add_event(event_date=TOMORROW, event_time="10:00 AM")
    users = [
        world.add_user("optout", push_token="tok-1", reminder_notify=False),
        world.add_user("inactive", push_token="tok-2", is_active=False),
        world.add_user("notoken"),
    ]
    for user in users:
        world.enroll(user, event)

    result = _sweep(world)

    assert result.events == 0
    assert world.dispatcher.sent == []


def test_rejected_enrollment_gets_no_reminder(world):
    event = world.add_event(event_date=TOMORROW, event_time="10:00")
    alice = world.add_user("alice", push_token="tok-alice")
    enrollment = world.enroll(alice, event)
    world.container.enrollment_service.update_status(enrollment_id=enrollment.enrollment_id, status="REJECTED")

    _sweep(world)

    assert world.enrollment(enrollment.enrollment_id).status == EnrollmentStatus.REJECTED
    assert world.dispatcher.sent == []


def test_invalid_tokens_are_cleared(world):
    event = world.add_event(event_date=TOMORROW, event_time="10:00")
    alice = world.add_user("alice", push_token="tok-alice")
    bob = world.add_user("bob", push_token="tok-stale")
    world.enroll(alice, event)
    world.enroll(bob, event)
    world.dispatcher.invalid_tokens.add("tok-stale")

    result = _sweep(world)

    assert result.sent == 1
    assert result.cleared_tokens == 1
    assert world.user(bob.user_id).push_token is None
    assert world.user(alice.user_id).push_token == "tok-alice"


def test_unparseable_time_is_skipped(world):
    event = world.add_event(event_date=TOMORROW, event_time="after lunch")
    alice = world.add_user("alice", push_token="tok-alice")
    world.enroll(alice, event)

    result = _sweep(world)

    assert result.events == 0
    assert world.dispatcher.sent == []


def test_disabled_by_admin(world):
    world.set_settings(event_reminders=False)
    event = world.add_event(event_date=TOMORROW, event_time="10:00")
    alice = world.add_user("alice", push_token="tok-alice")
    world.enroll(alice, event)

    result = _sweep(world)

    assert result.skipped is True
    assert world.dispatcher.sent == []
