from __future__ import annotations

from datetime import date, datetime

import pytest

from src.event_points.event_points.core.enums import EventType
from src.event_points.event_points.core.exceptions import NotFoundError, ValidationError


def _create(world, **overrides):
    fields = dict(
        title="Tree planting",
        description="north park",
        point_value=12,
        event_date="2026-04-02",
        event_time="9:30 AM",
        max_student=20,
    )
    fields.update(overrides)
    return world.container.event_service.create_event(**fields)


def test_create_event_notifies_opted_in_users(world):
    world.add_user("alice", push_token="tok-alice")
    world.add_user("bob", push_token="tok-bob", new_event_notify=False)
    world.add_user("carol", push_token="tok-carol", is_active=False)
    world.add_user("dave")

    event = _create(world)

    assert event.event_type == EventType.INSIDE
    assert event.event_date == date(2026, 4, 2)
    assert [(token, title) for token, title, _, _ in world.dispatcher.sent] == [("tok-alice", "New Event Created!")]
    assert world.dispatcher.sent[0][3] == {"eventType": "new_event", "eventId": str(event.event_id)}


def test_create_event_silent_when_policy_off(world):
    world.set_settings(notify_on_event_create=False)
    world.add_user("alice", push_token="tok-alice")

    _create(world)

    assert world.dispatcher.sent == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "  "},
        {"point_value": -1},
        {"max_student": 0},
        {"event_date": "02/04/2026"},
        {"event_time": "soon"},
        {"event_type": "ONLINE"},
    ],
)
def test_create_event_validation(world, overrides):
    with pytest.raises(ValidationError):
        _create(world, **overrides)
    assert world.store.events == {}


def test_update_event_partial(world):
    event = _create(world)

    updated = world.container.event_service.update_event(event.event_id, {"title": "Tree planting II", "point_value": 15})

    assert updated.title == "Tree planting II"
    assert updated.point_value == 15
    assert updated.max_student == 20


def test_update_cannot_shrink_below_enrolled(world):
    event = world.add_event(max_student=5, student_enrolled=3)

    with pytest.raises(ValidationError, match="already enrolled"):
        world.container.event_service.update_event(event.event_id, {"max_student": 2})

    updated = world.container.event_service.update_event(event.event_id, {"max_student": 3})
    assert updated.max_student == 3


def test_update_missing_event(world):
    with pytest.raises(NotFoundError):
        world.container.event_service.update_event(404, {"title": "x"})


def test_update_requires_fields(world):
    event = _create(world)

    with pytest.raises(ValidationError, match="No valid fields"):
        world.container.event_service.update_event(event.event_id, {})


def test_delete_event_cascades_enrollments(world):
    event = world.add_event()
    alice = world.add_user("alice")
    world.enroll(alice, event)

    world.container.event_service.delete_event(event.event_id)

    assert world.store.events == {}
    assert world.store.enrollments == {}
    with pytest.raises(NotFoundError):
        world.container.event_service.delete_event(event.event_id)


def test_get_event_includes_enrollments(world):
    event = world.add_event()
    alice = world.add_user("alice")
    world.enroll(alice, event)

    row = world.container.event_service.get_event(event.event_id)

    assert row["studentEnrolled"] == 1
    assert [e["user"]["username"] for e in row["enrolled"]] == ["alice"]


def test_upcoming_marks_enrolled(world):
    past = world.add_event(title="past", event_date=date(2026, 2, 1))
    today = world.add_event(title="today", event_date=date(2026, 3, 1))
    later = world.add_event(title="later", event_date=date(2026, 3, 20))
    alice = world.add_user("alice")
    world.enroll(alice, later)

    rows = world.container.event_service.list_upcoming(alice.user_id, today=date(2026, 3, 1))

    assert [(r["title"], r["enrolled"]) for r in rows] == [("today", False), ("later", True)]
    assert past.event_id not in {r["id"] for r in rows}
    assert today.event_id in {r["id"] for r in rows}


def test_attended_and_joined_stats(world):
    first = world.add_event(title="first", point_value=10, event_date=date(2026, 3, 10))
    second = world.add_event(title="second", point_value=7, event_date=date(2026, 3, 11))
    alice = world.add_user("alice")
    e1 = world.enroll(alice, first)
    world.enroll(alice, second)
    world.check_in(alice, datetime(2026, 3, 10, 8, 0))
    world.container.enrollment_service.update_status(enrollment_id=e1.enrollment_id, status="ATTENDED")
    svc = world.container.event_service

    attended = svc.attended_with_stats(alice.user_id)
    joined = svc.joined_with_stats(alice.user_id)

    assert attended["totalAttended"] == 1
    assert attended["totalPoints"] == 10
    assert joined["totalJoin"] == 1
    assert joined["joinedEvents"][0]["event"]["title"] == "second"
    with pytest.raises(NotFoundError):
        svc.attended_with_stats(999)


def test_create_event_silent_without_settings_row(world):
    world.store.settings = None
    world.add_user("alice", push_token="tok-alice")

    _create(world)

    assert world.dispatcher.sent == []


def test_create_event_accepts_datetime_as_date(world):
    event = _create(world, event_date=datetime(2026, 4, 2, 15, 45))

    assert event.event_date == date(2026, 4, 2)
    assert type(event.event_date) is date
