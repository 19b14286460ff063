from __future__ import annotations

from datetime import date, datetime

import pytest

from src.event_points.event_points.core.exceptions import NotFoundError, PolicyDeniedError, ValidationError


def _propose(world, user, **overrides):
    fields = dict(title="Blood drive", description="city hall", point_value=8, event_date="2026-03-12")
    fields.update(overrides)
    return world.container.outside_event_service.create_outside_event(user_id=user.user_id, **fields)


def test_creation_denied_by_policy(world):
    world.set_settings(allow_custom_events=False)
    alice = world.add_user("alice")

    with pytest.raises(PolicyDeniedError):
        _propose(world, alice)
    assert world.store.outside_events == {}


def test_creation_validates_points(world):
    alice = world.add_user("alice")

    with pytest.raises(ValidationError):
        _propose(world, alice, point_value=0)


def test_reject_deletes_then_not_found(world):
    # Scenario E
    alice = world.add_user("alice", push_token="tok-alice")
    event = _propose(world, alice)
    svc = world.container.outside_event_service

    result = svc.decide(outside_event_id=event.outside_event_id, decision="REJECT")

    assert result == {"id": event.outside_event_id, "deleted": True}
    assert event.outside_event_id not in world.store.outside_events
    assert world.dispatcher.titles() == ["Event Rejected"]
    with pytest.raises(NotFoundError):
        svc.decide(outside_event_id=event.outside_event_id, decision="REJECT")


def test_approve_requires_attendance_on_event_day(world):
    alice = world.add_user("alice")
    event = _propose(world, alice)

    with pytest.raises(ValidationError, match="PRESENT"):
        world.container.outside_event_service.decide(outside_event_id=event.outside_event_id, decision="APPROVE")

    assert world.store.outside_events[event.outside_event_id].approved is False
    assert world.user(alice.user_id).points == 0


def test_approve_awards_points_once(world):
    alice = world.add_user("alice", push_token="tok-alice")
    event = _propose(world, alice)
    world.check_in(alice, datetime(2026, 3, 12, 17, 45))
    svc = world.container.outside_event_service

    result = svc.decide(outside_event_id=event.outside_event_id, decision="approve")

    assert result["approved"] is True
    assert world.user(alice.user_id).points == 8
    assert world.dispatcher.titles() == ["Points Awarded!"]

    with pytest.raises(ValidationError, match="already approved"):
        svc.decide(outside_event_id=event.outside_event_id, decision="APPROVE")
    with pytest.raises(ValidationError, match="approved event"):
        svc.delete_unapproved(event.outside_event_id)
    assert world.user(alice.user_id).points == 8


def test_invalid_decision(world):
    with pytest.raises(ValidationError, match="APPROVE or REJECT"):
        world.container.outside_event_service.decide(outside_event_id=1, decision="MAYBE")


def test_summary_and_pending_list(world):
    alice = world.add_user("alice")
    approved = _propose(world, alice, point_value=4)
    _propose(world, alice, title="Pending one", point_value=6)
    world.check_in(alice, datetime(2026, 3, 12, 9, 0))
    svc = world.container.outside_event_service
    svc.decide(outside_event_id=approved.outside_event_id, decision="APPROVE")

    summary = svc.approved_summary(alice.user_id)
    pending = svc.list_unapproved()

    assert summary["totalCount"] == 1
    assert summary["totalPoints"] == 4
    assert [row["title"] for row in pending] == ["Pending one"]
    assert pending[0]["user"]["username"] == "alice"
    assert pending[0]["date"] == date(2026, 3, 12)


def test_delete_unapproved(world):
    alice = world.add_user("alice")
    event = _propose(world, alice)
    svc = world.container.outside_event_service

    svc.delete_unapproved(event.outside_event_id)

    assert world.store.outside_events == {}
    with pytest.raises(NotFoundError):
        svc.delete_unapproved(event.outside_event_id)


def test_creation_denied_without_settings_row(world):
    world.store.settings = None
    alice = world.add_user("alice")

    with pytest.raises(PolicyDeniedError):
        _propose(world, alice)
