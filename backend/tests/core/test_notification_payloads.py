"""Notification Payloads — tests for pure push/realtime payload builders.

Tests cover:
    - push payload carries liker id, name and photo as strings
    - a match produced by a like pushes exactly the new-like notification
    - realtime payload shape {fromUser, isMatch}
    - plan_deliveries skips push only for matches produced by accept
"""

import uuid

import pytest

from app.core.domain_types import (
    Profile, TransitionEvent, TransitionKind, TransitionOrigin, UserId,
)
from app.core.notification_payloads import (
    LIKE_BODY,
    LIKE_TITLE,
    REALTIME_EVENT_NEW_LIKE,
    build_push_notification,
    build_realtime_payload,
    plan_deliveries,
)

ACTOR = Profile(id=UserId(uuid.uuid4()), name="Alice", photo_ref="photos/a.jpg")


def test_push_for_like_carries_liker():
    push = build_push_notification(ACTOR)

    assert push["title"] == LIKE_TITLE
    assert push["body"] == LIKE_BODY
    assert push["data"] == {
        "type": "new_like",
        "likerId": str(ACTOR.id),
        "likerName": "Alice",
        "likerPhoto": "photos/a.jpg",
    }
    assert push["android"] == {"priority": "high", "channel_id": "likes"}


def test_push_channel_id_is_configurable():
    push = build_push_notification(ACTOR, channel_id="matches")

    assert push["android"]["channel_id"] == "matches"


def test_match_from_like_pushes_the_new_like_notification():
    def event(kind):
        return TransitionEvent(
            kind=kind, origin=TransitionOrigin.LIKE, actor=ACTOR,
            recipient=UserId(uuid.uuid4()),
        )

    like = plan_deliveries(event(TransitionKind.NEW_LIKE))
    match = plan_deliveries(event(TransitionKind.NEW_MATCH))

    assert match.push == like.push
    assert match.push["data"]["type"] == "new_like"
    assert match.push["title"] == LIKE_TITLE


def test_push_data_values_are_strings_without_profile():
    bare = Profile(id=UserId(uuid.uuid4()))

    data = build_push_notification(bare)["data"]

    assert all(isinstance(v, str) for v in data.values())
    assert data["likerPhoto"] == ""


def test_realtime_payload_shape():
    assert build_realtime_payload(ACTOR, True) == {
        "fromUser": {"id": str(ACTOR.id), "name": "Alice"},
        "isMatch": True,
    }


@pytest.mark.parametrize("kind,origin,wants_push,is_match", [
    (TransitionKind.NEW_LIKE, TransitionOrigin.LIKE, True, False),
    (TransitionKind.NEW_MATCH, TransitionOrigin.LIKE, True, True),
    (TransitionKind.NEW_MATCH, TransitionOrigin.ACCEPT, False, True),
])
def test_plan_deliveries(kind, origin, wants_push, is_match):
    event = TransitionEvent(
        kind=kind, origin=origin, actor=ACTOR, recipient=UserId(uuid.uuid4()),
    )

    plan = plan_deliveries(event)

    assert (plan.push is not None) is wants_push
    assert plan.realtime_event == REALTIME_EVENT_NEW_LIKE
    assert plan.realtime_payload["isMatch"] is is_match
