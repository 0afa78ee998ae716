"""Notification Payloads — pure builders for push and realtime messages.

Invariants:
    - new_like  -> push to recipient + realtime `new_like` with isMatch=false
    - new_match -> realtime `new_like` with isMatch=true; when the match was
      produced by like_user the recipient also gets the very same new-like
      push (accept_like sends realtime only)
    - Push `data` values are strings (push providers reject non-string data)

Design Decisions:
    - plan_deliveries returns a plain description; the dispatcher performs IO
"""

from dataclasses import dataclass

from app.core.domain_types import (
    Profile, TransitionEvent, TransitionKind, TransitionOrigin,
)

REALTIME_EVENT_NEW_LIKE = "new_like"
PUSH_TYPE_NEW_LIKE = "new_like"

LIKE_TITLE = "New like ❤️"
LIKE_BODY = "Someone liked you"


@dataclass(frozen=True)
class DeliveryPlan:
    """What the dispatcher must send for one transition."""
    push: dict | None
    realtime_event: str
    realtime_payload: dict


def build_push_notification(actor: Profile, channel_id: str = "likes") -> dict:
    """New-like push; data carries the liker's id, name and photo key."""
    return {
        "title": LIKE_TITLE,
        "body": LIKE_BODY,
        "data": {
            "type": PUSH_TYPE_NEW_LIKE,
            "likerId": str(actor.id),
            "likerName": actor.name or "",
            "likerPhoto": actor.photo_ref or "",
        },
        "android": {
            "priority": "high",
            "channel_id": channel_id,
        },
        "apns": {"sound": "default", "badge": 1},
    }


def build_realtime_payload(actor: Profile, is_match: bool) -> dict:
    return {
        "fromUser": {"id": str(actor.id), "name": actor.name or ""},
        "isMatch": is_match,
    }


def plan_deliveries(event: TransitionEvent, channel_id: str = "likes") -> DeliveryPlan:
    """Translate a transition into the push/realtime sends it requires."""
    is_match = event.kind == TransitionKind.NEW_MATCH
    wants_push = not is_match or event.origin == TransitionOrigin.LIKE
    return DeliveryPlan(
        push=(
            build_push_notification(event.actor, channel_id)
            if wants_push else None
        ),
        realtime_event=REALTIME_EVENT_NEW_LIKE,
        realtime_payload=build_realtime_payload(event.actor, is_match),
    )
