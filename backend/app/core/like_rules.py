"""Like Rules — pure decisions of the like/match state machine.

Invariants:
    - Functions are PURE: they inspect edge snapshots and return a decision,
      the shell (MatchEngine) performs every write
    - Allowed transitions: pending -> accepted, pending -> rejected,
      rejected -> rejected, accepted -> rejected (reject has no status guard)
    - Accept only leaves `pending`; every other status is "already processed"
    - A self-like is the only request-shape error decided here

Design Decisions:
    - Request-shape violations raised as domain errors (core/errors.py) rather than
      returned as dicts: the HTTP layer maps them, the engine never inspects them
"""

from enum import Enum

from app.core.domain_types import Edge, EdgeStatus, TransitionKind, UserId
from app.core.errors import ErrorContext, ForbiddenError, InvalidRequestError


class LikeDecision(str, Enum):
    """What like_user must do after reading the pair's current edges."""
    ALREADY_LIKED = "already_liked"
    COMPLETE_MATCH = "complete_match"
    CREATE_PENDING = "create_pending"


def ensure_not_self_like(actor: UserId, target: UserId) -> None:
    """Reject actor == target before any storage access."""
    if actor == target:
        raise InvalidRequestError(
            "Cannot like yourself",
            ErrorContext(user_id=str(actor), target_id=str(target)),
        )


def decide_like(existing: Edge | None, pending_reverse: Edge | None) -> LikeDecision:
    """Pick the like path from the own edge and the pending reverse edge."""
    if existing is not None:
        return LikeDecision.ALREADY_LIKED
    if pending_reverse is not None and pending_reverse.status == EdgeStatus.PENDING:
        return LikeDecision.COMPLETE_MATCH
    return LikeDecision.CREATE_PENDING


def ensure_addressed_to(edge: Edge, acting_user: UserId) -> None:
    """Only the recipient of an edge may accept or reject it."""
    if edge.to_user != acting_user:
        raise ForbiddenError(
            "Like is not addressed to you",
            ErrorContext(user_id=str(acting_user), edge_id=str(edge.id)),
        )


def can_accept(edge: Edge) -> bool:
    return edge.status == EdgeStatus.PENDING


def transition_for_like(is_match: bool) -> TransitionKind:
    return TransitionKind.NEW_MATCH if is_match else TransitionKind.NEW_LIKE


def counterpart_of(edge: Edge, user: UserId) -> UserId:
    """The other user of an edge, seen from `user`."""
    return edge.to_user if edge.from_user == user else edge.from_user


def unique_matches(edges: list[Edge], user: UserId) -> list[Edge]:
    """Keep one accepted edge per counterpart, preserving input order.

    Both edges of a matched pair touch `user`; callers pass edges ordered by
    updated_at descending, so the first occurrence is the most recent.
    """
    seen: set[UserId] = set()
    result: list[Edge] = []
    for edge in edges:
        if edge.status != EdgeStatus.ACCEPTED:
            continue
        other = counterpart_of(edge, user)
        if other in seen:
            continue
        seen.add(other)
        result.append(edge)
    return result
