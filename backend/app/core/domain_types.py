"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, EdgeId wrap UUIDs — never use bare UUID in domain logic
    - Edge status and transition kinds encoded as Enums — no raw string matching
    - AuthenticatedIdentity is the only shape of caller identity core/services accept

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB status column without custom encoders
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
EdgeId = NewType("EdgeId", UUID)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Caller identity already validated by the upstream auth layer."""
    user_id: UserId


# ─── Enums ───────────────────────────────────────────────────────

class EdgeStatus(str, Enum):
    """Like edge lifecycle — maps to DB `status` column."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TransitionKind(str, Enum):
    """State transitions that fan out notifications."""
    NEW_LIKE = "new_like"
    NEW_MATCH = "new_match"


class TransitionOrigin(str, Enum):
    """Which engine operation produced a transition."""
    LIKE = "like"
    ACCEPT = "accept"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Edge:
    """Detached snapshot of a persisted like edge."""
    id: EdgeId
    from_user: UserId
    to_user: UserId
    status: EdgeStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_match(self) -> bool:
        return self.status == EdgeStatus.ACCEPTED


@dataclass(frozen=True)
class Profile:
    """Public profile projection supplied by the profile directory."""
    id: UserId
    name: str = ""
    age: int | None = None
    photo_ref: str | None = None
    location: str | None = None
    is_online: bool = False


@dataclass(frozen=True)
class TransitionEvent:
    """A state transition handed from MatchEngine to the dispatcher.

    The actor profile is resolved by the engine so the dispatcher never
    needs a database session.
    """
    kind: TransitionKind
    origin: TransitionOrigin
    actor: Profile
    recipient: UserId
