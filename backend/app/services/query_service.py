"""Query Service — read-only projections over the relationship store.

Invariants:
    - Never writes; bypasses MatchEngine entirely
    - Entries whose counterpart no longer resolves to a profile are dropped
    - matches() lists each matched user exactly once (most recent edge wins)
"""

from dataclasses import dataclass
from datetime import datetime

from app.core.domain_types import Edge, EdgeId, EdgeStatus, Profile, UserId
from app.core.like_rules import counterpart_of, unique_matches
from app.core.repository_protocols import EdgeRepository, ProfileDirectory


@dataclass(frozen=True)
class IncomingLike:
    id: EdgeId
    from_user: Profile
    created_at: datetime


@dataclass(frozen=True)
class OutgoingLike:
    id: EdgeId
    to_user: Profile
    status: EdgeStatus
    created_at: datetime


@dataclass(frozen=True)
class MatchEntry:
    id: EdgeId
    other_user: Profile
    matched_at: datetime


class QueryService:
    """Incoming, outgoing, matches and pending count for one user."""

    def __init__(self, store: EdgeRepository, profiles: ProfileDirectory):
        self._store = store
        self._profiles = profiles

    async def incoming(self, user: UserId) -> list[IncomingLike]:
        edges = await self._store.list_incoming_pending(user)
        profiles = await self._resolve([e.from_user for e in edges])
        return [
            IncomingLike(id=e.id, from_user=profiles[e.from_user], created_at=e.created_at)
            for e in edges if e.from_user in profiles
        ]

    async def outgoing(self, user: UserId) -> list[OutgoingLike]:
        edges = await self._store.list_outgoing(user)
        profiles = await self._resolve([e.to_user for e in edges])
        return [
            OutgoingLike(
                id=e.id, to_user=profiles[e.to_user],
                status=e.status, created_at=e.created_at,
            )
            for e in edges if e.to_user in profiles
        ]

    async def matches(self, user: UserId) -> list[MatchEntry]:
        edges: list[Edge] = unique_matches(await self._store.list_accepted(user), user)
        profiles = await self._resolve([counterpart_of(e, user) for e in edges])
        entries = []
        for e in edges:
            other = profiles.get(counterpart_of(e, user))
            if other is not None:
                entries.append(MatchEntry(id=e.id, other_user=other, matched_at=e.updated_at))
        return entries

    async def pending_incoming_count(self, user: UserId) -> int:
        return await self._store.count_incoming_pending(user)

    async def _resolve(self, user_ids: list[UserId]) -> dict[UserId, Profile]:
        return await self._profiles.get_many(list(dict.fromkeys(user_ids)))
