"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - EdgeRepository.create_edge raises DuplicateEdgeError when the ordered
      pair already exists; the check lives in storage, never in the caller

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO
"""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from app.core.domain_types import (
    Edge, EdgeId, EdgeStatus, Profile, TransitionEvent, UserId,
)


class EdgeRepository(Protocol):
    """Contract for like edge persistence (the relationship store)."""
    def transaction(self) -> AbstractAsyncContextManager[None]: ...
    async def create_edge(
        self, from_user: UserId, to_user: UserId, status: EdgeStatus,
    ) -> Edge: ...
    async def find_edge(self, from_user: UserId, to_user: UserId) -> Edge | None: ...
    async def find_by_id(self, edge_id: EdgeId) -> Edge | None: ...
    async def find_pending_reverse(
        self, from_user: UserId, to_user: UserId,
    ) -> Edge | None: ...
    async def set_status(
        self,
        edge_id: EdgeId,
        status: EdgeStatus,
        expected_prior_status: EdgeStatus | None = None,
    ) -> bool: ...
    async def upsert_accepted(self, from_user: UserId, to_user: UserId) -> None: ...
    async def list_incoming_pending(self, user: UserId) -> list[Edge]: ...
    async def list_outgoing(self, user: UserId) -> list[Edge]: ...
    async def list_accepted(self, user: UserId) -> list[Edge]: ...
    async def count_incoming_pending(self, user: UserId) -> int: ...


class ProfileDirectory(Protocol):
    """Read-only contract for the external profile service."""
    async def get(self, user_id: UserId) -> Profile | None: ...
    async def get_many(self, user_ids: list[UserId]) -> dict[UserId, Profile]: ...


class PushSender(Protocol):
    """Contract for the push delivery collaborator."""
    async def deliver(self, recipient: UserId, notification: dict) -> bool: ...


class RealtimeEmitter(Protocol):
    """Contract for the realtime transport collaborator."""
    async def emit(self, user_id: UserId, event: str, payload: dict) -> int: ...


class TransitionSink(Protocol):
    """Where MatchEngine hands transitions; must never block or raise."""
    def submit(self, event: TransitionEvent) -> bool: ...
