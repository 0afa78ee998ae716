"""Match Engine — the like/match state machine over the relationship store.

Invariants:
    - like_user never creates a second edge for an ordered pair; a repeat like
      returns the current state without mutating it
    - DuplicateEdgeError from storage is always "someone already created this
      edge": the engine re-reads and answers idempotently
    - Both writes of a match (reverse/own on like, own/mirror on accept) run
      inside one store.transaction(); a failing second write rolls back the first
    - After creating a pending edge, like_user re-checks for a pending reverse
      edge and promotes both to accepted with status-guarded updates, so two
      users liking each other at the same moment still end up matched; the
      pair is updated in edge-id order so two reconcilers never deadlock
    - accept_like only leaves `pending`; reject_like has no status guard
    - Notifications are submitted after the commit and never fail the action

Design Decisions:
    - Decisions delegated to core/like_rules.py; this class only sequences IO
    - Actor profile resolved here so the dispatcher stays DB-free
"""

import logging
from dataclasses import dataclass

from app.core.domain_types import (
    Edge, EdgeId, EdgeStatus, Profile, TransitionEvent, TransitionKind,
    TransitionOrigin, UserId,
)
from app.core.errors import (
    DatabaseError, DuplicateEdgeError, ErrorContext, ResourceNotFoundError,
)
from app.core.like_rules import (
    LikeDecision, can_accept, decide_like, ensure_addressed_to,
    ensure_not_self_like, transition_for_like,
)
from app.core.repository_protocols import (
    EdgeRepository, ProfileDirectory, TransitionSink,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LikeOutcome:
    edge: Edge
    is_match: bool
    created: bool
    matched_user: Profile | None = None


@dataclass(frozen=True)
class AcceptOutcome:
    edge: Edge
    is_match: bool
    already_processed: bool
    matched_user: Profile | None = None


class _PairChanged(Exception):
    """A status guard missed while promoting crossed likes; roll back."""


class MatchEngine:
    """Creates edges, detects mutual likes, and performs accept/reject."""

    def __init__(
        self,
        store: EdgeRepository,
        profiles: ProfileDirectory,
        sink: TransitionSink,
    ):
        self._store = store
        self._profiles = profiles
        self._sink = sink

    # ─── like ────────────────────────────────────────────────────

    async def like_user(self, actor: UserId, target: UserId) -> LikeOutcome:
        ensure_not_self_like(actor, target)
        target_profile = await self._profiles.get(target)
        if target_profile is None:
            raise ResourceNotFoundError(
                "User", str(target),
                ErrorContext(user_id=str(actor), target_id=str(target)),
            )

        existing = await self._store.find_edge(actor, target)
        pending_reverse = (
            None if existing
            else await self._store.find_pending_reverse(actor, target)
        )
        decision = decide_like(existing, pending_reverse)

        if decision == LikeDecision.ALREADY_LIKED:
            logger.info(
                "Already liked",
                extra={"user_id": str(actor), "target_id": str(target)},
            )
            return self._repeat(existing, target_profile)

        try:
            if decision == LikeDecision.COMPLETE_MATCH:
                edge = await self._complete_match(actor, target, pending_reverse)
            else:
                edge = await self._create_pending(actor, target)
        except DuplicateEdgeError:
            return await self._converge(actor, target, target_profile)

        logger.info(
            f"Like stored, isMatch: {edge.is_match}",
            extra={
                "user_id": str(actor), "target_id": str(target),
                "edge_id": str(edge.id),
            },
        )
        await self._notify(
            transition_for_like(edge.is_match), TransitionOrigin.LIKE,
            actor, target,
        )
        return LikeOutcome(
            edge=edge,
            is_match=edge.is_match,
            created=True,
            matched_user=target_profile if edge.is_match else None,
        )

    async def _complete_match(
        self, actor: UserId, target: UserId, reverse: Edge,
    ) -> Edge:
        """Accept the pending reverse edge and create ours as accepted, atomically."""
        async with self._store.transaction():
            promoted = await self._store.set_status(
                reverse.id, EdgeStatus.ACCEPTED,
                expected_prior_status=EdgeStatus.PENDING,
            )
            # Reverse edge changed since we read it: fall back to a plain like.
            status = EdgeStatus.ACCEPTED if promoted else EdgeStatus.PENDING
            return await self._store.create_edge(actor, target, status)

    async def _create_pending(self, actor: UserId, target: UserId) -> Edge:
        async with self._store.transaction():
            edge = await self._store.create_edge(actor, target, EdgeStatus.PENDING)

        reverse = await self._store.find_pending_reverse(actor, target)
        if reverse is None:
            return edge

        # Crossed likes: both sides inserted pending without seeing each other.
        # Rows are updated in id order so concurrent reconcilers lock alike.
        try:
            async with self._store.transaction():
                for edge_id in sorted((edge.id, reverse.id)):
                    if not await self._store.set_status(
                        edge_id, EdgeStatus.ACCEPTED,
                        expected_prior_status=EdgeStatus.PENDING,
                    ):
                        raise _PairChanged()
            logger.info(
                "Crossed likes promoted to match",
                extra={"user_id": str(actor), "target_id": str(target)},
            )
        except _PairChanged:
            logger.info(
                "Crossed likes already reconciled",
                extra={"user_id": str(actor), "target_id": str(target)},
            )
        return await self._reread(actor, target)

    async def _converge(
        self, actor: UserId, target: UserId, target_profile: Profile,
    ) -> LikeOutcome:
        """A concurrent like won the insert; answer with its state."""
        edge = await self._reread(actor, target)
        logger.info(
            "Concurrent like resolved idempotently",
            extra={"user_id": str(actor), "target_id": str(target)},
        )
        return self._repeat(edge, target_profile)

    async def _reread(self, actor: UserId, target: UserId) -> Edge:
        edge = await self._store.find_edge(actor, target)
        if edge is None:
            raise DatabaseError(
                "edge missing after write", "read",
                ErrorContext(user_id=str(actor), target_id=str(target)),
            )
        return edge

    @staticmethod
    def _repeat(edge: Edge, target_profile: Profile) -> LikeOutcome:
        return LikeOutcome(
            edge=edge,
            is_match=edge.is_match,
            created=False,
            matched_user=target_profile if edge.is_match else None,
        )

    # ─── accept / reject ─────────────────────────────────────────

    async def accept_like(self, acting_user: UserId, edge_id: EdgeId) -> AcceptOutcome:
        edge = await self._load_addressed(acting_user, edge_id)
        if not can_accept(edge):
            return AcceptOutcome(edge=edge, is_match=edge.is_match, already_processed=True)

        async with self._store.transaction():
            accepted = await self._store.set_status(
                edge.id, EdgeStatus.ACCEPTED,
                expected_prior_status=EdgeStatus.PENDING,
            )
            if accepted:
                await self._store.upsert_accepted(acting_user, edge.from_user)

        if not accepted:
            current = await self._store.find_by_id(edge.id) or edge
            return AcceptOutcome(
                edge=current, is_match=current.is_match, already_processed=True,
            )

        logger.info(
            "Like accepted",
            extra={
                "user_id": str(acting_user), "target_id": str(edge.from_user),
                "edge_id": str(edge.id),
            },
        )
        matched_user = await self._profiles.get(edge.from_user)
        await self._notify(
            TransitionKind.NEW_MATCH, TransitionOrigin.ACCEPT,
            acting_user, edge.from_user,
        )
        current = await self._store.find_by_id(edge.id) or edge
        return AcceptOutcome(
            edge=current, is_match=True, already_processed=False,
            matched_user=matched_user,
        )

    async def reject_like(self, acting_user: UserId, edge_id: EdgeId) -> None:
        edge = await self._load_addressed(acting_user, edge_id)
        if edge.status == EdgeStatus.ACCEPTED:
            # The mirror edge stays accepted.
            logger.warning(
                "Rejecting an accepted like",
                extra={"user_id": str(acting_user), "edge_id": str(edge.id)},
            )
        async with self._store.transaction():
            await self._store.set_status(edge.id, EdgeStatus.REJECTED)
        logger.info(
            "Like rejected",
            extra={"user_id": str(acting_user), "edge_id": str(edge.id)},
        )

    async def _load_addressed(self, acting_user: UserId, edge_id: EdgeId) -> Edge:
        edge = await self._store.find_by_id(edge_id)
        if edge is None:
            raise ResourceNotFoundError(
                "Like", str(edge_id), ErrorContext(user_id=str(acting_user)),
            )
        ensure_addressed_to(edge, acting_user)
        return edge

    # ─── notifications ───────────────────────────────────────────

    async def _notify(
        self,
        kind: TransitionKind,
        origin: TransitionOrigin,
        actor: UserId,
        recipient: UserId,
    ) -> None:
        try:
            actor_profile = await self._profiles.get(actor) or Profile(id=actor)
            self._sink.submit(TransitionEvent(
                kind=kind, origin=origin, actor=actor_profile, recipient=recipient,
            ))
        except Exception as e:
            logger.error(
                f"Failed to hand off {kind.value} notification: {e}",
                exc_info=True,
                extra={"user_id": str(actor), "target_id": str(recipient)},
            )
