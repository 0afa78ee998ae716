"""Likes Routes — HTTP surface of the like/match state machine and its projections.

Invariants:
    - Every endpoint requires an AuthenticatedIdentity
    - Malformed UUID path parameters fail validation (400) before storage access
    - Routes hold no business logic: MatchEngine for writes, QueryService for reads
    - A new like answers 201, an idempotent repeat 200 with an identical body
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_identity, get_match_engine, get_query_service
from app.core.domain_types import AuthenticatedIdentity, EdgeId, UserId
from app.schemas.likes import (
    CountResponse, IncomingLikeOut, IncomingLikesResponse, LikeResponse,
    MatchesResponse, MatchOut, OutgoingLikeOut, OutgoingLikesResponse,
    ProfileOut, RejectResponse,
)
from app.services.match_engine import MatchEngine
from app.services.query_service import QueryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/likes", tags=["likes"])


@router.get("/incoming", response_model=IncomingLikesResponse)
async def incoming_likes(
    identity: AuthenticatedIdentity = Depends(get_identity),
    queries: QueryService = Depends(get_query_service),
):
    """Pending likes addressed to the caller, newest first."""
    entries = await queries.incoming(identity.user_id)
    logger.info(
        f"Incoming likes: {len(entries)}", extra={"user_id": str(identity.user_id)},
    )
    return IncomingLikesResponse(likes=[IncomingLikeOut.from_entry(e) for e in entries])


@router.get("/outgoing", response_model=OutgoingLikesResponse)
async def outgoing_likes(
    identity: AuthenticatedIdentity = Depends(get_identity),
    queries: QueryService = Depends(get_query_service),
):
    """Likes the caller sent, any status, newest first."""
    entries = await queries.outgoing(identity.user_id)
    return OutgoingLikesResponse(likes=[OutgoingLikeOut.from_entry(e) for e in entries])


@router.get("/matches", response_model=MatchesResponse)
async def matches(
    identity: AuthenticatedIdentity = Depends(get_identity),
    queries: QueryService = Depends(get_query_service),
):
    """Mutual likes, most recently matched first."""
    entries = await queries.matches(identity.user_id)
    return MatchesResponse(matches=[MatchOut.from_entry(e) for e in entries])


@router.get("/count", response_model=CountResponse)
async def pending_count(
    identity: AuthenticatedIdentity = Depends(get_identity),
    queries: QueryService = Depends(get_query_service),
):
    return CountResponse(count=await queries.pending_incoming_count(identity.user_id))


@router.post("/{user_id}", response_model=LikeResponse)
async def like_user(
    user_id: UUID,
    response: Response,
    identity: AuthenticatedIdentity = Depends(get_identity),
    engine: MatchEngine = Depends(get_match_engine),
):
    """Like a user; reports whether the like completed a match."""
    outcome = await engine.like_user(identity.user_id, UserId(user_id))
    response.status_code = (
        status.HTTP_201_CREATED if outcome.created else status.HTTP_200_OK
    )
    return LikeResponse(
        is_match=outcome.is_match,
        matched_user=ProfileOut.from_profile(outcome.matched_user),
    )


@router.post("/{like_id}/accept", response_model=LikeResponse)
async def accept_like(
    like_id: UUID,
    identity: AuthenticatedIdentity = Depends(get_identity),
    engine: MatchEngine = Depends(get_match_engine),
):
    outcome = await engine.accept_like(identity.user_id, EdgeId(like_id))
    if outcome.already_processed:
        return LikeResponse(is_match=outcome.is_match, message="Already processed")
    return LikeResponse(
        is_match=True, matched_user=ProfileOut.from_profile(outcome.matched_user),
    )


@router.post("/{like_id}/reject", response_model=RejectResponse)
async def reject_like(
    like_id: UUID,
    identity: AuthenticatedIdentity = Depends(get_identity),
    engine: MatchEngine = Depends(get_match_engine),
):
    await engine.reject_like(identity.user_id, EdgeId(like_id))
    return RejectResponse()
