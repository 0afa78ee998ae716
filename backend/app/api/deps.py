"""API Dependencies — identity resolution and per-request service wiring.

Invariants:
    - Identity comes only from the header set by the upstream auth layer;
      missing or non-UUID values raise UnauthorizedError before storage is touched
    - Store and profile directory share the request's DB session
    - Dispatcher and realtime hub are process-wide, created in the lifespan
      and read from app.state
"""

from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.domain_types import AuthenticatedIdentity, UserId
from app.core.errors import UnauthorizedError
from app.core.repository_protocols import TransitionSink
from app.infrastructure.database import get_db
from app.infrastructure.edge_store import SqlEdgeStore
from app.infrastructure.profile_directory import SqlProfileDirectory
from app.services.match_engine import MatchEngine
from app.services.query_service import QueryService


def resolve_identity(raw: str | None) -> AuthenticatedIdentity:
    """Turn the upstream identity header value into an AuthenticatedIdentity."""
    if not raw or not raw.strip():
        raise UnauthorizedError("Missing caller identity")
    try:
        return AuthenticatedIdentity(user_id=UserId(UUID(raw.strip())))
    except ValueError:
        raise UnauthorizedError("Invalid caller identity")


async def get_identity(request: Request) -> AuthenticatedIdentity:
    return resolve_identity(request.headers.get(get_settings().identity_header))


def get_edge_store(db: AsyncSession = Depends(get_db)) -> SqlEdgeStore:
    return SqlEdgeStore(db)


def get_profile_directory(db: AsyncSession = Depends(get_db)) -> SqlProfileDirectory:
    return SqlProfileDirectory(db)


def get_dispatcher(request: Request) -> TransitionSink:
    return request.app.state.dispatcher


def get_match_engine(
    store: SqlEdgeStore = Depends(get_edge_store),
    profiles: SqlProfileDirectory = Depends(get_profile_directory),
    dispatcher: TransitionSink = Depends(get_dispatcher),
) -> MatchEngine:
    return MatchEngine(store, profiles, dispatcher)


def get_query_service(
    store: SqlEdgeStore = Depends(get_edge_store),
    profiles: SqlProfileDirectory = Depends(get_profile_directory),
) -> QueryService:
    return QueryService(store, profiles)
