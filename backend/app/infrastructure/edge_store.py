"""SQL Edge Store — relationship store for like edges on top of AsyncSession.

Invariants:
    - create_edge relies on uq_likes_from_to: an IntegrityError on flush becomes
      DuplicateEdgeError, never an application-level check-then-insert
    - create_edge/set_status/upsert_accepted must run inside transaction(); a
      failure anywhere inside rolls back every write of that unit
    - upsert_accepted is one INSERT ... ON CONFLICT DO UPDATE statement
    - set_status is one conditional UPDATE; returns False when the guard missed
    - Reads use populate_existing so bulk UPDATE/UPSERT results are never masked
      by stale identity-map rows
    - Every method returns detached Edge snapshots, never ORM rows

Design Decisions:
    - Dialect-specific insert picked from the bound engine: PostgreSQL in
      production, SQLite in tests; both expose on_conflict_do_update
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import Edge, EdgeId, EdgeStatus, UserId
from app.core.errors import DuplicateEdgeError
from app.models.like import Like, utcnow

logger = logging.getLogger(__name__)


class SqlEdgeStore:
    """EdgeRepository implementation scoped to one request session."""

    def __init__(self, db: AsyncSession):
        self._db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        """Unit of work: commit on success, roll back on any exception."""
        try:
            yield
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            raise

    # ─── Writes ──────────────────────────────────────────────────

    async def create_edge(
        self, from_user: UserId, to_user: UserId, status: EdgeStatus,
    ) -> Edge:
        now = utcnow()
        like = Like(
            id=uuid.uuid4(), from_user=from_user, to_user=to_user,
            status=status.value, created_at=now, updated_at=now,
        )
        self._db.add(like)
        try:
            await self._db.flush()
        except IntegrityError as e:
            logger.info(
                f"Edge {from_user} -> {to_user} already exists",
                extra={"user_id": str(from_user), "target_id": str(to_user)},
            )
            raise DuplicateEdgeError(str(from_user), str(to_user)) from e
        return like.to_edge()

    async def set_status(
        self,
        edge_id: EdgeId,
        status: EdgeStatus,
        expected_prior_status: EdgeStatus | None = None,
    ) -> bool:
        stmt = update(Like).where(Like.id == edge_id)
        if expected_prior_status is not None:
            stmt = stmt.where(Like.status == expected_prior_status.value)
        stmt = stmt.values(status=status.value, updated_at=utcnow())
        result = await self._db.execute(stmt)
        return result.rowcount > 0

    async def upsert_accepted(self, from_user: UserId, to_user: UserId) -> None:
        now = utcnow()
        insert = (
            pg_insert if self._db.get_bind().dialect.name == "postgresql"
            else sqlite_insert
        )
        stmt = insert(Like).values(
            id=uuid.uuid4(),
            from_user=from_user,
            to_user=to_user,
            status=EdgeStatus.ACCEPTED.value,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["from_user", "to_user"],
            set_={"status": EdgeStatus.ACCEPTED.value, "updated_at": now},
        )
        await self._db.execute(stmt)

    # ─── Reads ───────────────────────────────────────────────────

    async def find_edge(self, from_user: UserId, to_user: UserId) -> Edge | None:
        return await self._first(
            select(Like).where(Like.from_user == from_user, Like.to_user == to_user),
        )

    async def find_by_id(self, edge_id: EdgeId) -> Edge | None:
        return await self._first(select(Like).where(Like.id == edge_id))

    async def find_pending_reverse(
        self, from_user: UserId, to_user: UserId,
    ) -> Edge | None:
        """The edge to_user -> from_user, only while it is still pending."""
        return await self._first(
            select(Like).where(
                Like.from_user == to_user,
                Like.to_user == from_user,
                Like.status == EdgeStatus.PENDING.value,
            ),
        )

    async def list_incoming_pending(self, user: UserId) -> list[Edge]:
        return await self._all(
            select(Like)
            .where(Like.to_user == user, Like.status == EdgeStatus.PENDING.value)
            .order_by(Like.created_at.desc()),
        )

    async def list_outgoing(self, user: UserId) -> list[Edge]:
        return await self._all(
            select(Like)
            .where(Like.from_user == user)
            .order_by(Like.created_at.desc()),
        )

    async def list_accepted(self, user: UserId) -> list[Edge]:
        return await self._all(
            select(Like)
            .where(
                or_(Like.from_user == user, Like.to_user == user),
                Like.status == EdgeStatus.ACCEPTED.value,
            )
            .order_by(Like.updated_at.desc()),
        )

    async def count_incoming_pending(self, user: UserId) -> int:
        result = await self._db.execute(
            select(func.count())
            .select_from(Like)
            .where(Like.to_user == user, Like.status == EdgeStatus.PENDING.value),
        )
        return int(result.scalar_one())

    async def _first(self, stmt) -> Edge | None:
        result = await self._db.execute(
            stmt.execution_options(populate_existing=True),
        )
        like = result.scalar_one_or_none()
        return like.to_edge() if like else None

    async def _all(self, stmt) -> list[Edge]:
        result = await self._db.execute(
            stmt.execution_options(populate_existing=True),
        )
        return [like.to_edge() for like in result.scalars().all()]
