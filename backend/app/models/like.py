"""Like ORM — directed like edge between two users.

Invariants:
    - At most one row per ordered pair (from_user, to_user): uq_likes_from_to
      is the single serialization point for concurrent writers
    - from_user <> to_user enforced by check constraint
    - status is one of: pending, accepted, rejected
    - created_at set once; updated_at refreshed on every status change
    - to_edge() always yields UTC-aware timestamps, whether the row was just
      inserted or read back from a backend that drops tzinfo

Design Decisions:
    - No foreign key to users: profiles are owned by another service and a
      deleted user leaves dangling edges that queries drop
    - Composite index (to_user, status, created_at) serves incoming + count
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Index, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.core.domain_types import Edge, EdgeId, EdgeStatus, UserId
from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Backends without tz support (SQLite) hand back naive UTC values."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class Like(Base):
    """Directed like edge (fromUser -> toUser) with a status."""
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("from_user", "to_user", name="uq_likes_from_to"),
        CheckConstraint("from_user <> to_user", name="ck_likes_not_self"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_likes_status",
        ),
        Index("ix_likes_to_status_created", "to_user", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    from_user: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    to_user: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EdgeStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    def to_edge(self) -> Edge:
        """Detach into an immutable domain snapshot."""
        return Edge(
            id=EdgeId(self.id),
            from_user=UserId(self.from_user),
            to_user=UserId(self.to_user),
            status=EdgeStatus(self.status),
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )
