"""UserProfile ORM — read-only view of the profile service's `users` table.

Invariants:
    - This service never writes to `users`
    - photo_keys holds storage keys; the first one is the profile photo
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.core.domain_types import Profile, UserId
from app.db.base import Base


class UserProfile(Base):
    """Public profile fields used to enrich like listings and notifications."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    photo_keys: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_seen: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    def to_profile(self) -> Profile:
        return Profile(
            id=UserId(self.id),
            name=self.name or "",
            age=self.age,
            photo_ref=self.photo_keys[0] if self.photo_keys else None,
            location=self.location,
            is_online=bool(self.is_online),
        )
