"""SQL Profile Directory — read-only profile lookups for enrichment.

Invariants:
    - Never writes; an absent row means "user no longer resolves"
    - get_many issues one query per listing, never one per edge
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import Profile, UserId
from app.models.user_profile import UserProfile


class SqlProfileDirectory:
    """ProfileDirectory over the profile service's `users` table."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, user_id: UserId) -> Profile | None:
        result = await self._db.execute(
            select(UserProfile).where(UserProfile.id == user_id),
        )
        row = result.scalar_one_or_none()
        return row.to_profile() if row else None

    async def get_many(self, user_ids: list[UserId]) -> dict[UserId, Profile]:
        if not user_ids:
            return {}
        result = await self._db.execute(
            select(UserProfile).where(UserProfile.id.in_(set(user_ids))),
        )
        return {
            UserId(row.id): row.to_profile() for row in result.scalars().all()
        }
