"""Like Schemas — Pydantic response models for the /likes endpoints.

Invariants:
    - Wire names are camelCase (isMatch, matchedUser, fromUser, createdAt)
    - ProfileOut.photo is a storage key; URL signing happens outside this service
    - Built from service dataclasses via from_* constructors, never from ORM rows
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.core.domain_types import EdgeStatus, Profile
from app.services.query_service import IncomingLike, MatchEntry, OutgoingLike


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileOut(CamelModel):
    id: UUID
    name: str
    age: int | None = None
    photo: str | None = None
    location: str | None = None
    is_online: bool = False

    @classmethod
    def from_profile(cls, profile: Profile | None) -> "ProfileOut | None":
        if profile is None:
            return None
        return cls(
            id=profile.id,
            name=profile.name,
            age=profile.age,
            photo=profile.photo_ref,
            location=profile.location,
            is_online=profile.is_online,
        )


class LikeResponse(CamelModel):
    """Like creation and accept result."""
    success: bool = True
    is_match: bool
    matched_user: ProfileOut | None = None
    message: str | None = None


class RejectResponse(CamelModel):
    success: bool = True


class IncomingLikeOut(CamelModel):
    id: UUID
    from_user: ProfileOut
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: IncomingLike) -> "IncomingLikeOut":
        return cls(
            id=entry.id,
            from_user=ProfileOut.from_profile(entry.from_user),
            created_at=entry.created_at,
        )


class OutgoingLikeOut(CamelModel):
    id: UUID
    to_user: ProfileOut
    status: EdgeStatus
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: OutgoingLike) -> "OutgoingLikeOut":
        return cls(
            id=entry.id,
            to_user=ProfileOut.from_profile(entry.to_user),
            status=entry.status,
            created_at=entry.created_at,
        )


class MatchOut(CamelModel):
    id: UUID
    other_user: ProfileOut
    matched_at: datetime

    @classmethod
    def from_entry(cls, entry: MatchEntry) -> "MatchOut":
        return cls(
            id=entry.id,
            other_user=ProfileOut.from_profile(entry.other_user),
            matched_at=entry.matched_at,
        )


class IncomingLikesResponse(CamelModel):
    likes: list[IncomingLikeOut]


class OutgoingLikesResponse(CamelModel):
    likes: list[OutgoingLikeOut]


class MatchesResponse(CamelModel):
    matches: list[MatchOut]


class CountResponse(CamelModel):
    count: int
