"""Owner and cat profile models."""

from __future__ import annotations

from typing import Literal

from catcircle.schemas.base import CamelModel


class CatProfile(CamelModel):
    """A cat managed by an owner account."""

    id: str
    owner_id: str
    name: str
    breed: str = "Other"
    age: int = 1
    gender: Literal["Male", "Female"] = "Female"
    neutered: bool = False
    personality: list[str] = []
    health_tags: list[str] = []
    avatar: str = ""
    bio: str | None = None


class OwnerProfile(CamelModel):
    """A human account. Mutated wholesale on profile edits."""

    id: str
    account_name: str
    email: str | None = None
    avatar: str = ""
    bio: str = ""
    coin_balance: int = 0
    followers_count: int = 0
    following_count: int = 0
    cats: list[CatProfile] = []
    interests: list[str] = []

    @property
    def primary_cat(self) -> CatProfile | None:
        return self.cats[0] if self.cats else None


class RecommendedMatch(CamelModel):
    """Transient discover-tab pairing — produced per request, never stored."""

    owner: OwnerProfile
    match_score: int
    reason: str


# Fallback used when a post or message references an owner that no longer exists.
DEFAULT_OWNER = OwnerProfile(
    id="owner_unknown",
    account_name="Unknown Owner",
    avatar="https://i.pravatar.cc/150?u=unknown",
    bio="This account is no longer available.",
)
