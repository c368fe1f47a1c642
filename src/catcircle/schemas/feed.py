"""Feed models — posts, comments, communities and challenges."""

from __future__ import annotations

from enum import Enum

from catcircle.schemas.base import CamelModel


class PostType(str, Enum):
    DAILY = "DAILY"
    CARE_TIPS = "CARE_TIPS"
    PROBLEM = "PROBLEM"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Comment(CamelModel):
    id: str
    owner_id: str
    text: str
    timestamp: int


class Post(CamelModel):
    """A feed entry. ``tips`` is the running coin total tipped to the post."""

    id: str
    cat_id: str
    owner_id: str
    community_id: str | None = None
    type: PostType = PostType.DAILY
    content: str
    media_url: str | None = None
    timestamp: int
    likes: int = 0
    tips: int = 0
    comments: list[Comment] = []
    risk_level: RiskLevel | None = None
    tags: list[str] = []


class Community(CamelModel):
    id: str
    name: str
    description: str = ""
    avatar: str = ""
    member_ids: list[str] = []
    creator_id: str
    breed_tag: str | None = None


class CatChallenge(CamelModel):
    id: str
    title: str
    description: str
    reward: int
    tag: str
    is_active: bool = True
    end_date: int
