"""Feed operations — publish, search, like, comment and tip."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from catcircle.errors import ValidationFailed
from catcircle.schemas.base import new_id, now_ms
from catcircle.schemas.config import RewardSettings
from catcircle.schemas.feed import CatChallenge, Comment, Post, PostType, RiskLevel
from catcircle.schemas.profiles import OwnerProfile
from catcircle.shared.api_client import ApiClient
from catcircle.shared.fixtures import seed_challenges

logger = logging.getLogger(__name__)


def clean_tag(tag: str) -> str:
    return tag.replace("#", "").strip()


def final_tags(tags: Iterable[str], post_type: PostType) -> list[str]:
    """User tags (order kept, duplicates dropped) followed by the lowercase post type."""
    cleaned = [t for t in (clean_tag(t) for t in tags) if t]
    return list(dict.fromkeys([*cleaned, post_type.value.lower()]))


def search_posts(posts: list[Post], term: str, owners: Iterable[OwnerProfile]) -> list[Post]:
    """Filter the feed the way the search box does.

    ``#tag`` matches a tag exactly (case-insensitive). Anything else matches
    the owner's account name, any tag, or the content as a substring.
    """
    lower = term.strip().lower()
    if not lower:
        return list(posts)
    if lower.startswith("#"):
        wanted = lower[1:]
        return [p for p in posts if any(t.lower() == wanted for t in p.tags)]

    names = {o.id: o.account_name.lower() for o in owners}
    return [
        p
        for p in posts
        if lower in names.get(p.owner_id, "")
        or any(lower in t.lower() for t in p.tags)
        or lower in p.content.lower()
    ]


def time_left(challenge: CatChallenge, now: int | None = None) -> str:
    """Countdown label for the challenge banner, e.g. ``"41h 5m left"``."""
    remaining = challenge.end_date - (now_ms() if now is None else now)
    if remaining <= 0:
        return "Ended"
    minutes = remaining // 60_000
    return f"{minutes // 60}h {minutes % 60}m left"


class FeedService:
    def __init__(self, api: ApiClient, *, rewards: RewardSettings | None = None) -> None:
        self.api = api
        self.db = api.db
        self.rewards = rewards or RewardSettings()
        self._challenges = seed_challenges()

    async def list_posts(self) -> list[Post]:
        return await self.api.get_posts()

    async def search(self, term: str) -> list[Post]:
        return search_posts(await self.list_posts(), term, self.db.get_users())

    def challenges(self) -> list[CatChallenge]:
        return [c for c in self._challenges if c.is_active and time_left(c) != "Ended"]

    def challenge_tag(self, challenge_id: str) -> str:
        for challenge in self.challenges():
            if challenge.id == challenge_id:
                return clean_tag(challenge.tag)
        raise ValidationFailed(f"No active challenge with id {challenge_id!r}")

    async def create_post(
        self,
        author: OwnerProfile,
        content: str,
        post_type: PostType = PostType.DAILY,
        *,
        cat_id: str | None = None,
        community_id: str | None = None,
        media_url: str | None = None,
        tags: Iterable[str] = (),
        risk_level: RiskLevel | None = None,
    ) -> tuple[Post, OwnerProfile]:
        """Publish a post and credit the author's reward.

        Returns the stored post and the updated author.
        """
        if not content.strip() and not media_url:
            raise ValidationFailed("A post needs some text or an image.")
        if cat_id is None:
            cat = author.primary_cat
            cat_id = cat.id if cat else "unknown"
        elif not any(c.id == cat_id for c in author.cats):
            raise ValidationFailed(f"{author.account_name} has no cat with id {cat_id!r}")

        post = Post(
            id=new_id(),
            cat_id=cat_id,
            owner_id=author.id,
            community_id=community_id or None,
            type=post_type,
            content=content,
            media_url=media_url,
            timestamp=now_ms(),
            risk_level=risk_level,
            tags=final_tags(tags, post_type),
        )
        created = await self.api.create_post(post)

        rewarded = author.model_copy(
            update={"coin_balance": author.coin_balance + self.rewards.post_reward}
        )
        await self.api.update_user(rewarded)
        logger.info("%s published %s (+%d coins)", author.id, created.id, self.rewards.post_reward)
        return created, rewarded

    # ------------------------------------------------------------------
    # In-place post mutations
    # ------------------------------------------------------------------

    def _update_post(self, post_id: str, **changes) -> Post:
        posts = self.db.get_posts()
        for i, post in enumerate(posts):
            if post.id == post_id:
                posts[i] = post.model_copy(update=changes)
                self.db.save_posts(posts)
                return posts[i]
        raise ValidationFailed(f"No post with id {post_id!r}")

    def _get_post(self, post_id: str) -> Post:
        post = next((p for p in self.db.get_posts() if p.id == post_id), None)
        if post is None:
            raise ValidationFailed(f"No post with id {post_id!r}")
        return post

    def like(self, post_id: str) -> Post:
        return self._update_post(post_id, likes=self._get_post(post_id).likes + 1)

    def comment(self, post_id: str, author: OwnerProfile, text: str) -> Post:
        text = text.strip()
        if not text:
            raise ValidationFailed("Comment text is empty.")
        post = self._get_post(post_id)
        comment = Comment(id=new_id(), owner_id=author.id, text=text, timestamp=now_ms())
        return self._update_post(post_id, comments=[*post.comments, comment])

    async def tip(self, post_id: str, tipper: OwnerProfile, amount: int) -> tuple[Post, OwnerProfile]:
        """Move ``amount`` coins from ``tipper`` onto the post's tip total.

        Rejected without changes when the balance is short.
        """
        if amount <= 0:
            raise ValidationFailed("Tip amount must be positive.")
        post = self._get_post(post_id)
        if tipper.coin_balance < amount:
            raise ValidationFailed(
                f"Not enough coins to tip {amount} (balance: {tipper.coin_balance})."
            )
        updated_user = tipper.model_copy(update={"coin_balance": tipper.coin_balance - amount})
        await self.api.update_user(updated_user)
        updated_post = self._update_post(post_id, tips=post.tips + amount)
        return updated_post, updated_user
