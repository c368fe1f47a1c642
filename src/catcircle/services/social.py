"""Follows, communities, and chat (direct and group)."""

from __future__ import annotations

import logging

from catcircle.errors import ValidationFailed
from catcircle.schemas.base import new_id, now_ms
from catcircle.schemas.chat import ChatMessage
from catcircle.schemas.feed import Community
from catcircle.schemas.profiles import OwnerProfile, RecommendedMatch
from catcircle.shared.api_client import ApiClient

logger = logging.getLogger(__name__)

AUTO_REPLY_TEXT = "Meow! 🐾"


def _message(sender_id: str, text: str | None, image_url: str | None) -> ChatMessage:
    text = (text or "").strip() or None
    if text is None and not image_url:
        raise ValidationFailed("A message needs text or an image.")
    return ChatMessage(id=new_id(), sender_id=sender_id, text=text, image_url=image_url, timestamp=now_ms())


class SocialService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.db = api.db

    # ------------------------------------------------------------------
    # Follows / discover
    # ------------------------------------------------------------------

    async def toggle_follow(self, me: OwnerProfile, owner_id: str) -> bool:
        """Follow ``owner_id`` or unfollow if already followed. Returns the new state."""
        if owner_id == me.id:
            raise ValidationFailed("You can't follow yourself.")
        following = await self.api.get_following(me.id)
        if owner_id in following:
            following = [i for i in following if i != owner_id]
            now_following = False
        else:
            following = [*following, owner_id]
            now_following = True
        await self.api.save_following(me.id, following)
        return now_following

    async def discover(self) -> list[RecommendedMatch]:
        return await self.api.get_recommended_matches()

    # ------------------------------------------------------------------
    # Communities
    # ------------------------------------------------------------------

    async def create_community(
        self,
        creator: OwnerProfile,
        name: str,
        description: str = "",
        *,
        breed_tag: str | None = None,
    ) -> Community:
        name = name.strip()
        if not name:
            raise ValidationFailed("A community needs a name.")
        community = Community(
            id=new_id("comm", 5),
            name=name,
            description=description.strip(),
            avatar=f"https://picsum.photos/seed/{name.replace(' ', '')}/200/200",
            member_ids=[creator.id],
            creator_id=creator.id,
            breed_tag=breed_tag,
        )
        return await self.api.create_community(community)

    def join_community(self, member: OwnerProfile, community_id: str) -> Community:
        """Add ``member`` to the community; joining twice is a no-op."""
        communities = self.db.get_communities()
        for i, community in enumerate(communities):
            if community.id == community_id:
                if member.id not in community.member_ids:
                    communities[i] = community.model_copy(
                        update={"member_ids": [*community.member_ids, member.id]}
                    )
                    self.db.save_communities(communities)
                return communities[i]
        raise ValidationFailed(f"No community with id {community_id!r}")

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def send_direct(
        self,
        me: OwnerProfile,
        peer_id: str,
        text: str | None = None,
        *,
        image_url: str | None = None,
        auto_reply: bool = True,
    ) -> list[ChatMessage]:
        """Append a message to the thread with ``peer_id`` and return the thread.

        Peers answer with a scripted reply; there is no real recipient.
        """
        if peer_id == me.id:
            raise ValidationFailed("You can't message yourself.")
        msg = _message(me.id, text, image_url)
        threads = self.db.get_chat_messages(me.id)
        thread = [*threads.get(peer_id, []), msg]
        if auto_reply:
            thread.append(
                ChatMessage(id=new_id(), sender_id=peer_id, text=AUTO_REPLY_TEXT, timestamp=now_ms())
            )
        threads[peer_id] = thread
        self.db.save_chat_messages(me.id, threads)
        return thread

    def send_group(
        self,
        me: OwnerProfile,
        community_id: str,
        text: str | None = None,
        *,
        image_url: str | None = None,
    ) -> list[ChatMessage]:
        community = next((c for c in self.db.get_communities() if c.id == community_id), None)
        if community is None:
            raise ValidationFailed(f"No community with id {community_id!r}")
        if me.id not in community.member_ids:
            raise ValidationFailed(f"Join {community.name} before posting in its chat.")
        msg = _message(me.id, text, image_url)
        threads = self.db.get_group_chat_messages()
        threads[community_id] = [*threads.get(community_id, []), msg]
        self.db.save_group_chat_messages(threads)
        return threads[community_id]
