"""REST-shaped client with a local-storage fallback.

With ``ApiSettings.base_url`` set, every call is a real HTTP request carrying
the stored session token. Without it, calls resolve against ``LocalDB``
after a simulated delay, so the rest of the app never knows the difference.
"""

from __future__ import annotations

import asyncio
import json
import logging
from types import TracebackType
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from catcircle.errors import ApiError
from catcircle.matching import MatchScorer
from catcircle.schemas.base import dump_wire
from catcircle.schemas.chat import ChatMessage
from catcircle.schemas.config import ApiSettings
from catcircle.schemas.feed import Community, Post
from catcircle.schemas.mall import PurchaseRecord
from catcircle.schemas.profiles import OwnerProfile, RecommendedMatch
from catcircle.shared.storage import LocalDB

logger = logging.getLogger(__name__)

_POSTS = TypeAdapter(list[Post])
_COMMUNITIES = TypeAdapter(list[Community])
_PURCHASES = TypeAdapter(list[PurchaseRecord])
_IDS = TypeAdapter(list[str])
_THREADS = TypeAdapter(dict[str, list[ChatMessage]])
_MATCHES = TypeAdapter(list[RecommendedMatch])


class ApiClient:
    """Async client used by every service that talks to "the backend".

    Usage::

        async with ApiClient(db, settings=cfg.api) as api:
            posts = await api.get_posts()
    """

    def __init__(
        self,
        db: LocalDB,
        *,
        settings: ApiSettings | None = None,
        scorer: MatchScorer | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or ApiSettings()
        self.scorer = scorer or MatchScorer()
        self._http = http

    @property
    def is_remote(self) -> bool:
        return bool(self.settings.base_url)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=self.settings.timeout_seconds,
            )
        return self._http

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def request(self, endpoint: str, *, method: str = "GET", body: Any = None) -> Any:
        """Send one request and return the decoded JSON payload.

        Raises ``ApiError`` on transport failure or a non-2xx status.
        """
        if not self.is_remote:
            await asyncio.sleep(self.settings.latency_seconds)
            return self._handle_local(endpoint, method.upper(), dump_wire(body))

        headers = {"Content-Type": "application/json"}
        if token := self.db.get_token():
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client().request(
                method,
                endpoint,
                headers=headers,
                content=json.dumps(dump_wire(body)) if body is not None else None,
            )
        except httpx.HTTPError as exc:
            logger.error("API request failed: %s %s: %s", method, endpoint, exc)
            raise ApiError(f"Request to {endpoint} failed: {exc}") from exc

        if response.is_error:
            logger.error("API request failed: %s %s -> HTTP %d", method, endpoint, response.status_code)
            raise ApiError(f"HTTP Error: {response.status_code}", status=response.status_code)
        if not response.content:
            return None
        return response.json()

    def _handle_local(self, endpoint: str, method: str, body: Any) -> Any:
        """Resolve an endpoint against LocalDB. Returns wire-shaped JSON data."""
        db = self.db
        parts = [p for p in endpoint.split("?")[0].split("/") if p]

        match (method, parts):
            case ("GET", ["posts"]):
                return dump_wire(db.get_posts())
            case ("POST", ["posts"]):
                post = Post.model_validate(body)
                db.save_posts([post, *db.get_posts()])
                return dump_wire(post)
            case ("GET", ["users", user_id]):
                user = db.find_user(user_id)
                return dump_wire(user) if user else None
            case ("PUT", ["users", user_id]):
                user = OwnerProfile.model_validate(body)
                if user.id != user_id:
                    raise ApiError(f"User id mismatch: {user.id} != {user_id}", status=400)
                db.save_user(user)
                return dump_wire(user)
            case ("GET", ["users", user_id, "purchases"]):
                return dump_wire(db.get_purchases(user_id))
            case ("GET", ["users", user_id, "following"]):
                return db.get_following(user_id)
            case ("PUT", ["users", user_id, "following"]):
                db.save_following(user_id, list(body or []))
                return db.get_following(user_id)
            case ("GET", ["users", user_id, "messages"]):
                return dump_wire(db.get_chat_messages(user_id))
            case ("GET", ["communities"]):
                return dump_wire(db.get_communities())
            case ("POST", ["communities"]):
                community = Community.model_validate(body)
                db.save_communities([*db.get_communities(), community])
                return dump_wire(community)
            case ("GET", ["discover", "matches"]):
                users = db.get_users()
                if not users:
                    return []
                current_id = db.get_current_user_id()
                me = next((u for u in users if u.id == current_id), None) or users[0]
                return dump_wire(self.scorer.rank(me, users))
            case _:
                raise ApiError(f"No local handler for {method} {endpoint}", status=404)

    # ------------------------------------------------------------------
    # Typed endpoints
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(adapter: TypeAdapter, data: Any, endpoint: str) -> Any:
        try:
            return adapter.validate_python(data)
        except ValidationError as exc:
            raise ApiError(f"Unexpected response shape from {endpoint}: {exc}") from exc

    async def get_current_user(self, user_id: str) -> OwnerProfile | None:
        data = await self.request(f"/users/{user_id}")
        return self._parse(TypeAdapter(OwnerProfile), data, "/users") if data else None

    async def update_user(self, user: OwnerProfile) -> None:
        await self.request(f"/users/{user.id}", method="PUT", body=user)

    async def get_posts(self) -> list[Post]:
        return self._parse(_POSTS, await self.request("/posts"), "/posts")

    async def create_post(self, post: Post) -> Post:
        data = await self.request("/posts", method="POST", body=post)
        return self._parse(TypeAdapter(Post), data, "/posts")

    async def get_communities(self) -> list[Community]:
        return self._parse(_COMMUNITIES, await self.request("/communities"), "/communities")

    async def create_community(self, community: Community) -> Community:
        data = await self.request("/communities", method="POST", body=community)
        return self._parse(TypeAdapter(Community), data, "/communities")

    async def get_direct_messages(self, user_id: str) -> dict[str, list[ChatMessage]]:
        endpoint = f"/users/{user_id}/messages"
        return self._parse(_THREADS, await self.request(endpoint) or {}, endpoint)

    async def get_following(self, user_id: str) -> list[str]:
        endpoint = f"/users/{user_id}/following"
        return self._parse(_IDS, await self.request(endpoint) or [], endpoint)

    async def save_following(self, user_id: str, ids: list[str]) -> None:
        await self.request(f"/users/{user_id}/following", method="PUT", body=ids)

    async def get_purchases(self, user_id: str) -> list[PurchaseRecord]:
        endpoint = f"/users/{user_id}/purchases"
        return self._parse(_PURCHASES, await self.request(endpoint) or [], endpoint)

    async def get_recommended_matches(self) -> list[RecommendedMatch]:
        endpoint = "/discover/matches"
        return self._parse(_MATCHES, await self.request(endpoint), endpoint)
