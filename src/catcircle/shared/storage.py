"""Key-value persistence — the stand-in for browser local storage.

``KeyValueStore`` is the injected interface (string keys, string values).
``LocalDB`` layers whole-collection JSON blobs on top of it, seeding the
store from fixtures on first run.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from catcircle.errors import ApiError
from catcircle.schemas.base import dump_wire
from catcircle.schemas.chat import ChatMessage
from catcircle.schemas.feed import Community, Post
from catcircle.schemas.mall import Product, PurchaseRecord
from catcircle.schemas.profiles import DEFAULT_OWNER, OwnerProfile
from catcircle.shared import fixtures

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fixed keys. Per-user collections append ``_<user id>``.
KEY_POSTS = "catcircle_posts"
KEY_USERS = "catcircle_users"
KEY_SESSION = "catcircle_session"
KEY_TOKEN = "catcircle_token"
KEY_PURCHASES = "catcircle_purchases"
KEY_CHATS = "catcircle_chats"
KEY_FOLLOWING = "catcircle_following"
KEY_COMMUNITIES = "catcircle_communities"
KEY_GROUP_CHATS = "catcircle_group_chats"
KEY_PRODUCTS = "catcircle_products"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """Single JSON file holding every key, rewritten atomically on each change."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            raise ApiError(f"Storage file is corrupt: {self.path} ({exc})") from exc
        if not isinstance(data, dict):
            raise ApiError(f"Storage file must hold a JSON object: {self.path}")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


_POSTS = TypeAdapter(list[Post])
_USERS = TypeAdapter(list[OwnerProfile])
_COMMUNITIES = TypeAdapter(list[Community])
_PURCHASES = TypeAdapter(list[PurchaseRecord])
_PRODUCTS = TypeAdapter(list[Product])
_IDS = TypeAdapter(list[str])
_THREADS = TypeAdapter(dict[str, list[ChatMessage]])


class LocalDB:
    """Typed accessors over whole-collection blobs.

    No foreign keys are enforced; readers tolerate dangling ids.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Raw blob helpers
    # ------------------------------------------------------------------

    def _read(self, key: str, adapter: TypeAdapter[T], default: T) -> T:
        raw = self.store.get(key)
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except ValidationError as exc:
            # Shape changes require manually clearing storage.
            raise ApiError(f"Stored collection {key!r} has an unexpected shape: {exc}") from exc

    def _write(self, key: str, value: object) -> None:
        self.store.set(key, json.dumps(dump_wire(value), ensure_ascii=False))

    def init(self) -> None:
        """Seed posts, users, communities and products if absent."""
        seeds = (
            (KEY_POSTS, fixtures.seed_posts),
            (KEY_USERS, fixtures.seed_owners),
            (KEY_COMMUNITIES, fixtures.seed_communities),
            (KEY_PRODUCTS, fixtures.seed_products),
        )
        for key, build in seeds:
            if self.store.get(key) is None:
                logger.info("Seeding %s from fixtures", key)
                self._write(key, build())

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def get_current_user_id(self) -> str | None:
        return self.store.get(KEY_SESSION)

    def set_current_user_id(self, user_id: str | None) -> None:
        if user_id:
            self.store.set(KEY_SESSION, user_id)
        else:
            self.store.remove(KEY_SESSION)

    def get_token(self) -> str | None:
        return self.store.get(KEY_TOKEN)

    def set_token(self, token: str | None) -> None:
        if token:
            self.store.set(KEY_TOKEN, token)
        else:
            self.store.remove(KEY_TOKEN)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_users(self) -> list[OwnerProfile]:
        users = self._read(KEY_USERS, _USERS, None)
        return fixtures.seed_owners() if users is None else users

    def save_user(self, user: OwnerProfile) -> None:
        """Replace the record with the same id, or append a new one."""
        users = self.get_users()
        for i, existing in enumerate(users):
            if existing.id == user.id:
                users[i] = user
                break
        else:
            users.append(user)
        self._write(KEY_USERS, users)

    def find_user(self, user_id: str) -> OwnerProfile | None:
        return next((u for u in self.get_users() if u.id == user_id), None)

    def find_user_or_default(self, user_id: str) -> OwnerProfile:
        return self.find_user(user_id) or DEFAULT_OWNER

    # ------------------------------------------------------------------
    # Posts / communities / products
    # ------------------------------------------------------------------

    def get_posts(self) -> list[Post]:
        return self._read(KEY_POSTS, _POSTS, [])

    def save_posts(self, posts: list[Post]) -> None:
        self._write(KEY_POSTS, posts)

    def get_communities(self) -> list[Community]:
        communities = self._read(KEY_COMMUNITIES, _COMMUNITIES, None)
        return fixtures.seed_communities() if communities is None else communities

    def save_communities(self, communities: list[Community]) -> None:
        self._write(KEY_COMMUNITIES, communities)

    def get_products(self) -> list[Product]:
        products = self._read(KEY_PRODUCTS, _PRODUCTS, None)
        return fixtures.seed_products() if products is None else products

    def save_products(self, products: list[Product]) -> None:
        self._write(KEY_PRODUCTS, products)

    # ------------------------------------------------------------------
    # Per-user collections
    # ------------------------------------------------------------------

    def get_purchases(self, user_id: str) -> list[PurchaseRecord]:
        return self._read(f"{KEY_PURCHASES}_{user_id}", _PURCHASES, [])

    def save_purchases(self, user_id: str, purchases: list[PurchaseRecord]) -> None:
        self._write(f"{KEY_PURCHASES}_{user_id}", purchases)

    def get_following(self, user_id: str) -> list[str]:
        return self._read(f"{KEY_FOLLOWING}_{user_id}", _IDS, [])

    def save_following(self, user_id: str, ids: list[str]) -> None:
        self._write(f"{KEY_FOLLOWING}_{user_id}", ids)

    def get_chat_messages(self, user_id: str) -> dict[str, list[ChatMessage]]:
        """Direct-message threads for ``user_id``, keyed by peer id."""
        return self._read(f"{KEY_CHATS}_{user_id}", _THREADS, {})

    def save_chat_messages(self, user_id: str, messages: dict[str, list[ChatMessage]]) -> None:
        self._write(f"{KEY_CHATS}_{user_id}", messages)

    def get_group_chat_messages(self) -> dict[str, list[ChatMessage]]:
        """Group threads keyed by community id."""
        return self._read(KEY_GROUP_CHATS, _THREADS, {})

    def save_group_chat_messages(self, messages: dict[str, list[ChatMessage]]) -> None:
        self._write(KEY_GROUP_CHATS, messages)
