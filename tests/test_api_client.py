"""Tests for ApiClient — local fallback and remote mode over httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from catcircle.errors import ApiError
from catcircle.schemas.base import now_ms
from catcircle.schemas.config import ApiSettings
from catcircle.schemas.feed import Community, Post
from catcircle.shared.api_client import ApiClient
from catcircle.shared.storage import LocalDB, MemoryStore


def _remote(db: LocalDB, handler) -> ApiClient:
    http = httpx.AsyncClient(base_url="https://api.test", transport=httpx.MockTransport(handler))
    return ApiClient(db, settings=ApiSettings(base_url="https://api.test"), http=http)


class TestLocalMode:
    @pytest.mark.asyncio
    async def test_get_posts(self, api: ApiClient) -> None:
        posts = await api.get_posts()
        assert [p.id for p in posts] == ["p1", "p2", "p3", "p4", "p5"]

    @pytest.mark.asyncio
    async def test_create_post_prepends(self, api: ApiClient) -> None:
        post = Post(id="new", cat_id="cat_mochi", owner_id="owner_me", content="hi", timestamp=now_ms())
        created = await api.create_post(post)
        assert created == post
        assert (await api.get_posts())[0].id == "new"

    @pytest.mark.asyncio
    async def test_get_user(self, api: ApiClient) -> None:
        user = await api.get_current_user("owner_luna")
        assert user is not None
        assert user.account_name == "Kevin_BSH"
        assert await api.get_current_user("ghost") is None

    @pytest.mark.asyncio
    async def test_update_user(self, api: ApiClient, db: LocalDB) -> None:
        me = db.find_user("owner_me")
        await api.update_user(me.model_copy(update={"coin_balance": 1}))
        assert db.find_user("owner_me").coin_balance == 1

    @pytest.mark.asyncio
    async def test_update_user_id_mismatch(self, api: ApiClient, db: LocalDB) -> None:
        me = db.find_user("owner_me")
        with pytest.raises(ApiError) as exc_info:
            await api.request("/users/owner_luna", method="PUT", body=me)
        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_communities(self, api: ApiClient) -> None:
        community = Community(id="comm_x", name="X", creator_id="owner_me", member_ids=["owner_me"])
        await api.create_community(community)
        assert [c.id for c in await api.get_communities()][-1] == "comm_x"

    @pytest.mark.asyncio
    async def test_following_roundtrip(self, api: ApiClient) -> None:
        assert await api.get_following("owner_me") == []
        await api.save_following("owner_me", ["owner_luna"])
        assert await api.get_following("owner_me") == ["owner_luna"]

    @pytest.mark.asyncio
    async def test_empty_collections(self, api: ApiClient) -> None:
        assert await api.get_purchases("owner_me") == []
        assert await api.get_direct_messages("owner_me") == {}

    @pytest.mark.asyncio
    async def test_matches_for_session_user(self, api: ApiClient, db: LocalDB) -> None:
        db.set_current_user_id("owner_luna")
        matches = await api.get_recommended_matches()
        assert all(m.owner.id != "owner_luna" for m in matches)
        scores = [m.match_score for m in matches]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_matches_default_to_first_user(self, api: ApiClient) -> None:
        matches = await api.get_recommended_matches()
        assert len(matches) == 4
        assert all(m.owner.id != "owner_me" for m in matches)

    @pytest.mark.asyncio
    async def test_matches_with_no_users(self, store: MemoryStore) -> None:
        store.set("catcircle_users", "[]")
        client = ApiClient(LocalDB(store), settings=ApiSettings(latency_seconds=0))
        assert await client.get_recommended_matches() == []

    @pytest.mark.asyncio
    async def test_unknown_endpoint(self, api: ApiClient) -> None:
        with pytest.raises(ApiError) as exc_info:
            await api.request("/nowhere")
        assert exc_info.value.status == 404

    def test_is_remote(self, api: ApiClient) -> None:
        assert not api.is_remote


class TestRemoteMode:
    @pytest.mark.asyncio
    async def test_sends_bearer_token(self, db: LocalDB) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        db.set_token("secret")
        async with _remote(db, handler) as client:
            assert await client.get_posts() == []

        assert seen[0].headers["Authorization"] == "Bearer secret"
        assert seen[0].url.path == "/posts"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self, db: LocalDB) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        async with _remote(db, handler) as client:
            await client.get_communities()
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_post_body_is_camel_case(self, db: LocalDB) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            bodies.append(body)
            return httpx.Response(201, json=body)

        post = Post(id="r1", cat_id="cat_mochi", owner_id="owner_me", content="hi", timestamp=1)
        async with _remote(db, handler) as client:
            created = await client.create_post(post)

        assert bodies[0]["ownerId"] == "owner_me"
        assert created.owner_id == "owner_me"

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, db: LocalDB) -> None:
        async with _remote(db, lambda request: httpx.Response(503)) as client:
            with pytest.raises(ApiError, match="HTTP Error: 503") as exc_info:
                await client.get_posts()
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, db: LocalDB) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _remote(db, handler) as client:
            with pytest.raises(ApiError, match="failed"):
                await client.get_posts()

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, db: LocalDB) -> None:
        async with _remote(db, lambda request: httpx.Response(204)) as client:
            assert await client.request("/users/owner_me", method="PUT", body={}) is None

    @pytest.mark.asyncio
    async def test_bad_shape_raises(self, db: LocalDB) -> None:
        async with _remote(db, lambda request: httpx.Response(200, json={"oops": True})) as client:
            with pytest.raises(ApiError, match="Unexpected response shape"):
                await client.get_posts()

    @pytest.mark.asyncio
    async def test_remote_does_not_touch_local_posts(self, db: LocalDB) -> None:
        before = db.get_posts()
        async with _remote(db, lambda request: httpx.Response(200, json=[])) as client:
            await client.get_posts()
        assert db.get_posts() == before
