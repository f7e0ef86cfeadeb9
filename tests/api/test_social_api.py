"""Friends and leaderboard endpoint tests."""

from __future__ import annotations

import pytest


async def friend_code(client, headers):
    resp = await client.get("/api/v1/users/me/friend-code", headers=headers)
    assert resp.status_code == 200
    return resp.json()["friend_code"]


class TestFriends:
    @pytest.mark.asyncio
    async def test_friend_code_is_stable(self, client, headers_for):
        headers = headers_for("user-alice")
        first = await friend_code(client, headers)
        assert len(first) == 8
        assert await friend_code(client, headers) == first

    @pytest.mark.asyncio
    async def test_add_list_remove(self, client, headers_for):
        alice, bob = headers_for("user-alice"), headers_for("user-bob")
        bob_code = await friend_code(client, bob)

        resp = await client.post("/api/v1/friends", json={"friend_code": bob_code.lower()}, headers=alice)
        assert resp.status_code == 201
        assert resp.json()["user_id"] == "user-bob"

        listed = (await client.get("/api/v1/friends", headers=bob)).json()
        assert listed["total"] == 1
        assert listed["friends"][0]["user_id"] == "user-alice"

        resp = await client.delete("/api/v1/friends/user-alice", headers=bob)
        assert resp.status_code == 204
        assert (await client.get("/api/v1/friends", headers=alice)).json()["total"] == 0

    @pytest.mark.asyncio
    async def test_add_twice_conflicts(self, client, headers_for):
        alice, bob = headers_for("user-alice"), headers_for("user-bob")
        bob_code = await friend_code(client, bob)
        await client.post("/api/v1/friends", json={"friend_code": bob_code}, headers=alice)
        resp = await client.post("/api/v1/friends", json={"friend_code": bob_code}, headers=alice)
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_code(self, authed_client):
        resp = await authed_client.post("/api/v1/friends", json={"friend_code": "ZZZZZZZZ"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_code(self, authed_client):
        resp = await authed_client.post("/api/v1/friends", json={"friend_code": "ABC"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_remove_stranger(self, authed_client):
        resp = await authed_client.delete("/api/v1/friends/user-nobody")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_suggestions(self, client, headers_for):
        alice, bob = headers_for("user-alice"), headers_for("user-bob")
        await client.post("/api/v1/courses/data-analyst-easy/start", headers=alice)
        await client.post("/api/v1/courses/data-analyst-medium/start", headers=bob)

        resp = await client.get("/api/v1/friends/suggestions", headers=alice)
        assert resp.status_code == 200
        assert [s["user_id"] for s in resp.json()["suggestions"]] == ["user-bob"]

        bob_code = await friend_code(client, bob)
        await client.post("/api/v1/friends", json={"friend_code": bob_code}, headers=alice)
        resp = await client.get("/api/v1/friends/suggestions", headers=alice)
        assert resp.json()["suggestions"] == []


class TestLeaderboards:
    @pytest.mark.asyncio
    async def test_empty_board(self, authed_client):
        resp = await authed_client.get("/api/v1/leaderboards/trophies")
        assert resp.status_code == 200
        body = resp.json()
        assert body["board"] == "trophies"
        assert body["entries"] == []
        assert body["my_rank"] is None

    @pytest.mark.asyncio
    async def test_unknown_board(self, authed_client):
        resp = await authed_client.get("/api/v1/leaderboards/xp")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_limit_bounds(self, authed_client):
        resp = await authed_client.get("/api/v1/leaderboards/courses", params={"limit": 0})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_community_stats(self, client, alice):
        resp = await client.get("/api/v1/community/stats")
        assert resp.status_code == 200
        assert resp.json() == {
            "total_users": 1,
            "courses_completed": 0,
            "trophies_earned": 0,
            "active_streak_days": 0,
        }
