"""Health and catalogue endpoint tests."""

from __future__ import annotations

import pytest


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_ready_without_redis(self, client):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ready"
        assert body["checks"] == {"database": "ok", "redis": "disabled"}

    @pytest.mark.asyncio
    async def test_version(self, client):
        resp = await client.get("/version")
        assert resp.json()["version"] == "0.1.0"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        resp = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"


class TestCourses:
    @pytest.mark.asyncio
    async def test_list(self, client):
        resp = await client.get("/api/v1/courses")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["courses"]) == 9
        assert body["roles"] == ["Data Analyst", "Software Engineer", "UX Designer"]

    @pytest.mark.asyncio
    async def test_filter_by_role(self, client):
        resp = await client.get("/api/v1/courses", params={"role": "UX Designer"})
        courses = resp.json()["courses"]
        assert [c["difficulty"] for c in courses] == ["easy", "medium", "hard"]

    @pytest.mark.asyncio
    async def test_detail_hides_answers(self, client):
        resp = await client.get("/api/v1/courses/data-analyst-easy")
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_questions"] == len(body["questions"]) == 4
        assert "answer" not in body["questions"][0]
        assert set(body["questions"][0]["options"]) == {"a", "b", "c", "d"}

    @pytest.mark.asyncio
    async def test_unknown_course(self, client):
        resp = await client.get("/api/v1/courses/basket-weaving-easy")
        assert resp.status_code == 404
        assert resp.json()["error"] == "NotFound"
