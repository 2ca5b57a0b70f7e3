"""
MoveMate Backend — Middleware & Health Tests
=============================================

What we test:
    ✅ Decision writes are throttled per IP with 429 + Retry-After
    ✅ Listing reads and other paths are never throttled
    ✅ Request IDs are generated or echoed
    ✅ Access log level follows the status class
    ✅ /health reports 200 / 503 from the database probe
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from movemate.middleware.logging import level_for_status
from movemate.middleware.rate_limit import RateLimitMiddleware
from movemate.middleware.request_id import RequestIDMiddleware


def _limited_app(max_requests=2):
    app = FastAPI()

    @app.post("/api/requests/driver/estimate/accept")
    async def accept():
        return {"ok": True}

    @app.patch("/api/requests/driver/estimate")
    async def update():
        return {"ok": True}

    @app.get("/api/requests/driver/estimate/list")
    async def listing():
        return {"ok": True}

    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)
    app.add_middleware(RequestIDMiddleware)
    return app


def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_decisions_throttled_after_limit(self):
        async with _client(_limited_app(max_requests=2)) as client:
            first = await client.post("/api/requests/driver/estimate/accept")
            second = await client.patch("/api/requests/driver/estimate")
            third = await client.post("/api/requests/driver/estimate/accept")

        assert first.status_code == 200
        assert second.status_code == 200
        assert third.status_code == 429
        assert int(third.headers["Retry-After"]) >= 1
        body = third.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["details"]["retry_after"] == int(third.headers["Retry-After"])
        assert body["request_id"] == third.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_reads_not_throttled(self):
        async with _client(_limited_app(max_requests=1)) as client:
            responses = [
                await client.get("/api/requests/driver/estimate/list") for _ in range(5)
            ]

        assert all(r.status_code == 200 for r in responses)

    def test_scope(self):
        middleware = RateLimitMiddleware(FastAPI(), max_requests=1, window_seconds=1)

        def request(method, path):
            return Request({"type": "http", "method": method, "path": path, "headers": []})

        assert middleware.is_limited(request("POST", "/api/requests/driver/estimate/reject"))
        assert middleware.is_limited(request("PATCH", "/api/requests/driver/estimate"))
        assert not middleware.is_limited(request("GET", "/api/requests/driver/estimate/list"))
        assert not middleware.is_limited(request("POST", "/api/other"))


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self):
        async with _client(_limited_app()) as client:
            response = await client.get("/api/requests/driver/estimate/list")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_value_echoed(self):
        async with _client(_limited_app()) as client:
            response = await client.get(
                "/api/requests/driver/estimate/list", headers={"X-Request-ID": "trace-me"}
            )

        assert response.headers["X-Request-ID"] == "trace-me"


class TestAccessLog:

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (201, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_level_for_status(self, status, level):
        assert level_for_status(status) == level


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        with patch("movemate.routes.health.check_database", AsyncMock(return_value=True)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_database_down(self, test_client):
        with patch("movemate.routes.health.check_database", AsyncMock(return_value=False)):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
