"""
Postboard Backend — Raw Body Capture Tests
============================================

What:  Tests for RawBodyMiddleware and the Invalid JSON error path.

What we test:
    ✅ Malformed JSON → 400 {"error": "Invalid JSON", "message": <parser message>}
    ✅ Bytes that are not valid UTF-8 take the same Invalid JSON path
    ✅ The raw body is written to the log, never persisted
    ✅ Declared and streamed bodies over the cap → 413
    ✅ The captured bytes are visible downstream and cleared afterwards
"""

import logging

import pytest
from httpx import AsyncClient, ASGITransport
from starlette.responses import PlainTextResponse

from postboard.config import Settings
from postboard.main import create_app
from postboard.middleware.raw_body import RawBodyMiddleware, get_raw_body


class TestInvalidJson:

    @pytest.mark.asyncio
    async def test_malformed_body_returns_parser_message(self, test_client):
        response = await test_client.post(
            "/api/posts",
            content=b'{"title": "Hi", "content": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        payload = response.json()
        assert payload["error"] == "Invalid JSON"
        assert isinstance(payload["message"], str) and payload["message"]
        assert "request_id" in payload

    @pytest.mark.asyncio
    async def test_raw_body_is_logged(self, test_client, caplog):
        caplog.set_level(logging.WARNING, logger="postboard.main")

        await test_client.post(
            "/api/posts",
            content=b"{title: 'single quotes'}",
            headers={"Content-Type": "application/json"},
        )

        messages = [record.getMessage() for record in caplog.records if record.name == "postboard.main"]
        assert any("{title: 'single quotes'}" in message for message in messages)

    @pytest.mark.asyncio
    async def test_undecodable_bytes_treated_as_invalid_json(self, test_client, caplog):
        caplog.set_level(logging.WARNING, logger="postboard.main")

        response = await test_client.post(
            "/api/posts",
            content=b'{"title": "\xff"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        payload = response.json()
        assert payload["error"] == "Invalid JSON"
        assert payload["message"]
        assert "request_id" in payload
        messages = [record.getMessage() for record in caplog.records if record.name == "postboard.main"]
        assert any("Invalid JSON body" in message and '"title"' in message for message in messages)
        assert (await test_client.get("/api/posts")).json() == []

    @pytest.mark.asyncio
    async def test_malformed_body_not_persisted(self, test_client):
        await test_client.post(
            "/api/posts",
            content=b"not json at all",
            headers={"Content-Type": "application/json"},
        )

        assert (await test_client.get("/api/posts")).json() == []


class TestBodySizeCap:

    @pytest.fixture
    def small_cap_app(self, database_url):
        return create_app(
            Settings(database_url=database_url, max_body_size=1024, log_level="WARNING"),
            configure_logging=False,
        )

    @pytest.mark.asyncio
    async def test_declared_length_over_cap(self, small_cap_app):
        body = {"title": "x" * 2000, "content": "c", "date": "d"}

        async with small_cap_app.router.lifespan_context(small_cap_app):
            transport = ASGITransport(app=small_cap_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post("/api/posts", json=body)
                listed = (await client.get("/api/posts")).json()

        assert response.status_code == 413
        assert response.json()["error"] == "Payload too large"
        assert listed == []

    @pytest.mark.asyncio
    async def test_streamed_body_over_cap(self, small_cap_app):
        async def chunks():
            for _ in range(3):
                yield b"x" * 600

        async with small_cap_app.router.lifespan_context(small_cap_app):
            transport = ASGITransport(app=small_cap_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post(
                    "/api/posts",
                    content=chunks(),
                    headers={"Content-Type": "application/json"},
                )

        assert response.status_code == 413

    @pytest.mark.asyncio
    async def test_default_cap_is_five_megabytes(self):
        assert Settings().max_body_size == 5 * 1024 * 1024


class TestRawBodyMiddleware:

    @pytest.mark.asyncio
    async def test_body_replayed_and_captured_for_one_request(self):
        seen = []

        async def inner_app(scope, receive, send):
            message = await receive()
            seen.append((get_raw_body(), message["body"]))
            await PlainTextResponse("ok")(scope, receive, send)

        middleware = RawBodyMiddleware(inner_app, max_body_size=1024)
        async with AsyncClient(transport=ASGITransport(app=middleware), base_url="http://test") as client:
            response = await client.post("/", content=b"hello")

        assert response.status_code == 200
        assert seen == [(b"hello", b"hello")]
        assert get_raw_body() == b""
