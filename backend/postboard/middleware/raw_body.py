"""
Postboard Backend — Raw Body Capture Middleware
=================================================

What:  Buffers the request body before routing, enforces the body size cap,
       and keeps the original bytes available for the rest of the request.
Why:   When a client sends malformed JSON, the parser's message alone rarely
       shows what was actually sent. The ParseError handler logs these bytes.
How:   Pure ASGI middleware (no BaseHTTPMiddleware) so the body can be
       replayed to the application unchanged. The bytes live in a ContextVar
       that is reset when the request finishes; nothing is persisted.

Size cap:
    A declared Content-Length above the cap is rejected before reading.
    Chunked bodies are counted while streaming and rejected as soon as they
    cross the cap. Both cases return 413.
"""

import logging
from contextvars import ContextVar
from typing import List

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from postboard.exceptions import PayloadTooLargeError

logger = logging.getLogger(__name__)

raw_body_var: ContextVar[bytes] = ContextVar("raw_body", default=b"")

DEFAULT_MAX_BODY_SIZE = 5 * 1024 * 1024


def get_raw_body() -> bytes:
    """Bytes of the current request body (empty outside a request)."""
    return raw_body_var.get()


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Hand the buffered body out once, then defer to the server (disconnects)."""
    delivered = False

    async def replay() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class RawBodyMiddleware:
    def __init__(self, app: ASGIApp, max_body_size: int = DEFAULT_MAX_BODY_SIZE) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_body_size:
            await self._reject(scope, receive, send, int(declared))
            return

        chunks: List[bytes] = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.max_body_size:
                await self._reject(scope, receive, send, size)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        token = raw_body_var.set(body)
        try:
            await self.app(scope, _replay_receive(body, receive), send)
        finally:
            raw_body_var.reset(token)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        exc = PayloadTooLargeError(limit=self.max_body_size, context={"size": size})
        logger.warning(
            "Rejected %s %s: body of %d bytes exceeds %d",
            scope.get("method", ""),
            scope.get("path", ""),
            size,
            self.max_body_size,
        )
        response = JSONResponse(
            status_code=413,
            content={
                "error": exc.error,
                "message": exc.message,
                "details": {"limit": self.max_body_size},
            },
        )
        await response(scope, receive, send)
