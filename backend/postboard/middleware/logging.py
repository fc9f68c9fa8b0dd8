"""
Postboard Backend — Request Logging Middleware
================================================

What:  One access log line per HTTP request.
How:   Logs method, path, status, body size, duration, request ID and client
       IP after the response is produced. The body size comes from the bytes
       RawBodyMiddleware buffered, so it is the size actually received.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, body size, duration, IP, request ID
    ❌ Don't log: request bodies (only the ParseError handler logs a raw body,
       and only for payloads that failed to decode)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from postboard.middleware.raw_body import get_raw_body
from postboard.middleware.request_id import request_id_var

logger = logging.getLogger("postboard.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level follows the status code: 5xx → ERROR, 4xx → WARNING, else INFO.
    Health checks are not logged.
    """

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")
        body_bytes = len(get_raw_body())

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d body=%dB %.1fms [%s] from %s",
            method,
            path,
            status,
            body_bytes,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "body_bytes": body_bytes,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
