"""Access logging middleware: one structured line per HTTP request."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request

from ..logging_config import bind_log_context


class StructuredLoggingMiddleware:
    """Log method, path, status and latency for every request."""

    def __init__(self, app: Callable) -> None:
        self.app = app
        self.logger = logging.getLogger("editorial.access")

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        request = Request(scope, receive=receive)
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-request-id", request_id.encode("latin-1")),
                ]
                self.logger.info(
                    "http_request",
                    extra={
                        "request_id": request_id,
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": message["status"],
                        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                        "client_ip": request.client.host if request.client else None,
                        "admin_route": request.url.path.startswith("/api/admin"),
                    },
                )
            await send(message)

        with bind_log_context(request_id=request_id):
            await self.app(scope, receive, send_wrapper)
