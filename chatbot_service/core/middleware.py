"""ASGI request logging middleware."""

import time

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger()

QUIET_PATHS: set[str] = {
    "/health",
}


class RequestLoggingMiddleware:
    """Pure ASGI middleware logging method, path, status and duration."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        path = scope["path"]
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            if path not in QUIET_PATHS or status_code >= 400:
                log = logger.warning if status_code >= 400 else logger.info
                log(
                    "HTTP request",
                    method=method,
                    path=path,
                    query=scope.get("query_string", b"").decode() or None,
                    status=status_code,
                    duration_ms=duration_ms,
                )
