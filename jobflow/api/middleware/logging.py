"""
Per-request log context, access logging and request metrics.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response

from jobflow.config.logging import get_logger
from jobflow.infrastructure.monitoring.metrics import record_api_request

logger = get_logger(__name__)


def _endpoint(request: Request) -> str:
    """Route template for metrics labels, falling back to the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class LoggingMiddleware:
    """
    Binds the request id and the caller identity headers into the structlog
    context, so every log line emitted while serving the request (use cases,
    repositories, gateways) carries them.
    """

    def __init__(self, app: FastAPI):
        self.app = app
        self.add_logging_middleware()

    def add_logging_middleware(self) -> None:
        @self.app.middleware("http")
        async def logging_middleware(request: Request, call_next: Callable) -> Response:
            request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
            request.state.request_id = request_id
            structlog.contextvars.clear_contextvars()
            structlog.contextvars.bind_contextvars(
                request_id=request_id,
                caller_id=request.headers.get("X-User-Id"),
                caller_role=request.headers.get("X-User-Role"),
            )

            started = time.perf_counter()
            status_code = 500
            try:
                response = await call_next(request)
                status_code = response.status_code
            finally:
                elapsed = time.perf_counter() - started
                record_api_request(request.method, _endpoint(request), status_code, elapsed)
                log = logger.warning if status_code >= 500 else logger.info
                log(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=round(elapsed * 1000, 2),
                )
                structlog.contextvars.clear_contextvars()

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{elapsed:.4f}"
            return response
