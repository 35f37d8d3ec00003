from __future__ import annotations
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

DEFAULT_SLOW_REQUEST_THRESHOLD_MS = 1000.0

class PerformanceMiddleware(BaseHTTPMiddleware):
    """Times every request and flags the ones slower than the threshold."""

    def __init__(self, app: ASGIApp, *, threshold_ms: float = DEFAULT_SLOW_REQUEST_THRESHOLD_MS) -> None:
        super().__init__(app)
        self.threshold_ms = threshold_ms

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        try:
            return await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            path = request.url.path
            request.state.request_duration_ms = elapsed_ms
            request.state.request_path = path
            if elapsed_ms > self.threshold_ms:
                logger.warning("Slow request: %s %s took %.1f ms", request.method, path, elapsed_ms)
            else:
                logger.debug("Request %s %s took %.1f ms", request.method, path, elapsed_ms)
