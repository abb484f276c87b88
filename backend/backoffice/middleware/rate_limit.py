"""
Back-Office Backend: Rate Limiting Middleware
===============================================

What:  Per-IP sliding window limit on API calls, mainly to slow down
       password guessing against /api/auth/login.
How:   Keeps the timestamps of each IP's requests inside the window; a
       request arriving when the window is full gets 429 with Retry-After.

In-memory and per-process. Behind several workers each worker enforces
its own window.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from backoffice.config import settings
from backoffice.exceptions import RateLimitExceededError
from backoffice.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Probes, docs and CORS preflights are never limited
EXCLUDED_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding window limiter configured by RATE_LIMIT_REQUESTS / RATE_LIMIT_WINDOW.

    The 429 body uses the same envelope as every other API error.
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS" or request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        hits = self._requests[client_ip]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= settings.rate_limit_requests:
            retry_after = int(hits[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip, len(hits), settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)
        self._seen += 1
        if self._seen % CLEANUP_EVERY == 0:
            self._drop_idle(window_start)

        return await call_next(request)

    def _drop_idle(self, window_start: float) -> None:
        """Forgets IPs with no request inside the current window."""
        idle = [ip for ip, hits in self._requests.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._requests[ip]
        if idle:
            logger.debug("Dropped %d idle IP entries", len(idle))
