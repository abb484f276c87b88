"""
Back-Office Backend: Access Logging Middleware
================================================

One line per request on the `backoffice.access` logger:

    POST /api/admin/delete-user 200 41.3ms [a1b2c3d4] from 10.0.0.7

Level follows the status class: 5xx → ERROR, 4xx → WARNING, else INFO.
Bodies and headers are never logged (passwords, tokens, client PII).
/health is skipped; probes run every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from backoffice.middleware.request_id import request_id_var

logger = logging.getLogger("backoffice.access")

QUIET_PATHS = frozenset({"/health"})


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            level_for(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
