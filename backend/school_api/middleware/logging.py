"""
School API Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request.
How:   Measures the time spent in the rest of the stack and logs method, path,
       status, duration, request ID and client IP. The log level follows the
       status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

Privacy:
    Request bodies and the Authorization header are never logged. Register
    and login bodies carry plaintext passwords.

Example line:
    2026-01-15T12:00:00 [INFO] school_api.access: POST /auth/login 200 87.3ms [1f2e3d4c] from 127.0.0.1
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from school_api.middleware.request_id import request_id_var

logger = logging.getLogger("school_api.access")

# Probed every few seconds by orchestrators; logging them drowns real traffic
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request-ID correlation and duration tracking."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
