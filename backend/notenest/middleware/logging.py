"""
NoteNest Backend - Request Logging Middleware
===============================================

What:  One access-log line per HTTP request: method, path, status, duration,
       request ID, client IP.
Who:   Applied to every request; runs inside RequestIDMiddleware so the
       request ID is already set.

Logged vs not logged:
    ✅ method, path, status, duration, client IP, request ID
    ❌ request bodies (passwords, note content), Authorization headers, files
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notenest.middleware.request_id import request_id_var

logger = logging.getLogger("notenest.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level by status code:
        5xx → ERROR
        4xx → WARNING
        else → INFO
    Health checks are not logged.
    """

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

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
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
