"""
Wanderlust Backend - Request Logging Middleware
=================================================

What:  One access-log line per request: method, path, status, duration,
       request ID, client IP and (when authenticated) the caller's email.
How:   Runs inside RequestIDMiddleware so the correlation ID is available.
       Log level follows the status class: 5xx → ERROR, 4xx → WARNING,
       everything else → INFO.

Request bodies are not logged here; the itinerary service logs a truncated
summary of trip submissions at DEBUG level.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from wanderlust.middleware.request_id import request_id_var

logger = logging.getLogger("wanderlust.access")

# Probed every few seconds by the container runtime.
QUIET_PATHS = {"/health", "/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        user = getattr(request.state, "user", None)
        rid = request_id_var.get("")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            f" as {user.email}" if user is not None else "",
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
