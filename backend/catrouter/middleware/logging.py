"""
CatRouter - Access Log Middleware
=================================

What:  Assigns each request its correlation ID and writes one access log
       line per request, including what happened to an upload.
How:   A single Starlette middleware. On the way in it settles the request ID
       (client X-Request-ID or a short UUID) and publishes it through a
       ContextVar; on the way out it reads `request.state.upload_outcome`,
       set by the POST handler or the upload-rejection handler, and logs.
Who:   Applied to every request via Starlette middleware.

Log line:
    POST /api/tutorials-router/cats 400 3.2ms [a1b2c3d4] from 127.0.0.1 upload=missing

Upload outcomes:
    stored          file written and found on disk
    rejected        form refused before the handler ran
    storage_failed  write or rename failed
    missing         existence check did not find the file

What we DON'T log: request bodies, uploaded file contents.
"""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("catrouter.access")

REQUEST_ID_HEADER = "X-Request-ID"

# Readable from loggers and exception handlers running inside the request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Paths polled too often to be worth a log line
QUIET_PATHS = frozenset({"/health"})


def log_level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING (rejected uploads, failed checks), else INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Request ID assignment plus the access log line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        start_time = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid

        path = request.url.path
        if path in QUIET_PATHS:
            return response

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        client_ip = request.client.host if request.client else "unknown"
        outcome = getattr(request.state, "upload_outcome", None)

        message = "%s %s %d %.1fms [%s] from %s"
        args = [request.method, path, status, duration_ms, rid, client_ip]
        if outcome:
            message += " upload=%s"
            args.append(outcome)

        logger.log(
            log_level_for_status(status),
            message,
            *args,
            extra={
                "request_id": rid,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "upload_outcome": outcome,
            },
        )

        return response
