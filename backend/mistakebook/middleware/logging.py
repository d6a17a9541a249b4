"""
Mistake Book Backend: Request Logging Middleware
=================================================

What:  One access-log line per HTTP request. Health checks are not logged.

Line format:
    POST /api/push 200 412.3ms [a1b2c3d4] math #4 appended
    GET /api/stats/ds 502 1503.0ms [9f8e7d6c]

The trailing outcome tag is set by the push route on request.state; other
routes leave it off. Request bodies are never logged: they hold the
learner's entry text.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mistakebook.middleware.request_id import request_id_var

logger = logging.getLogger("mistakebook.access")

SKIPPED_PATHS = {"/api/health"}


def level_for_status(status: int) -> int:
    """5xx ERROR, 4xx WARNING, anything else INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def push_outcome_of(request: Request) -> Optional[str]:
    return getattr(request.state, "push_outcome", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        outcome = push_outcome_of(request)
        line = f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms [{rid}]"
        if outcome:
            line = f"{line} {outcome}"

        logger.log(
            level_for_status(response.status_code),
            line,
            extra={
                "request_id": rid,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "push_outcome": outcome,
            },
        )
        return response
