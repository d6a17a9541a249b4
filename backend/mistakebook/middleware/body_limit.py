"""
Mistake Book Backend: Request Body Size Limit Middleware
=========================================================

What:  Rejects requests whose declared body is larger than MAX_BODY_BYTES
       (5 MB by default) before the route parses any JSON.
How:   Reads the Content-Length header. Oversized bodies get 413 with the
       usual `{"success": false, ...}` error shape.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mistakebook.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

BODY_TOO_LARGE_MESSAGE = "请求内容过大"


def _reject(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "requestId": request_id_var.get(""),
        },
    )


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_body_bytes: Largest accepted Content-Length, in bytes.
    """

    def __init__(self, app, max_body_bytes: int, **kwargs):
        super().__init__(app, **kwargs)
        self.max_body_bytes = max_body_bytes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)

        try:
            size = int(declared)
        except ValueError:
            return _reject(400, "请求格式无效")

        if size > self.max_body_bytes:
            logger.warning(
                "Request body too large on %s: %d bytes (limit %d)",
                request.url.path,
                size,
                self.max_body_bytes,
            )
            return _reject(413, BODY_TOO_LARGE_MESSAGE)

        return await call_next(request)
