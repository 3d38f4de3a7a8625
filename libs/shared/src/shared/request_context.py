from __future__ import annotations

import time
from typing import Callable
from uuid import uuid4

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

REQUEST_ID_HEADER = "x-request-id"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an `x-request-id` and log its outcome under that id."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()
        with logger.contextualize(request_id=request_id):
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(
                "{} {} -> {} in {:.2f}ms",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
            )
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response
