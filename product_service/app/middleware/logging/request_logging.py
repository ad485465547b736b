"""
HTTP request logging middleware for Product Service.

Assigns every request an ``X-Request-ID`` (honouring one supplied by the
caller), echoes it on the response and writes one access log line per request.
"""

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("product_service.http")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id propagation and access logging"""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "http request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": int((time.time() - start_time) * 1000),
                "request_id": request_id,
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response
