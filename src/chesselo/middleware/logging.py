# src/chesselo/middleware/logging.py

"""Request/response logging middleware for the chesselo API."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("chesselo.api")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and its outcome under a short request id.

    A request id sent by the client in X-Request-ID is reused, otherwise a
    new one is generated. Either way it is echoed back in the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        started = time.perf_counter()
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        logger.info(
            "[%s] %s %s",
            request_id,
            request.method,
            request.url.path,
            extra={
                **context,
                "query_params": str(request.query_params),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                "[%s] %s %s -> ERROR (%.2fms): %s",
                request_id,
                request.method,
                request.url.path,
                duration_ms,
                e,
                extra={**context, "error": str(e), "duration_ms": round(duration_ms, 2)},
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "[%s] %s %s -> %d (%.2fms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response  # type: ignore[no-any-return]
