"""Request context middleware for observability."""

from __future__ import annotations

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from src.logging import get_logger

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request context and observability.

    Adds:
    - X-Request-ID header (generated or from client)
    - Request timing and logging, including the delivered file for downloads
    - Structured logging context (request_id, path, method)
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        # Every log line emitted while exporting carries the request context
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )
            raise

        response.headers["X-Request-ID"] = request_id

        disposition = response.headers.get("Content-Disposition", "")
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
            download=disposition.startswith("attachment"),
        )
        return response
