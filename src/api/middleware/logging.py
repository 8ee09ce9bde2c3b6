"""Request logging middleware."""

import time
from typing import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.config import settings

logger = structlog.get_logger()

PROCESS_TIME_HEADER = "X-Process-Time"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its duration and flag slow ones.

    Recipient-scoped routes also log the recipient so a recipient's
    traffic can be followed across notifications, preferences and stats.
    """

    def __init__(self, app, slow_request_ms: float | None = None) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._slow_request_ms = (
            slow_request_ms if slow_request_ms is not None else settings.slow_request_threshold_ms
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        request_id = getattr(request.state, "request_id", "unknown")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                duration_ms=self._elapsed_ms(start_time),
            )
            raise

        duration_ms = self._elapsed_ms(start_time)
        response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.2f}ms"

        fields = {"status_code": response.status_code, "duration_ms": duration_ms}
        recipient_id = request.path_params.get("recipient_id")
        if recipient_id:
            fields["recipient_id"] = recipient_id

        if duration_ms > self._slow_request_ms:
            logger.warning("request_slow", threshold_ms=self._slow_request_ms, **fields)
        elif response.status_code >= 500:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)
