"""Rate limiting configuration using slowapi."""

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import settings
from core.exceptions import ErrorCode, ErrorKind


def recipient_or_remote_address(request: Request) -> str:
    """Key limits by recipient when the route names one, else by client address."""
    recipient_id = request.path_params.get("recipient_id")
    if recipient_id:
        return f"recipient:{recipient_id}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=recipient_or_remote_address,
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Render a 429 in the standard error envelope."""
    limit = exc.detail if isinstance(exc, RateLimitExceeded) else str(exc)
    return ORJSONResponse(
        status_code=429,
        content={
            "error_code": ErrorCode.RATE_LIMIT_EXCEEDED.value,
            "error_kind": ErrorKind.VALIDATION.value,
            "message": f"Rate limit exceeded: {limit}",
            "details": {"limit": str(limit), "key": recipient_or_remote_address(request)},
        },
    )
