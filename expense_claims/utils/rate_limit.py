"""Rate limiting for claim submissions."""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from expense_claims.config import settings


def get_rate_limit_key(request: Request) -> str:
    """
    Get the key for rate limiting.

    There are no user accounts, so clients are told apart by their peer
    address. The first X-Forwarded-For address is used instead only when
    RATE_LIMIT_TRUST_FORWARDED_FOR is set.

    Args:
        request: FastAPI request object

    Returns:
        Rate limit key
    """
    if settings.RATE_LIMIT_TRUST_FORWARDED_FOR:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[settings.RATE_LIMIT_DEFAULT] if settings.RATE_LIMIT_ENABLED else [],
    storage_uri=settings.RATE_LIMIT_STORAGE_URL,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
