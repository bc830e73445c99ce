from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import MODERATE_RATE_LIMIT, RATE_LIMIT_ENABLED, STRICT_RATE_LIMIT, TRUSTED_PROXIES


def get_rate_limit_key(request: Request) -> str:
    """Client address; X-Forwarded-For only counts when a trusted proxy sent it."""
    peer = get_remote_address(request)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and peer in TRUSTED_PROXIES:
        return forwarded.split(",")[0].strip()
    return peer


limiter = Limiter(key_func=get_rate_limit_key, enabled=RATE_LIMIT_ENABLED)

strict_limit = limiter.limit(STRICT_RATE_LIMIT)
moderate_limit = limiter.limit(MODERATE_RATE_LIMIT)
