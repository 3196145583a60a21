"""
Request throttling (slowapi).

Every route gets the global limit through SlowAPIMiddleware; routes that
need their own budget decorate themselves with `limiter.limit(...)`.
Clients are keyed by remote address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from shortlink_app.config import settings


def per_seconds(limit: int, seconds: int) -> str:
    return f"{limit} per {seconds} seconds"


GLOBAL_LIMIT = per_seconds(settings.throttle_global_limit, settings.throttle_global_ttl)
HEALTH_LIMIT = per_seconds(settings.throttle_health_limit, settings.throttle_health_ttl)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[GLOBAL_LIMIT],
    enabled=settings.rate_limit_enabled,
)
