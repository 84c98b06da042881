"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from vcnotebook.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

RATE_LIMITS = {
    # Checkout sessions cost a provider round trip
    "checkout_create": "10/minute",
    # Providers retry in bursts; keep headroom
    "webhook": "300/minute",
    "config_read": "120/minute",
}
