"""
Rate Limiter Configuration

Uses Redis storage when REDIS_URL is set (multiple instances),
otherwise in-memory storage.
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from ..config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """Get real client IP behind reverse proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    """
    Create a rate limiter with appropriate storage backend.
    """
    if settings.redis_url:
        logger.info("Using Redis rate limiter storage")
        return Limiter(
            key_func=get_real_client_ip,
            storage_uri=settings.redis_url,
            enabled=settings.rate_limit_enabled,
        )

    return Limiter(
        key_func=get_real_client_ip,
        enabled=settings.rate_limit_enabled,
    )


# Global rate limiter instance
limiter = create_limiter()


RATE_LIMITS = {
    # Seller-side writes
    "inventory_write": "120/minute",
    # Booking-side capacity consumption
    "capacity_consume": "300/minute",
    # Calendar reads and payment quotes
    "calendar_read": "600/minute",
    "payment_quote": "600/minute",
}
