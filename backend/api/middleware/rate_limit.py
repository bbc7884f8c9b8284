"""
Rate limiting middleware using slowapi.

Requests are keyed by client IP. A global default applies to every route via
SlowAPIMiddleware; the endpoints below that accept anonymous or paid traffic
carry a tighter per-route limit.

Rate Limits:
- Login: 5 requests per minute
- Contact form: 5 requests per minute
- Checkout creation: 10 requests per minute
- Default: 100 requests per minute
"""

import ipaddress
import logging
import re

from starlette.requests import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)

# Quick reject for values that cannot be an IP before parsing
_IP_LIKE = re.compile(r"^[\d.:a-fA-F]+$")


def _is_valid_ip(value: str) -> bool:
    """Return True if *value* looks like a valid IPv4 or IPv6 address."""
    if not _IP_LIKE.match(value):
        return False
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        return False


def _is_private_ip(value: str) -> bool:
    """Return True if *value* is a private, loopback, or link-local address.

    Private addresses in X-Forwarded-For can be spoofed to share a bucket
    with the proxy itself, so they are not trusted.
    """
    try:
        addr = ipaddress.ip_address(value)
        return addr.is_private or addr.is_loopback or addr.is_link_local
    except ValueError:
        return False


def _get_real_ip(request: Request) -> str:
    """Extract the client IP from proxy headers, falling back to the peer address.

    The first X-Forwarded-For entry (then X-Real-IP) is used only when it is a
    valid public address.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        candidate = forwarded.split(",")[0].strip()
        if _is_valid_ip(candidate) and not _is_private_ip(candidate):
            return candidate
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        candidate = real_ip.strip()
        if _is_valid_ip(candidate) and not _is_private_ip(candidate):
            return candidate
    return get_remote_address(request)


# Format: "count/period" where period can be: second, minute, hour, day
RATE_LIMITS = {
    "login": "5/minute",
    "contact": "5/minute",
    "checkout": "10/minute",
    "default": "100/minute",
}

if settings.rate_limit_storage_uri.startswith("memory://") and settings.is_production:
    logger.warning(
        "Rate limiter using in-memory storage; limits are per worker process"
    )

limiter = Limiter(
    key_func=_get_real_ip,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[RATE_LIMITS["default"]],
    enabled=settings.rate_limit_enabled,
)


def get_rate_limit(endpoint: str) -> str:
    """
    Get rate limit configuration for a specific endpoint.

    Example:
        >>> get_rate_limit("login")
        "5/minute"
        >>> get_rate_limit("unknown")
        "100/minute"
    """
    return RATE_LIMITS.get(endpoint, RATE_LIMITS["default"])
