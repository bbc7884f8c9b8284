# Domain rules
# Pure business logic with no external dependencies
from .subscription import (
    MINUTES_PER_UNIT,
    duration_in_minutes,
    ensure_utc,
    is_active,
    is_expired,
    needs_expiry,
    window_end,
)

__all__ = [
    "MINUTES_PER_UNIT",
    "duration_in_minutes",
    "ensure_utc",
    "is_active",
    "is_expired",
    "needs_expiry",
    "window_end",
]
