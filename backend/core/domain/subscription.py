"""Subscription window rules."""
from datetime import UTC, datetime, timedelta
from typing import Optional

# Minutes per plan duration unit; anything else grants nothing
MINUTES_PER_UNIT = {
    "minute": 1,
    "days": 24 * 60,
    "months": 30 * 24 * 60,
}


def duration_in_minutes(value: int | float, unit: str | None) -> int:
    """Convert a plan's ``(duration, unit)`` pair into whole minutes.

    >>> duration_in_minutes(2, "days")
    2880
    >>> duration_in_minutes(3, "weeks")
    0
    """
    return int(value * MINUTES_PER_UNIT.get(unit or "", 0))


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_expired(subscription_end: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True when an expiry is set and already in the past."""
    if subscription_end is None:
        return False
    now = now or datetime.now(UTC)
    return ensure_utc(subscription_end) < now


def is_active(
    has_subscription: bool,
    subscription_end: Optional[datetime],
    now: Optional[datetime] = None,
) -> bool:
    """A subscription is active when flagged and not past its (optional) expiry."""
    return bool(has_subscription) and not is_expired(subscription_end, now)


def needs_expiry(
    has_subscription: bool,
    subscription_end: Optional[datetime],
    now: Optional[datetime] = None,
) -> bool:
    """Flagged but lapsed: the stored state must be healed before it is used."""
    return bool(has_subscription) and is_expired(subscription_end, now)


def window_end(minutes: int, now: Optional[datetime] = None) -> datetime:
    """End of a freshly purchased window.

    Starts from ``now`` rather than from any remaining time, so a repeat
    purchase replaces the current window instead of extending it.
    """
    now = now or datetime.now(UTC)
    return now + timedelta(minutes=minutes)
