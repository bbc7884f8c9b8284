"""
Request guards.

A guard is an async predicate over a :class:`GuardContext` that either
allows the request to continue or denies it with a status code and reason.
Guards run in order through :func:`run_guards`; the first denial wins and
later guards never run.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.subscription import needs_expiry
from core.security.tokens import TokenPayload
from infrastructure.database.models.user import User, UserRole

logger = logging.getLogger(__name__)

SUBSCRIPTION_REQUIRED = "This content requires an active subscription"
SUBSCRIPTION_EXPIRED = "Your subscription has expired"
FORBIDDEN = "Forbidden Access"


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of a single guard."""

    allowed: bool
    status_code: int = status.HTTP_200_OK
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, status_code: int, reason: str) -> "GuardDecision":
        return cls(allowed=False, status_code=status_code, reason=reason)


@dataclass
class GuardContext:
    """What guards can see: verified claims plus a session for lookups."""

    claims: TokenPayload
    db: AsyncSession
    user: Optional[User] = None
    _user_loaded: bool = field(default=False, init=False, repr=False)

    @property
    def email(self) -> str:
        return self.claims.email or self.claims.sub

    async def load_user(self) -> Optional[User]:
        """Fetch the authenticated user once per request."""
        if not self._user_loaded:
            result = await self.db.execute(select(User).where(User.email == self.email))
            self.user = result.scalar_one_or_none()
            self._user_loaded = True
        return self.user


Guard = Callable[[GuardContext], Awaitable[GuardDecision]]


async def expire_subscription(db: AsyncSession, user: User, now: Optional[datetime] = None) -> bool:
    """
    Clear a lapsed subscription window and commit the correction.

    Returns True when a write happened. Two racing requests may both write;
    the update is idempotent.
    """
    if not needs_expiry(user.has_subscription, user.subscription_end, now):
        return False

    user.has_subscription = False
    user.subscription_end = None
    await db.commit()
    logger.info("Expired lapsed subscription for %s", user.email)
    return True


async def admin_role(ctx: GuardContext) -> GuardDecision:
    """Allow only users whose stored role is admin."""
    user = await ctx.load_user()
    if user is None or user.role != UserRole.ADMIN.value:
        return GuardDecision.deny(status.HTTP_403_FORBIDDEN, FORBIDDEN)
    return GuardDecision.allow()


async def active_subscription(ctx: GuardContext) -> GuardDecision:
    """
    Allow only users with a live subscription.

    A flagged user whose window has lapsed is healed and still denied on this
    request; the next request sees the corrected state.
    """
    user = await ctx.load_user()
    if user is None or not user.has_subscription:
        return GuardDecision.deny(status.HTTP_403_FORBIDDEN, SUBSCRIPTION_REQUIRED)

    if await expire_subscription(ctx.db, user):
        return GuardDecision.deny(status.HTTP_403_FORBIDDEN, SUBSCRIPTION_EXPIRED)

    return GuardDecision.allow()


async def run_guards(ctx: GuardContext, guards: Sequence[Guard]) -> GuardDecision:
    """Run guards in order and return the first denial, or allow."""
    for guard in guards:
        decision = await guard(ctx)
        if not decision.allowed:
            logger.info(
                "Guard %s denied %s: %s",
                getattr(guard, "__name__", guard),
                ctx.email,
                decision.reason,
            )
            return decision
    return GuardDecision.allow()
