"""
API dependencies for authentication and authorization.

``get_token_claims`` is the access guard: it only verifies the bearer token.
Role and subscription checks are guards from :mod:`services.guards`, composed
per route with :func:`require`.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.stripe_adapter import create_stripe_adapter
from core.interfaces.services import CheckoutProvider
from core.security.tokens import TokenPayload, TokenService
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from services.guards import Guard, GuardContext, active_subscription, admin_role, run_guards

UNAUTHORIZED = "Unauthorized Access"


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
    )


def get_checkout_provider() -> CheckoutProvider:
    """Checkout provider used by the payment routes; overridden in tests."""
    return create_stripe_adapter()


async def get_token_claims(
    authorization: Annotated[str | None, Header()] = None,
    token_service: TokenService = Depends(get_token_service),
) -> TokenPayload:
    """
    Access guard: verify the bearer token and expose its claims.

    Raises 401 when the header is missing, malformed, or the token fails
    signature or expiry checks.
    """
    token = None
    if authorization:
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
            token = parts[1].strip()

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = token_service.verify_access_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_guard_context(
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
) -> GuardContext:
    return GuardContext(claims=claims, db=db)


async def enforce(ctx: GuardContext, *guards: Guard) -> None:
    """Run guards in order and raise the first denial as an HTTPException."""
    decision = await run_guards(ctx, guards)
    if not decision.allowed:
        raise HTTPException(status_code=decision.status_code, detail=decision.reason)


def require(*guards: Guard):
    """
    Build a dependency that runs ``guards`` in order after the access guard.

    The first denial becomes an HTTPException; on success the dependency
    returns the GuardContext so handlers can reuse the loaded user.
    """

    async def dependency(
        ctx: Annotated[GuardContext, Depends(get_guard_context)],
    ) -> GuardContext:
        await enforce(ctx, *guards)
        return ctx

    return dependency


require_admin = require(admin_role)
require_subscription = require(active_subscription)


def ensure_same_email(claims: TokenPayload, email: str) -> None:
    """Per-user endpoints only answer for the token's own email."""
    if (claims.email or claims.sub) != email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized access",
        )
