"""
User API routes: registration, profile, roles and subscription status.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import ensure_same_email, get_token_claims, require_admin
from api.schemas.common import MessageResponse, PageResponse
from api.schemas.user import (
    AdminStatusResponse,
    ProfileUpdateRequest,
    SubscriptionStatusResponse,
    UserCreateRequest,
    UserResponse,
)
from api.utils import require_uuid, total_pages
from core.domain.subscription import is_active
from core.security.tokens import TokenPayload
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User, UserRole
from services.guards import GuardContext, expire_subscription
from services.profile import ProfileUpdateError, update_profile

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.post("/users", response_model=MessageResponse)
async def create_user(body: UserCreateRequest, db: AsyncSession = Depends(get_db)):
    """
    Register a user on first sign-in.

    A duplicate email is reported in the body with a 200, not as an error.
    """
    existing = await db.execute(select(User.id).where(User.email == body.email))
    if existing.scalar_one_or_none() is not None:
        return MessageResponse(success=False, message="Email already exists")

    db.add(
        User(
            email=body.email,
            name=body.name,
            photo=body.photo,
            role=UserRole.USER.value,
            has_subscription=False,
            subscription_end=None,
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        await db.rollback()
        return MessageResponse(success=False, message="Email already exists")

    logger.info("Registered user %s", body.email)
    return MessageResponse(message="User Added Successfully")


@router.patch("/users/profile", response_model=MessageResponse)
async def update_user_profile(
    body: ProfileUpdateRequest,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
):
    """Update name/photo and mirror them onto the user's articles and comments."""
    email = claims.email or claims.sub
    try:
        await update_profile(db, email, body.name, body.photo)
    except ProfileUpdateError as e:
        logger.warning("Profile update for %s rejected: %s", email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except Exception:
        logger.exception("Profile update for %s failed", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating profile",
        )
    return MessageResponse(message="Profile updated successfully")


@router.get("/users", response_model=PageResponse[UserResponse])
async def list_users(
    _: Annotated[GuardContext, Depends(require_admin)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """List all users (admin only)."""
    total = (await db.execute(select(func.count()).select_from(User))).scalar() or 0
    result = await db.execute(
        select(User)
        .order_by(User.created_at.desc(), User.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return PageResponse[UserResponse](
        data=[UserResponse.model_validate(u) for u in result.scalars().all()],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.get("/users/admin/{email}", response_model=AdminStatusResponse)
async def check_admin(
    email: str,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
):
    ensure_same_email(claims, email)
    result = await db.execute(select(User.role).where(User.email == email))
    role = result.scalar_one_or_none()
    return AdminStatusResponse(is_admin=role == UserRole.ADMIN.value)


@router.patch("/make-admin/{user_id}", response_model=MessageResponse)
async def make_admin(
    user_id: str,
    _: Annotated[GuardContext, Depends(require_admin)],
    db: AsyncSession = Depends(get_db),
):
    """Promote a user to admin (admin only)."""
    user_id = require_uuid(user_id, "User not found")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user.role = UserRole.ADMIN.value
    await db.commit()
    logger.info("User %s promoted to admin", user.email)
    return MessageResponse(message="User has been made admin successfully")


@router.get("/users/subscription/{email}", response_model=SubscriptionStatusResponse)
async def subscription_status(
    email: str,
    claims: Annotated[TokenPayload, Depends(get_token_claims)],
    db: AsyncSession = Depends(get_db),
):
    """
    Report whether the user's subscription is live.

    A flagged user whose window has lapsed is corrected on read.
    """
    ensure_same_email(claims, email)
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        return SubscriptionStatusResponse(has_subscription=False)

    await expire_subscription(db, user)
    active = is_active(user.has_subscription, user.subscription_end)
    return SubscriptionStatusResponse(
        has_subscription=active,
        subscription_end=user.subscription_end if active else None,
    )
