"""
Profile fan-out update.

A user's display name and photo are copied onto every article they authored
and every comment they wrote. Changing the profile rewrites all three tables
in one transaction.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.models import Article, Comment, User

logger = logging.getLogger(__name__)


class ProfileUpdateError(Exception):
    """Raised when the user row itself could not be updated."""


@dataclass
class ProfileUpdateResult:
    users_updated: int
    articles_updated: int
    comments_updated: int


async def _update_user(db: AsyncSession, email: str, name: Optional[str], photo: Optional[str]) -> int:
    result = await db.execute(
        update(User)
        .where(User.email == email)
        .values(name=name, photo=photo, updated_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def _propagate_to_articles(
    db: AsyncSession, email: str, name: Optional[str], photo: Optional[str]
) -> int:
    result = await db.execute(
        update(Article)
        .where(Article.author_email == email)
        .values(author_name=name, author_image=photo)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def _propagate_to_comments(
    db: AsyncSession, email: str, name: Optional[str], photo: Optional[str]
) -> int:
    result = await db.execute(
        update(Comment)
        .where(Comment.user_email == email)
        .values(user_name=name, user_image=photo)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


async def update_profile(
    db: AsyncSession,
    email: str,
    name: Optional[str],
    photo: Optional[str],
) -> ProfileUpdateResult:
    """
    Update the user's name/photo and mirror them onto authored content.

    All three writes commit together or not at all: any failure, including a
    missing user row, rolls the whole unit back before the error propagates.

    Raises:
        ProfileUpdateError: If no user row matched ``email``
    """
    try:
        users_updated = await _update_user(db, email, name, photo)
        if users_updated == 0:
            raise ProfileUpdateError("Failed to update user profile")

        articles_updated = await _propagate_to_articles(db, email, name, photo)
        comments_updated = await _propagate_to_comments(db, email, name, photo)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    # Bulk updates bypass the identity map
    db.expire_all()

    logger.info(
        "Profile updated for %s (%d articles, %d comments)",
        email,
        articles_updated,
        comments_updated,
    )
    return ProfileUpdateResult(
        users_updated=users_updated,
        articles_updated=articles_updated,
        comments_updated=comments_updated,
    )
