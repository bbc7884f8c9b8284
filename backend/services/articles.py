"""
Article queries: filtered listings, the authoring quota and rating upkeep.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from fastapi import status
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.utils import escape_like
from core.domain.subscription import is_active
from infrastructure.database.models import Article, ArticleStatus, ArticleTag, Comment, Publisher
from services.guards import GuardContext, GuardDecision, expire_subscription

logger = logging.getLogger(__name__)

# Articles a user without a live subscription may author
FREE_ARTICLE_LIMIT = 1

ARTICLE_LIMIT_REACHED = "Subscribe to post more than one article"


@dataclass
class ArticleFilters:
    """Listing filters shared by the public and premium article lists."""

    search: Optional[str] = None
    publisher_id: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    statuses: list[str] = field(default_factory=list)
    premium_only: bool = False

    @classmethod
    def premium(cls, **kwargs) -> "ArticleFilters":
        """Premium list: approved premium articles only, whatever else is asked."""
        kwargs.pop("statuses", None)
        return cls(statuses=[ArticleStatus.APPROVED.value], premium_only=True, **kwargs)


def parse_tags(raw: Optional[str]) -> list[str]:
    """Split a comma-separated ``tags`` query value."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def apply_filters(query: Select, filters: ArticleFilters) -> Select:
    if filters.statuses:
        query = query.where(Article.status.in_(filters.statuses))
    if filters.premium_only:
        query = query.where(Article.is_premium.is_(True))
    if filters.search:
        pattern = f"%{escape_like(filters.search)}%"
        query = query.where(
            or_(
                Article.title.ilike(pattern, escape="\\"),
                Article.content.ilike(pattern, escape="\\"),
            )
        )
    if filters.publisher_id:
        query = query.where(Article.publisher_id == filters.publisher_id)
    if filters.tags:
        # Match-any over tag values
        query = query.where(
            Article.id.in_(
                select(ArticleTag.article_id).where(ArticleTag.value.in_(filters.tags))
            )
        )
    return query


async def list_articles(
    db: AsyncSession,
    filters: ArticleFilters,
    page: int,
    limit: int,
) -> tuple[Sequence[Article], int]:
    """
    Return one newest-first page of filtered articles and the filtered total.

    Only articles whose publisher exists are listed.
    """
    query = apply_filters(select(Article).join(Article.publisher), filters)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = (
        query.order_by(Article.created_at.desc(), Article.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(query)
    return result.scalars().all(), total


async def count_authored(db: AsyncSession, email: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Article).where(Article.author_email == email)
    )
    return result.scalar() or 0


async def check_authoring_allowed(ctx: GuardContext) -> GuardDecision:
    """
    Authoring gate: without a live subscription a user may author one article.

    Read-then-act: two concurrent creations by the same user can both pass.
    """
    user = await ctx.load_user()
    if user is None:
        return GuardDecision.deny(status.HTTP_404_NOT_FOUND, "User not found")

    await expire_subscription(ctx.db, user)
    if is_active(user.has_subscription, user.subscription_end):
        return GuardDecision.allow()

    if await count_authored(ctx.db, user.email) >= FREE_ARTICLE_LIMIT:
        return GuardDecision.deny(status.HTTP_403_FORBIDDEN, ARTICLE_LIMIT_REACHED)
    return GuardDecision.allow()


async def get_article(db: AsyncSession, article_id: str) -> Optional[Article]:
    """Load an article with its publisher and tags."""
    result = await db.execute(
        select(Article)
        .where(Article.id == article_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_publisher(db: AsyncSession, publisher_id: str) -> Optional[Publisher]:
    result = await db.execute(select(Publisher).where(Publisher.id == publisher_id))
    return result.scalar_one_or_none()


async def add_comment(
    db: AsyncSession,
    article: Article,
    *,
    user_email: str,
    user_name: Optional[str],
    user_image: Optional[str],
    rating: int,
    body: str,
) -> Comment:
    """
    Store a comment and refresh the article's rating list and average.

    The average is the mean of every comment rating on the article.
    Caller commits.
    """
    comment = Comment(
        article_id=article.id,
        user_email=user_email,
        user_name=user_name,
        user_image=user_image,
        rating=rating,
        comment=body,
    )
    db.add(comment)
    await db.flush()

    average = (
        await db.execute(select(func.avg(Comment.rating)).where(Comment.article_id == article.id))
    ).scalar()

    # Reassign so the JSON column is marked dirty
    article.ratings = [*(article.ratings or []), rating]
    article.average_rating = float(average or 0)

    logger.info(
        "Comment added to article %s, average rating now %.2f", article.id, article.average_rating
    )
    return comment
