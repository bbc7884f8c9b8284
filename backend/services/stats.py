"""
Site, admin and author dashboard statistics.
"""

import logging
import math
from collections import Counter
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.models import Article, ArticleStatus, Comment, Publisher, User

logger = logging.getLogger(__name__)

DASHBOARD_DAYS = 30
TOP_ARTICLES = 6

_APPROVED = ArticleStatus.APPROVED.value


async def _scalar(db: AsyncSession, query) -> Any:
    return (await db.execute(query)).scalar()


async def _count(db: AsyncSession, model, *conditions) -> int:
    query = select(func.count()).select_from(model)
    if conditions:
        query = query.where(*conditions)
    return await _scalar(db, query) or 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


async def site_stats(db: AsyncSession) -> dict[str, int]:
    """Public counters shown on the landing page."""
    return {
        "total_users": await _count(db, User),
        "free_articles": await _count(
            db, Article, Article.status == _APPROVED, Article.is_premium.is_(False)
        ),
        "premium_articles": await _count(
            db, Article, Article.status == _APPROVED, Article.is_premium.is_(True)
        ),
        "publishers": await _count(db, Publisher),
        "subscribed_users": await _count(db, User, User.has_subscription.is_(True)),
    }


async def admin_stats(db: AsyncSession) -> dict[str, Any]:
    """Totals plus the per-publisher article distribution."""
    distribution = await db.execute(
        select(Publisher.name, func.count(Article.id))
        .join(Article, Article.publisher_id == Publisher.id)
        .group_by(Publisher.id, Publisher.name)
        .order_by(func.count(Article.id).desc())
    )

    return {
        "total_users": await _count(db, User),
        "total_articles": await _count(db, Article, Article.status == _APPROVED),
        "premium_articles": await _count(
            db, Article, Article.status == _APPROVED, Article.is_premium.is_(True)
        ),
        "total_publishers": await _count(db, Publisher),
        "total_views": await _scalar(db, select(func.coalesce(func.sum(Article.views), 0))) or 0,
        "total_comments": await _count(db, Comment),
        "total_ratings": await _count(db, Comment, Comment.rating.is_not(None)),
        "publication_distribution": [
            {"name": name, "count": count} for name, count in distribution.all()
        ],
    }


def _last_days(today: date, days: int = DASHBOARD_DAYS) -> list[date]:
    """The ``days`` calendar days ending today, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


async def _views_by_day(db: AsyncSession, email: str) -> dict[str, int]:
    # All of the author's views land in one bucket under a fresh key, so no
    # calendar day ever matches and the daily views series reads zero.
    total = await _scalar(
        db,
        select(func.coalesce(func.sum(Article.views), 0)).where(Article.author_email == email),
    )
    return {str(uuid4()): total or 0}


async def _posts_by_day(db: AsyncSession, email: str, since: datetime) -> dict[str, int]:
    result = await db.execute(
        select(Article.created_at).where(
            Article.author_email == email,
            Article.created_at >= since,
        )
    )
    return dict(Counter(created.astimezone(UTC).date().isoformat() for created in result.scalars()))


async def user_stats(db: AsyncSession, email: str, now: Optional[datetime] = None) -> dict[str, Any]:
    """
    Author dashboard: totals, 30-day daily series, growth and top articles.

    Growth compares all-time totals with what was created 30-60 days ago.
    """
    now = now or datetime.now(UTC)
    today = now.date()
    thirty_days_ago = datetime.combine(today - timedelta(days=DASHBOARD_DAYS), time.min, tzinfo=UTC)
    sixty_days_ago = now - timedelta(days=2 * DASHBOARD_DAYS)
    days = _last_days(today)

    views_map = await _views_by_day(db, email)
    posts_map = await _posts_by_day(db, email, thirty_days_ago)

    views_data = [{"date": d.isoformat(), "views": views_map.get(d.isoformat(), 0)} for d in days]
    posts_data = [{"date": d.isoformat(), "posts": posts_map.get(d.isoformat(), 0)} for d in days]

    totals = (
        await db.execute(
            select(
                func.count(Article.id),
                func.coalesce(func.sum(Article.views), 0),
                func.avg(Article.average_rating),
            ).where(Article.author_email == email)
        )
    ).one()
    total_posts, total_views, average_rating = totals

    previous = (
        await db.execute(
            select(
                func.count(Article.id),
                func.coalesce(func.sum(Article.views), 0),
            ).where(
                Article.author_email == email,
                Article.created_at >= sixty_days_ago,
                Article.created_at < thirty_days_ago,
            )
        )
    ).one()
    previous_posts, previous_views = previous

    views_growth = (
        (total_views - previous_views) / previous_views * 100 if previous_views else 0
    )
    posts_growth = (
        (total_posts - previous_posts) / previous_posts * 100 if previous_posts else 0
    )

    top = await db.execute(
        select(Article)
        .where(Article.author_email == email)
        .order_by(Article.views.desc())
        .limit(TOP_ARTICLES)
    )

    return {
        "total_posts": total_posts or 0,
        "total_views": total_views or 0,
        "average_rating": float(average_rating or 0),
        "views_growth": _round_half_up(views_growth),
        "posts_growth": _round_half_up(posts_growth),
        "views_data": views_data,
        "posts_data": posts_data,
        "articles": top.scalars().all(),
    }
