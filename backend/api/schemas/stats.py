"""
Statistics response schemas.
"""

from datetime import datetime
from typing import Optional

from .common import CamelModel


class SiteStats(CamelModel):
    total_users: int
    free_articles: int
    premium_articles: int
    publishers: int
    subscribed_users: int


class PublicationCount(CamelModel):
    name: str
    count: int


class AdminStats(CamelModel):
    total_users: int
    total_articles: int
    premium_articles: int
    total_publishers: int
    total_views: int
    total_comments: int
    total_ratings: int
    publication_distribution: list[PublicationCount]


class DailyViews(CamelModel):
    date: str
    views: int


class DailyPosts(CamelModel):
    date: str
    posts: int


class TopArticle(CamelModel):
    id: str
    title: str
    image: Optional[str] = None
    views: int
    created_at: datetime


class UserStats(CamelModel):
    total_posts: int
    total_views: int
    average_rating: float
    views_growth: int
    posts_growth: int
    views_data: list[DailyViews]
    posts_data: list[DailyPosts]
    articles: list[TopArticle]


class UserStatsResponse(CamelModel):
    """Author dashboard envelope: ``{success, stats}``."""

    success: bool = True
    stats: UserStats
