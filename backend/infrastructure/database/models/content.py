"""
Content database models: Publisher, Article, ArticleTag and Comment.
"""

from enum import Enum
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, CreatedAtMixin, TimestampMixin


class ArticleStatus(str, Enum):
    """Editorial workflow status."""

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class Publisher(Base, CreatedAtMixin):
    """Publication an article is filed under."""

    __tablename__ = "publishers"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    logo: Mapped[str] = mapped_column(String(1000), nullable=False)

    articles: Mapped[List["Article"]] = relationship(back_populates="publisher")

    def __repr__(self) -> str:
        return f"<Publisher {self.name}>"


class Article(Base, TimestampMixin):
    """Article model."""

    __tablename__ = "articles"

    # Primary key
    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # Content
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    image: Mapped[str] = mapped_column(String(1000), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    publisher_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("publishers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Author back-reference (denormalized; kept in sync by the profile fan-out)
    author_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    author_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    author_image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Editorial
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        default=ArticleStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    declined_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Engagement
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ratings: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    publisher: Mapped["Publisher"] = relationship(back_populates="articles", lazy="selectin")
    tags: Mapped[List["ArticleTag"]] = relationship(
        back_populates="article",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="article",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_articles_status_premium", "status", "is_premium"),
    )

    def __repr__(self) -> str:
        return f"<Article {self.title[:40]!r} status={self.status}>"


class ArticleTag(Base):
    """Tag attached to an article; `value` is what filters match on."""

    __tablename__ = "article_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(100), nullable=False)

    article: Mapped["Article"] = relationship(back_populates="tags")


class Comment(Base, CreatedAtMixin):
    """Reader comment with a 1-5 rating."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    article_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Commenter identity (denormalized; kept in sync by the profile fan-out)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    user_image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)

    article: Mapped["Article"] = relationship(back_populates="comments")
