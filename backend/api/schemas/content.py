"""
Content API schemas for articles, tags, publishers and comments.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .common import CamelModel

# ============================================================================
# Publisher Schemas
# ============================================================================


class PublisherCreateRequest(CamelModel):
    """Both fields are required; blank values are rejected by the handler."""

    name: Optional[str] = Field(None, max_length=255)
    logo: Optional[str] = Field(None, max_length=1000)


class PublisherResponse(CamelModel):
    id: str
    name: str
    logo: str
    created_at: datetime


# ============================================================================
# Article Schemas
# ============================================================================


class TagSchema(CamelModel):
    """Tag as the client's tag picker sends it."""

    value: str = Field(..., min_length=1, max_length=100)
    label: str = Field(..., min_length=1, max_length=100)


class ArticleCreateRequest(CamelModel):
    """Request to submit a new article; it starts out pending review."""

    title: str = Field(..., min_length=1, max_length=500)
    image: str = Field(..., min_length=1, max_length=1000)
    publisher: str = Field(..., min_length=1, description="Publisher ID")
    tags: list[TagSchema] = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    author_name: Optional[str] = Field(None, max_length=255)
    author_image: Optional[str] = Field(None, max_length=1000)


class ArticleUpdateRequest(CamelModel):
    """Author edit; only fields that are sent are changed."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    image: Optional[str] = Field(None, min_length=1, max_length=1000)
    publisher: Optional[str] = Field(None, min_length=1)
    tags: Optional[list[TagSchema]] = None
    description: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)


class ArticleStatusRequest(CamelModel):
    status: str
    declined_reason: Optional[str] = None


class ArticleResponse(CamelModel):
    """Full article, joined with its publisher."""

    id: str
    title: str
    image: str
    description: str
    content: str
    publisher_id: str
    publisher: Optional[PublisherResponse] = None
    tags: list[TagSchema] = []
    author_email: str
    author_name: Optional[str] = None
    author_image: Optional[str] = None
    is_premium: bool
    status: str
    declined_reason: Optional[str] = None
    views: int
    ratings: list[int] = []
    average_rating: float
    created_at: datetime
    updated_at: datetime


class ArticleSummary(CamelModel):
    """Compact projection used to pre-check the authoring limit."""

    id: str
    title: str
    status: str
    is_premium: bool
    created_at: datetime


# ============================================================================
# Comment Schemas
# ============================================================================


class CommentCreateRequest(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class CommentResponse(CamelModel):
    id: str
    article_id: str
    user_email: str
    user_name: Optional[str] = None
    user_image: Optional[str] = None
    rating: int
    comment: str
    created_at: datetime
