"""
Shared schema base and response envelopes.

Every response body is ``{"success": bool, ...}`` with camelCase keys.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Envelope carrying only a message."""

    success: bool = True
    message: str


class DataResponse(CamelModel, Generic[T]):
    """Envelope carrying a payload."""

    success: bool = True
    message: Optional[str] = None
    data: T


class PageResponse(CamelModel, Generic[T]):
    """Envelope for one page of a paginated listing."""

    success: bool = True
    data: list[T]
    total: int
    page: int
    limit: int
    total_pages: int


class Page(CamelModel, Generic[T]):
    """Paginated payload nested inside ``data``."""

    articles: list[T]
    total: int
    page: int
    limit: int
    total_pages: int
