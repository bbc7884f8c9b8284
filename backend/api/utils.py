"""
Shared API utility functions.
"""

import math
from uuid import UUID

from fastapi import HTTPException, status


def escape_like(value: str) -> str:
    """Escape LIKE wildcards for safe use in SQL LIKE/ILIKE patterns."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` items ``limit`` at a time."""
    return math.ceil(total / limit) if limit > 0 else 0


def require_uuid(
    value: str,
    detail: str = "Not found",
    status_code: int = status.HTTP_404_NOT_FOUND,
) -> str:
    """Return the canonical form of a UUID identifier, or answer with ``status_code``."""
    try:
        return str(UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise HTTPException(status_code=status_code, detail=detail)
