"""
SQLAlchemy database models.
"""

from .base import Base, CreatedAtMixin, TimestampMixin, UTCDateTime
from .billing import Payment, PaymentStatus, Plan
from .contact import ContactMessage, MessageStatus
from .content import Article, ArticleStatus, ArticleTag, Comment, Publisher
from .user import User, UserRole

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UTCDateTime",
    "User",
    "UserRole",
    "Publisher",
    "Article",
    "ArticleTag",
    "ArticleStatus",
    "Comment",
    "Plan",
    "Payment",
    "PaymentStatus",
    "ContactMessage",
    "MessageStatus",
]
