"""
API request and response schemas.
"""

from .auth import LoginRequest, TokenResponse
from .common import CamelModel, DataResponse, MessageResponse, Page, PageResponse
from .user import (
    AdminStatusResponse,
    ProfileUpdateRequest,
    SubscriptionStatusResponse,
    UserCreateRequest,
    UserResponse,
)

__all__ = [
    "CamelModel",
    "DataResponse",
    "MessageResponse",
    "Page",
    "PageResponse",
    "LoginRequest",
    "TokenResponse",
    "AdminStatusResponse",
    "ProfileUpdateRequest",
    "SubscriptionStatusResponse",
    "UserCreateRequest",
    "UserResponse",
]
