"""
User request and response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel


class UserCreateRequest(CamelModel):
    """First sign-in registration."""

    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)
    photo: Optional[str] = Field(None, max_length=1000)


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, max_length=255)
    photo: Optional[str] = Field(None, max_length=1000)


class UserResponse(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None
    role: str
    has_subscription: bool
    subscription_end: Optional[datetime] = None
    created_at: datetime


class AdminStatusResponse(CamelModel):
    success: bool = True
    is_admin: bool


class SubscriptionStatusResponse(CamelModel):
    success: bool = True
    has_subscription: bool
    subscription_end: Optional[datetime] = None
