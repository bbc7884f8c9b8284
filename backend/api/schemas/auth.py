"""
Authentication request and response schemas.
"""

from typing import Optional

from pydantic import ConfigDict, EmailStr

from .common import CamelModel


class LoginRequest(CamelModel):
    """
    Identity claims submitted after upstream sign-in.

    Extra claims are accepted and embedded in the token as-is.
    """

    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class TokenResponse(CamelModel):
    """Login response: ``{success, uToken, expiresIn}``."""

    success: bool = True
    u_token: str
    expires_in: int  # Seconds until the token expires
