"""
Contact form schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, field_validator, model_validator

from .common import CamelModel


class ContactRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    subject: Optional[str] = None
    message: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_fields(self) -> "ContactRequest":
        if not all((self.name, self.email, self.subject, self.message)):
            raise ValueError("All fields are required")
        return self


class MessageStatusRequest(CamelModel):
    status: Optional[str] = None


class ContactMessageResponse(CamelModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    status: str
    created_at: datetime
