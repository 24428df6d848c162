"""
schemas/auth.py
---------------
Pydantic models for registration, login and the session cookie exchange.

Security note:
  - Passwords are never echoed back; responses carry the profile only.
  - Email is trimmed and lower-cased before validation.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from box_organizer.core.config import settings
from box_organizer.schemas.common import clean_email
from box_organizer.schemas.profile import ProfileRead


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(
        ...,
        min_length=settings.PASSWORD_MIN_LENGTH,
        max_length=settings.PASSWORD_MAX_LENGTH,
    )
    full_name: Optional[str] = Field(None, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return clean_email(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return clean_email(v)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: ProfileRead


class SessionRequest(BaseModel):
    """Access token to exchange for an HttpOnly session cookie."""
    token: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    user_id: str
    email: str


class DeleteAccountResponse(BaseModel):
    user_id: str
