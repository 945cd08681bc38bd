"""
Authentication request and response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """User response schema."""

    id: str
    email: str
    name: str
    role: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class TokenResponse(CamelModel):
    """Token response schema."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until access token expires
    user: UserResponse
