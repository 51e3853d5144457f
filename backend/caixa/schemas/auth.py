"""
Auth schemas.
"""

from datetime import datetime
from typing import Optional

from caixa.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime


class AuthResponse(CamelModel):
    """Token pair plus the authenticated user."""
    token: str
    refresh_token: str
    expires_in: int  # seconds until the access token expires
    user: UserResponse


class LogoutAllResponse(CamelModel):
    message: str
    revoked: int
