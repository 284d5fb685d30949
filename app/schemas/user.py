"""Authentication request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: Optional[str] = Field(default=None, description="Display name (min 3 chars)")
    email: Optional[str] = Field(default=None, description="Unique email address")
    password: Optional[str] = Field(default=None, description="Password (min 4 chars)")


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLoginRequest(CamelModel):
    code: Optional[str] = Field(
        default=None,
        description="Authorization code from the Google sign-in popup",
    )


class UpdateProfileRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None


class UserResponse(CamelModel):
    """Public view of a user. Never includes the password hash."""

    id: uuid.UUID
    name: str
    email: str
    auth_provider: str
    created_at: datetime
    updated_at: datetime


class LoginResponse(CamelModel):
    """
    Returned by both login flows. The same token is also set as the
    http-only `token` cookie; non-browser clients send it as a bearer token.
    """

    user: UserResponse
    token: str
