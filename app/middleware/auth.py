"""
LearnLoop Backend - Auth Gate
=============================

FastAPI dependency that resolves the caller of a protected route.

Token lookup order:
    1. the `token` cookie (browser clients)
    2. `Authorization: Bearer <token>` header

No token → 401 "Unauthorized access, token not found"
Invalid or expired token → 401
Valid token for a deleted user → 404 "User not found"
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.models.user import User
from app.services.auth_service import auth_service


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    token = extract_token(request)
    if not token:
        raise AuthenticationError(message="Unauthorized access, token not found")
    return await auth_service.get_user_for_token(db, token)
