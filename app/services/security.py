"""
LearnLoop Backend - Password Hashing & Access Tokens
====================================================

What:  bcrypt password hashing (passlib) and JWT access tokens (python-jose).
Who:   User model (hash/verify), AuthService (issue), auth gate (decode).

Token payload:
    {"_id": "<user uuid>", "email": "...", "name": "...", "exp": <unix ts>}
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(
    user_id: str,
    email: str,
    name: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Signs a token carrying the user's id, email and name."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.jwt_expire_days)
    )
    payload = {"_id": user_id, "email": email, "name": name, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifies signature and expiry.

    Raises:
        AuthenticationError: token is malformed, tampered with, expired, or
            does not carry a user id.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected access token: %s", str(e))
        raise AuthenticationError(message="Unauthorized access")

    if not payload.get("_id"):
        raise AuthenticationError(message="Unauthorized access")
    return payload
