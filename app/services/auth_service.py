"""
LearnLoop Backend - Auth Service
================================

What:  Account lifecycle: local registration and login, Google login, token
       resolution for the auth gate, and profile updates.
How:   Validates input, reads/writes `users` through the request's session,
       issues JWTs via app.services.security.
Who:   Called by the auth routes and by the `get_current_user` dependency.

Login results:
    Both login flows return LoginResponse {user, token}. The route also sets
    the token as an http-only cookie.
"""

import logging
import re
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.user import AUTH_PROVIDER_GOOGLE, AUTH_PROVIDER_LOCAL, User
from app.schemas.user import (
    GoogleLoginRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
)
from app.services.google_oauth import google_oauth_client
from app.services.security import create_access_token, decode_access_token

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 4


def _validate_name(name: str) -> None:
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError(
            message=f"Name must be at least {MIN_NAME_LENGTH} characters",
            field="name",
        )


def _validate_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(message="Please provide a valid email address", field="email")


class AuthService:
    """Stateless; every method receives the request's session."""

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e))
            raise DatabaseError(context={"operation": "find_user_by_email"})
        return result.scalar_one_or_none()

    def _issue_token(self, user: User) -> LoginResponse:
        token = create_access_token(str(user.id), user.email, user.name)
        return LoginResponse(user=UserResponse.model_validate(user), token=token)

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> UserResponse:
        """
        Creates a local account.

        Raises:
            ValidationError: missing/invalid fields or an email already in use.
        """
        if not payload.name or not payload.email or not payload.password:
            raise ValidationError(message="All fields are required")

        name = payload.name.strip()
        email = payload.email.strip()
        _validate_name(name)
        _validate_email(email)
        if len(payload.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )

        if await self._find_by_email(db, email) is not None:
            raise ValidationError(message="User already exists", field="email")

        user = User(name=name, email=email, auth_provider=AUTH_PROVIDER_LOCAL)
        user.set_password(payload.password)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ValidationError(message="User already exists", field="email")
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e))
            raise DatabaseError(context={"operation": "register"})

        logger.info("Registered local user %s", user.id)
        return UserResponse.model_validate(user)

    async def login(self, db: AsyncSession, payload: LoginRequest) -> LoginResponse:
        """
        Raises:
            ValidationError: email or password missing.
            AuthenticationError: unknown email, wrong password or non-local account.
        """
        if not payload.email or not payload.password:
            raise ValidationError(message="Email and password are required")

        user = await self._find_by_email(db, payload.email.strip())
        if user is None or not user.check_password(payload.password):
            raise AuthenticationError(message="Invalid email or password")

        logger.info("User %s logged in", user.id)
        return self._issue_token(user)

    async def google_login(self, db: AsyncSession, payload: GoogleLoginRequest) -> LoginResponse:
        """
        Exchanges the authorization code, then finds or creates the Google user.

        Raises:
            ValidationError: no code supplied.
            OAuthError: the exchange failed or returned no email.
        """
        if not payload.code:
            raise ValidationError(message="Authorization code is required", field="code")

        claims = await google_oauth_client.exchange_code(payload.code)
        email = claims["email"]

        user = await self._find_by_email(db, email)
        if user is None:
            name = claims.get("name") or email.split("@")[0]
            user = User(name=name, email=email, auth_provider=AUTH_PROVIDER_GOOGLE)
            db.add(user)
            try:
                await db.flush()
            except SQLAlchemyError as e:
                logger.error("Database error creating Google user: %s", str(e))
                raise DatabaseError(context={"operation": "google_login"})
            logger.info("Created Google user %s", user.id)

        return self._issue_token(user)

    async def get_user_for_token(self, db: AsyncSession, token: str) -> User:
        """
        Resolves a bearer/cookie token to its user.

        Raises:
            AuthenticationError: invalid or expired token.
            NotFoundError: the token's user no longer exists.
        """
        payload = decode_access_token(token)
        try:
            user_id = uuid.UUID(str(payload["_id"]))
        except ValueError:
            raise AuthenticationError(message="Unauthorized access")

        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "get_user"})

        if user is None:
            raise NotFoundError(message="User not found")
        return user

    async def update_profile(
        self, db: AsyncSession, user: User, payload: UpdateProfileRequest
    ) -> UserResponse:
        """
        Updates name and/or email of the authenticated user.

        Raises:
            ValidationError: no field given, invalid value, or email owned by
                another account.
        """
        name = payload.name.strip() if payload.name else None
        email = payload.email.strip() if payload.email else None
        if not name and not email:
            raise ValidationError(message="At least one field (name or email) is required")

        if name:
            _validate_name(name)
            user.name = name

        if email and email != user.email:
            _validate_email(email)
            existing = await self._find_by_email(db, email)
            if existing is not None and existing.id != user.id:
                raise ValidationError(message="Email is already in use", field="email")
            user.email = email

        try:
            await db.flush()
        except IntegrityError:
            raise ValidationError(message="Email is already in use", field="email")
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user.id, str(e))
            raise DatabaseError(context={"operation": "update_profile"})

        logger.info("Updated profile for user %s", user.id)
        return UserResponse.model_validate(user)


auth_service = AuthService()
