"""
LearnLoop Backend - User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table.
Who:   Used by AuthService and the auth gate; owner of every other entity.

Table Design:
    - email is unique (duplicate registration is rejected in the service,
      the unique index is the last line of defense)
    - password_hash is nullable: Google accounts never have one
    - CHECK constraint: a `local` account must carry a password hash
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin
from app.services.security import hash_password, verify_password

AUTH_PROVIDER_LOCAL = "local"
AUTH_PROVIDER_GOOGLE = "google"
AUTH_PROVIDERS = (AUTH_PROVIDER_LOCAL, AUTH_PROVIDER_GOOGLE)


class User(TimestampMixin, Base):
    """
    An account, authenticated either locally (email + password) or via Google.

    Exactly one provider per user; the provider never changes after creation.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default=None)
    auth_provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AUTH_PROVIDER_LOCAL
    )

    __table_args__ = (
        CheckConstraint(
            "auth_provider IN ('local', 'google')",
            name="ck_users_auth_provider",
        ),
        CheckConstraint(
            "auth_provider <> 'local' OR password_hash IS NOT NULL",
            name="ck_users_local_password",
        ),
        Index("idx_users_name", "name"),
    )

    def set_password(self, password: str) -> None:
        """Hashes and stores a password. Only local accounts have one."""
        if self.auth_provider != AUTH_PROVIDER_LOCAL:
            raise ValueError("Only local accounts can have a password")
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        """Constant-time password check; always False for non-local accounts."""
        if self.auth_provider != AUTH_PROVIDER_LOCAL or not self.password_hash:
            return False
        return verify_password(password, self.password_hash)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', provider='{self.auth_provider}')>"
