"""
LearnLoop Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, each bound to an HTTP status code.
How:   Each exception carries a user-facing message and an optional context
       dict. A single global handler (registered in main.py) renders every
       AppError as an error envelope with the matching status code.
Who:   Raised by services and the auth gate; caught by the global handler.

Exception Hierarchy:
    AppError (base)                → 500
    ├── ValidationError            → 400 Bad Request (client can fix)
    ├── OAuthError                 → 400 Bad Request (bad authorization code)
    ├── AuthenticationError        → 401 Unauthorized
    ├── NotFoundError              → 404 Not Found (also: not owned by caller)
    ├── RateLimitExceededError     → 429 Too Many Requests (our limiter)
    ├── UpstreamRateLimitError     → 429 Too Many Requests (AI provider quota)
    ├── AIResponseError            → 500 (AI output unusable)
    ├── FileStorageError           → 500
    ├── DatabaseError              → 500
    └── LLMServiceError            → 503 Service Unavailable

Security Note:
    `message` is safe to return to clients. `context` is logged server-side
    only and never included in a response.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base exception for all LearnLoop application errors.

    Attributes:
        status_code: HTTP status mirrored into the envelope's `statusCode`
        message:     User-facing error description
        context:     Additional debug info (logged, NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """
    Raised when client input fails a business rule.

    When: missing fields, title length, unsupported file type, duplicate
    email on register, duration out of range.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class OAuthError(AppError):
    """Raised when the Google authorization code cannot be exchanged for an identity."""

    status_code = 400

    def __init__(
        self,
        message: str = "Google authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(AppError):
    """
    Raised when the caller cannot be authenticated.

    When: missing/invalid/expired token, wrong credentials, provider mismatch
    on local login.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(AppError):
    """
    Raised when a requested resource does not exist for the caller.

    Owner-scoped lookups raise this for resources owned by someone else, so a
    foreign id is indistinguishable from a missing one.
    """

    status_code = 404

    def __init__(
        self,
        message: str = "The requested resource was not found",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(AppError):
    """Raised when a client exceeds the per-IP request rate limit."""

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class UpstreamRateLimitError(AppError):
    """Raised when the AI provider rejects a call for quota or rate reasons."""

    status_code = 429

    def __init__(
        self,
        message: str = "Too many requests. Please try again later",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.retry_after = retry_after


class AIResponseError(AppError):
    """
    Raised when the AI answered but its output cannot be used.

    When: empty response, no JSON object in the text, invalid JSON, missing
    `dailyPlan` list, duplicate day numbers in a generated plan.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Failed to process AI response",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(AppError):
    """Raised when reading, writing or deleting a stored file fails."""

    status_code = 500

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(AppError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQLAlchemy
    error is logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(AppError):
    """
    Raised when the AI text-generation service is unreachable or failing.

    HTTP 503: the client may try again later. There is no automatic retry.
    """

    status_code = 503

    def __init__(
        self,
        message: str = "AI service temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
