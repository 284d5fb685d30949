"""
LearnLoop Backend - Envelope & Shared Schemas
=============================================

What:  The uniform JSON envelope every endpoint returns, plus the camelCase
       base model shared by all request/response schemas.

Envelope:
    success: {"statusCode": 200, "data": {...}, "message": "...", "success": true}
    error:   {"statusCode": 404, "message": "...", "data": null, "success": false}

    The HTTP status code always mirrors `statusCode`.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for API schemas: snake_case in Python, camelCase on the wire.

    populate_by_name lets services build schemas with Python names while
    clients send and receive camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope. Routes declare `response_model=ApiResponse[X]`."""

    status_code: int = Field(default=200, description="Mirrors the HTTP status code")
    data: Optional[T] = Field(default=None, description="Response payload")
    message: str = Field(default="Success", description="Human-readable outcome")
    success: bool = Field(default=True)

    @classmethod
    def build(cls, data: Any = None, message: str = "Success", status_code: int = 200):
        return cls(
            status_code=status_code,
            data=data,
            message=message,
            success=status_code < 400,
        )


class ErrorResponse(CamelModel):
    """Error envelope rendered by the global exception handlers."""

    status_code: int = Field(description="Mirrors the HTTP status code")
    message: str = Field(description="Human-readable error description")
    data: None = None
    success: bool = False


def error_body(status_code: int, message: str) -> dict:
    """Serialized error envelope, ready for a JSONResponse."""
    return ErrorResponse(status_code=status_code, message=message).model_dump(by_alias=True)


class DeleteCountResponse(CamelModel):
    """Result of a bulk delete."""

    deleted_count: int


class HealthResponse(CamelModel):
    """
    Health check payload.

    status: healthy | degraded (AI unreachable) | unhealthy (database down)
    """

    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
