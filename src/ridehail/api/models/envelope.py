"""Uniform response envelope shared by every endpoint."""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import Field

from ridehail.core.schema import CamelModel

T = TypeVar("T")


class ErrorBody(CamelModel):
    message: str
    code: str
    details: dict[str, Any] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ApiResponse(CamelModel, Generic[T]):
    success: bool
    data: T | None = None
    message: str | None = None
    error: ErrorBody | None = None


def ok(data: T, message: str | None = None) -> ApiResponse[T]:
    return ApiResponse[T](success=True, data=data, message=message)


def failure_body(
    message: str, code: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Serialized failure envelope, ready for a JSONResponse."""
    envelope: ApiResponse[None] = ApiResponse(
        success=False,
        error=ErrorBody(message=message, code=code, details=details or None),
    )
    return envelope.model_dump(mode="json", by_alias=True, exclude_none=True)
