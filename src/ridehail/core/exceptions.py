"""Standardized exception hierarchy for the ride-hailing service."""

from typing import Any


class RideHailError(Exception):
    """Base exception for all service errors."""

    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code


class TransientError(RideHailError):
    """Errors that may succeed on retry."""

    code = "TRANSIENT_ERROR"


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    code = "NETWORK_ERROR"


class ServiceUnavailableError(TransientError):
    """External service temporarily unavailable (5xx responses)."""

    code = "SERVICE_UNAVAILABLE"


class PermanentError(RideHailError):
    """Errors that will not succeed on retry."""

    code = "PERMANENT_ERROR"


class ValidationError(PermanentError):
    """Invalid input or data format."""

    code = "VALIDATION_ERROR"


class NotFoundError(PermanentError):
    """Requested entity does not exist."""

    code = "NOT_FOUND"


class StateError(PermanentError):
    """Invalid ride status transition."""

    code = "INVALID_TRANSITION"


class AuthenticationError(PermanentError):
    """Caller could not be identified."""

    code = "UNAUTHORIZED"


class InvalidCredentialsError(AuthenticationError):
    """E-mail/password pair did not match."""

    code = "INVALID_CREDENTIALS"


class PermissionDeniedError(PermanentError):
    """Caller is identified but lacks the required role."""

    code = "FORBIDDEN"


class ConflictError(PermanentError):
    """Entity already exists."""

    code = "CONFLICT"


class UserExistsError(ConflictError):
    code = "USER_EXISTS"


class UpstreamError(PermanentError):
    """Upstream API answered with something unusable (4xx, empty or unparsable)."""

    code = "API_ERROR"
