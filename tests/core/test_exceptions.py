"""Tests for the exception hierarchy."""

import pytest

from ridehail.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    NetworkError,
    NotFoundError,
    PermanentError,
    PermissionDeniedError,
    RideHailError,
    ServiceUnavailableError,
    StateError,
    TransientError,
    UpstreamError,
    UserExistsError,
    ValidationError,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test that exception classes follow the correct inheritance."""

    def test_transient_errors_inherit_from_base(self):
        assert issubclass(TransientError, RideHailError)
        assert issubclass(NetworkError, TransientError)
        assert issubclass(ServiceUnavailableError, TransientError)

    def test_permanent_errors_inherit_from_base(self):
        assert issubclass(PermanentError, RideHailError)
        for error_type in (
            ValidationError,
            NotFoundError,
            StateError,
            AuthenticationError,
            PermissionDeniedError,
            ConflictError,
            UpstreamError,
        ):
            assert issubclass(error_type, PermanentError)

    def test_auth_and_conflict_specializations(self):
        assert issubclass(InvalidCredentialsError, AuthenticationError)
        assert issubclass(UserExistsError, ConflictError)

    def test_permanent_is_not_transient(self):
        assert not issubclass(ValidationError, TransientError)
        assert not issubclass(UpstreamError, TransientError)


@pytest.mark.unit
class TestExceptionAttributes:
    """Test exception message, details and code handling."""

    def test_stores_message(self):
        err = RideHailError("test message")
        assert err.message == "test message"
        assert str(err) == "test message"

    def test_stores_details(self):
        err = RideHailError("test", details={"key": "value"})
        assert err.details == {"key": "value"}

    def test_default_details_is_empty_dict(self):
        assert RideHailError("test").details == {}

    def test_class_codes(self):
        assert ValidationError("x").code == "VALIDATION_ERROR"
        assert StateError("x").code == "INVALID_TRANSITION"
        assert InvalidCredentialsError("x").code == "INVALID_CREDENTIALS"
        assert UserExistsError("x").code == "USER_EXISTS"
        assert UpstreamError("x").code == "API_ERROR"

    def test_code_override_is_per_instance(self):
        err = NotFoundError("Ride not found", code="RIDE_NOT_FOUND")
        assert err.code == "RIDE_NOT_FOUND"
        assert NotFoundError("other").code == "NOT_FOUND"
