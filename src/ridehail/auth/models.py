"""User and credential models."""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import AfterValidator, Field, field_validator

from ridehail.core.schema import CamelModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{10,}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s]*$")


class UserRole(str, Enum):
    PASSENGER = "passenger"
    DRIVER = "driver"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        return ROLE_HIERARCHY[self]


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.PASSENGER: 1,
    UserRole.DRIVER: 2,
    UserRole.ADMIN: 3,
}


def _check_email(value: str) -> str:
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value


def _check_name(value: str) -> str:
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters and spaces")
    return value


def _check_phone(value: str) -> str:
    if value and not PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number format")
    return value


Email = Annotated[str, Field(min_length=5, max_length=254), AfterValidator(_check_email)]
PersonName = Annotated[str, Field(min_length=2, max_length=50), AfterValidator(_check_name)]
Phone = Annotated[str, AfterValidator(_check_phone)]


class User(CamelModel):
    id: str
    email: str
    name: str
    phone: str | None = None
    role: UserRole
    profile_picture: str | None = None
    is_verified: bool = False
    created_at: datetime
    updated_at: datetime


class LoginRequest(CamelModel):
    email: Email
    password: str = Field(min_length=8)


class SignupRequest(CamelModel):
    email: Email
    password: str = Field(min_length=8, max_length=128)
    name: PersonName
    phone: Phone | None = None
    role: UserRole

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not (
            any(c.islower() for c in v)
            and any(c.isupper() for c in v)
            and any(c.isdigit() for c in v)
        ):
            raise ValueError(
                "Password must contain at least one lowercase letter, "
                "one uppercase letter, and one number"
            )
        return v


class ProfileUpdate(CamelModel):
    """Fields a user may change on their own profile."""

    name: PersonName | None = None
    phone: Phone | None = None
    profile_picture: str | None = Field(default=None, pattern=r"^https?://")


class AuthResult(CamelModel):
    user: User
    token: str
    refresh_token: str


TokenType = Literal["access", "refresh"]
