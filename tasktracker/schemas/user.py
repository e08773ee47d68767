import re
from datetime import datetime
from typing import Any, Optional

from pydantic import field_validator

from ..models.user import UserRole
from .common import APIModel, clamp_limit, clean_search, parse_positive_int

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_USER_LIMIT = 10
MAX_USER_LIMIT = 50


def normalize_email(value: Any) -> str:
    email = value.strip().lower() if isinstance(value, str) else ""
    if not EMAIL_PATTERN.match(email):
        raise ValueError("email must be a valid email address")
    return email


class UserRead(APIModel):
    id: int
    full_name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserWithTaskCount(UserRead):
    task_count: int = 0


def to_user_read(user) -> UserRead:
    """Public view of a stored user; never carries the password hash."""
    return UserRead.model_validate(user.model_dump(exclude={"password_hash"}))


class UserRegister(APIModel):
    full_name: str
    email: str
    password: str

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_full_name(cls, value: Any) -> str:
        full_name = value.strip() if isinstance(value, str) else ""
        if not 2 <= len(full_name) <= 120:
            raise ValueError("fullName must be between 2 and 120 characters")
        return full_name

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value: Any) -> str:
        return normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str:
        if not isinstance(value, str) or not 8 <= len(value) <= 120:
            raise ValueError("password must be between 8 and 120 characters")
        return value


class UserLogin(APIModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value: Any) -> str:
        return normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("password is required")
        return value


class UserUpdate(APIModel):
    """Admin patch of a user. Only explicitly supplied fields are applied."""

    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
        if value not in [role.value for role in UserRole]:
            raise ValueError("role must be one of: admin, user")
        return value

    @field_validator("is_active")
    @classmethod
    def validate_is_active(cls, value: Optional[bool]) -> bool:
        if value is None:
            raise ValueError("isActive must be a boolean")
        return value


class SessionResponse(APIModel):
    token: str
    expires_at: datetime
    user: UserRead


class UserFilters(APIModel):
    search: Optional[str] = None
    page: int = 1
    limit: int = DEFAULT_USER_LIMIT

    @field_validator("search", mode="before")
    @classmethod
    def validate_search(cls, value: Any) -> Optional[str]:
        return clean_search(value)

    @field_validator("page", mode="before")
    @classmethod
    def validate_page(cls, value: Any) -> int:
        return parse_positive_int(value) or 1

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, value: Any) -> int:
        return clamp_limit(value, DEFAULT_USER_LIMIT, MAX_USER_LIMIT)
