from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from enum import Enum

from ..core.clock import utcnow


class UserRole(str, Enum):
    admin = "admin"
    user = "user"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    full_name: str = Field(max_length=120, nullable=False)
    # Always stored lower-cased, so the unique index is case-insensitive
    email: str = Field(max_length=255, unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)
    role: UserRole = Field(default=UserRole.user, nullable=False, index=True)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False)
