from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer
from typing import Optional
from datetime import datetime

from ..core.clock import utcnow


class UserSession(SQLModel, table=True):
    """One active login. Only the SHA-256 of the bearer token is stored."""

    __tablename__ = "user_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    token_hash: str = Field(max_length=64, unique=True, index=True, nullable=False)
    expires_at: datetime = Field(sa_type=DateTime, nullable=False, index=True)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False)
