from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime

from ..core.clock import utcnow


def normalize_status_name(name: str) -> str:
    return name.strip().lower()


class TaskStatus(SQLModel, table=True):
    __tablename__ = "task_statuses"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=40, nullable=False)
    # Lower-cased copy of ``name``; its unique index enforces case-insensitive uniqueness
    normalized_name: str = Field(max_length=40, unique=True, index=True, nullable=False)
    created_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False)
