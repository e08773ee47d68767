from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer
from typing import Optional
from datetime import date, datetime
from enum import Enum

from ..core.clock import utcnow


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# Sort rank, so ordering by priority is low < medium < high rather than alphabetical
PRIORITY_RANK = {
    TaskPriority.low: 1,
    TaskPriority.medium: 2,
    TaskPriority.high: 3,
}


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=120, nullable=False)
    description: Optional[str] = Field(default=None, max_length=2000)
    priority: TaskPriority = Field(default=TaskPriority.medium, nullable=False)
    due_date: Optional[date] = Field(default=None)
    status_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("task_statuses.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        )
    )
    assigned_to_user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    )
    created_by_user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id"), nullable=False)
    )
    created_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime = Field(sa_type=DateTime, default_factory=utcnow, nullable=False)
