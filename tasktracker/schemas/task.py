import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from ..models.task import TaskPriority
from .common import APIModel, clamp_limit, clean_search, parse_positive_int

DUE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DEFAULT_TASK_LIMIT = 5
MAX_TASK_LIMIT = 50
MAX_TITLE_LENGTH = 120
MAX_DESCRIPTION_LENGTH = 2000


class TaskSortField(str, Enum):
    created_at = "createdAt"
    due_date = "dueDate"
    title = "title"
    priority = "priority"


class SortOrder(str, Enum):
    asc = "ASC"
    desc = "DESC"


# --- field rules shared by create and update payloads ---

def _clean_title(value: Any) -> str:
    title = value.strip() if isinstance(value, str) else ""
    if not title:
        raise ValueError("title is required and must be a non-empty string")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValueError(f"title must be at most {MAX_TITLE_LENGTH} characters")
    return title


def _clean_description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("description must be a string or null")
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(f"description must be at most {MAX_DESCRIPTION_LENGTH} characters")
    return value.strip() or None


def _clean_priority(value: Any) -> TaskPriority:
    if isinstance(value, str):
        value = value.strip()
    try:
        return TaskPriority(value)
    except ValueError:
        raise ValueError("priority must be one of: low, medium, high") from None


def _clean_due_date(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and DUE_DATE_PATTERN.match(value):
        return value
    raise ValueError("dueDate must be null or a valid date in YYYY-MM-DD format")


def _clean_reference(value: Any, field_label: str) -> int:
    reference = parse_positive_int(value)
    if reference is None:
        raise ValueError(f"{field_label} must be a valid positive integer")
    return reference


class TaskRead(APIModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    due_date: Optional[date] = None
    status_id: int
    status_name: Optional[str] = None
    assigned_to_user_id: int
    assigned_to_user_name: Optional[str] = None
    created_by_user_id: int
    created_by_user_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(APIModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[date] = None
    # Resolved to the default status when omitted
    status_id: Optional[int] = None
    # Resolved to the requesting user when omitted
    assigned_to_user_id: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> str:
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> Optional[str]:
        return _clean_description(value)

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, value: Any) -> TaskPriority:
        if value is None or value == "":
            return TaskPriority.medium
        return _clean_priority(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, value: Any) -> Any:
        return _clean_due_date(value)

    @field_validator("status_id", mode="before")
    @classmethod
    def validate_status_id(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return _clean_reference(value, "statusId")

    @field_validator("assigned_to_user_id", mode="before")
    @classmethod
    def validate_assignee(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return _clean_reference(value, "assignedToUserId")


class TaskUpdate(APIModel):
    """
    Partial update of a task.

    Only the fields present in the request body are applied (see
    ``model_fields_set``). ``description`` and ``dueDate`` may be sent as
    null to clear them; every other field rejects null.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    status_id: Optional[int] = None
    assigned_to_user_id: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, value: Any) -> str:
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> Optional[str]:
        return _clean_description(value)

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, value: Any) -> TaskPriority:
        return _clean_priority(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, value: Any) -> Any:
        return _clean_due_date(value)

    @field_validator("status_id", mode="before")
    @classmethod
    def validate_status_id(cls, value: Any) -> int:
        return _clean_reference(value, "statusId")

    @field_validator("assigned_to_user_id", mode="before")
    @classmethod
    def validate_assignee(cls, value: Any) -> int:
        return _clean_reference(value, "assignedToUserId")

    def changes(self) -> dict:
        return self.model_dump(include=self.model_fields_set)


class TaskFilters(APIModel):
    """List filters. Malformed values fall back to defaults instead of failing."""

    search: Optional[str] = None
    status_id: Optional[int] = None
    priority: Optional[TaskPriority] = None
    assigned_to_user_id: Optional[int] = None
    sort_by: TaskSortField = TaskSortField.created_at
    order: SortOrder = SortOrder.desc
    page: int = 1
    limit: int = DEFAULT_TASK_LIMIT

    @field_validator("search", mode="before")
    @classmethod
    def validate_search(cls, value: Any) -> Optional[str]:
        return clean_search(value)

    @field_validator("status_id", "assigned_to_user_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Any) -> Optional[int]:
        return parse_positive_int(value)

    @field_validator("priority", mode="before")
    @classmethod
    def validate_priority(cls, value: Any) -> Optional[str]:
        return value if value in [p.value for p in TaskPriority] else None

    @field_validator("sort_by", mode="before")
    @classmethod
    def validate_sort_by(cls, value: Any) -> TaskSortField:
        try:
            return TaskSortField(value)
        except ValueError:
            return TaskSortField.created_at

    @field_validator("order", mode="before")
    @classmethod
    def validate_order(cls, value: Any) -> SortOrder:
        if isinstance(value, str) and value.upper() == SortOrder.asc.value:
            return SortOrder.asc
        return SortOrder.desc

    @field_validator("page", mode="before")
    @classmethod
    def validate_page(cls, value: Any) -> int:
        return parse_positive_int(value) or 1

    @field_validator("limit", mode="before")
    @classmethod
    def validate_limit(cls, value: Any) -> int:
        return clamp_limit(value, DEFAULT_TASK_LIMIT, MAX_TASK_LIMIT)
