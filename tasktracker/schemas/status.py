from datetime import datetime
from typing import Any

from pydantic import field_validator

from .common import APIModel


class StatusRead(APIModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class StatusPayload(APIModel):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> str:
        name = value.strip() if isinstance(value, str) else ""
        if not 2 <= len(name) <= 40:
            raise ValueError("name must be between 2 and 40 characters")
        return name
