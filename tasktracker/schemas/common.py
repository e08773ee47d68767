from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")

# Largest id the store's INTEGER primary keys can hold
MAX_ID = 2**31 - 1


class APIModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(APIModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        # ASCII digits only; int() rejects some Unicode digits such as "²"
        if not (text.isascii() and text.isdecimal()):
            return None
        try:
            return int(text)
        except ValueError:
            # Longer than the interpreter's int conversion limit
            return None
    return None


def parse_positive_int(value: Any) -> Optional[int]:
    """Lenient parsing of an id: anything but an integer in 1..MAX_ID becomes None."""
    parsed = _parse_int(value)
    if parsed is None or not 0 < parsed <= MAX_ID:
        return None
    return parsed


def clamp_limit(value: Any, default: int, maximum: int) -> int:
    limit = _parse_int(value)
    if limit is not None and limit <= 0:
        limit = None
    if limit is None:
        return default
    return min(limit, maximum)


def clean_search(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
