import pytest
from sqlalchemy import DateTime
from sqlmodel import SQLModel

from tasktracker import models  # noqa: F401
from tasktracker.core.clock import utcnow


TIMESTAMP_COLUMNS = [
    ("users", "created_at"),
    ("users", "updated_at"),
    ("user_sessions", "expires_at"),
    ("user_sessions", "created_at"),
    ("task_statuses", "created_at"),
    ("task_statuses", "updated_at"),
    ("tasks", "created_at"),
    ("tasks", "updated_at"),
]


@pytest.mark.parametrize("table, column", TIMESTAMP_COLUMNS)
def test_timestamp_columns_store_naive_utc(table, column):
    column_type = SQLModel.metadata.tables[table].c[column].type

    assert type(column_type) is DateTime
    assert column_type.timezone is False


def test_utcnow_is_naive():
    assert utcnow().tzinfo is None
