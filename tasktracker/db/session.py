from typing import Iterator

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .. import models  # noqa: F401  (registers every table on SQLModel.metadata)
from ..core.logger import setup_logger

logger = setup_logger("db")


# Helper function to ensure URL format is correct
def normalize_db_url(url: str) -> str:
    if not url:
        return "sqlite:///./tasktracker.db"
    # Hosted Postgres providers still hand out the legacy scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connection(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # SQLite's built-in lower() only folds ASCII; ilike() compiles to lower(x) LIKE lower(y)
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    db_url = normalize_db_url(url)

    # --- CONFIGURATION FOR SQLITE ---
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases only live as long as their single connection
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, echo=echo, **kwargs)
        event.listen(engine, "connect", _configure_sqlite_connection)
        return engine

    # --- CONFIGURATION FOR POSTGRESQL ---
    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
    logger.info("Database schema initialized.")


def check_db_connection(engine: Engine) -> bool:
    """Run a trivial query; used by the health endpoint."""
    try:
        with engine.connect() as connection:
            return connection.execute(text("SELECT 1")).scalar_one() == 1
    except SQLAlchemyError as e:
        logger.error(f"Database connectivity check failed: {e}")
        return False


# Dependency: one Session per request, bound to the engine the app was built with
def get_session(request: Request) -> Iterator[Session]:
    with Session(request.app.state.engine, expire_on_commit=False) as session:
        yield session
