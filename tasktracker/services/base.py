from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from ..core.errors import ConflictError
from ..core.logger import setup_logger

logger = setup_logger("services")


def commit_or_conflict(session: Session, message: str) -> None:
    """Commit, turning a constraint violation raised by the store into a ConflictError."""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"IntegrityError on commit: {e.orig}")
        raise ConflictError(message) from e


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
