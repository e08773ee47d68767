"""
Start-up seeding. Safe to run on every process start.
"""

from sqlalchemy.engine import Engine
from sqlmodel import Session

from ..core.clock import utcnow
from ..core.config import DEFAULT_TASK_STATUSES, Settings
from ..core.logger import setup_logger
from ..models.user import User, UserRole
from .statuses import StatusRegistry
from .users import UserDirectory

logger = setup_logger("bootstrap")


def ensure_seed_admin(session: Session, settings: Settings) -> User:
    """Make sure at least one active admin exists, reusing the configured account if present."""
    users = UserDirectory(session)

    active_admin = users.first_active_admin()
    if active_admin:
        return active_admin

    email = settings.ADMIN_SEED_EMAIL.strip().lower()
    existing = users.get_user_by_email(email)
    if existing:
        existing.role = UserRole.admin
        existing.is_active = True
        existing.updated_at = utcnow()
        session.add(existing)
        session.commit()
        session.refresh(existing)
        logger.warning(f"No active admin found; promoted existing account {email} to admin")
        return existing

    admin = users.create_user(
        full_name=settings.ADMIN_SEED_NAME,
        email=email,
        password=settings.ADMIN_SEED_PASSWORD,
        role=UserRole.admin,
    )
    logger.warning(f"No active admin found; created seed admin {email}")
    return admin


def run_bootstrap(engine: Engine, settings: Settings) -> None:
    with Session(engine, expire_on_commit=False) as session:
        if settings.SEED_DEFAULT_STATUSES:
            StatusRegistry(session).ensure_default_statuses(DEFAULT_TASK_STATUSES)
        ensure_seed_admin(session, settings)
