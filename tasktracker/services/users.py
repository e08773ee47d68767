"""
User directory: registration, authentication, admin listing and the
role/active-flag updates guarded by the "at least one active admin" invariant.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from ..core.clock import utcnow
from ..core.errors import (
    BadRequestError,
    ConflictError,
    InactiveAccountError,
    InvalidCredentialsError,
    NotFoundError,
)
from ..core.logger import setup_logger
from ..core.permissions import would_remove_active_admin
from ..core.security import get_password_hash, verify_password
from ..models.task import Task
from ..models.user import User, UserRole
from ..schemas.common import Page
from ..schemas.user import UserFilters, UserUpdate, UserWithTaskCount
from .base import commit_or_conflict, escape_like

logger = setup_logger("users")

DUPLICATE_EMAIL_MESSAGE = "Email is already registered"
LAST_ADMIN_MESSAGE = "At least one active admin is required"


class UserDirectory:
    def __init__(self, session: Session):
        self.session = session

    def get_user(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email.strip().lower())
        return self.session.exec(statement).first()

    def create_user(
        self,
        full_name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.user,
        is_active: bool = True,
    ) -> User:
        email = email.strip().lower()
        if self.get_user_by_email(email):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        user = User(
            full_name=full_name,
            email=email,
            password_hash=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        self.session.add(user)
        commit_or_conflict(self.session, DUPLICATE_EMAIL_MESSAGE)
        self.session.refresh(user)
        logger.info(f"Registered user {user.id} with role {user.role.value}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise InactiveAccountError()
        return user

    # --- admin listing ---

    def list_users(self, filters: UserFilters) -> Page[UserWithTaskCount]:
        conditions = []
        if filters.search:
            pattern = f"%{escape_like(filters.search)}%"
            conditions.append(
                or_(
                    col(User.full_name).ilike(pattern, escape="\\"),
                    col(User.email).ilike(pattern, escape="\\"),
                )
            )

        offset = (filters.page - 1) * filters.limit
        statement = (
            select(User, func.count(Task.id))
            .outerjoin(Task, Task.assigned_to_user_id == User.id)
            .where(*conditions)
            .group_by(User.id)
            .order_by(col(User.created_at).desc(), col(User.id).desc())
            .offset(offset)
            .limit(filters.limit)
        )
        rows = self.session.exec(statement).all()
        total = self.session.exec(select(func.count(User.id)).where(*conditions)).one()

        items = [
            UserWithTaskCount(**user.model_dump(exclude={"password_hash"}), task_count=task_count)
            for user, task_count in rows
        ]
        return Page[UserWithTaskCount](
            items=items, total=total, page=filters.page, limit=filters.limit
        )

    # --- admin invariant ---

    def _active_admins_query(self):
        return select(User).where(User.role == UserRole.admin, User.is_active == True)  # noqa: E712

    def count_active_admins(self) -> int:
        statement = select(func.count(User.id)).where(
            User.role == UserRole.admin, User.is_active == True  # noqa: E712
        )
        return self.session.exec(statement).one()

    def first_active_admin(self) -> Optional[User]:
        return self.session.exec(self._active_admins_query().order_by(User.id)).first()

    def _lock_active_admins(self) -> List[User]:
        # Row locks serialize concurrent demotions on stores that support FOR UPDATE
        return self.session.exec(self._active_admins_query().with_for_update()).all()

    def update_user(self, user_id: int, patch: UserUpdate) -> User:
        requested = patch.model_dump(include=patch.model_fields_set)
        if not requested:
            raise BadRequestError("No valid fields provided for update")

        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")

        changes = {key: value for key, value in requested.items() if getattr(user, key) != value}
        if not changes:
            return user

        if would_remove_active_admin(user, role=changes.get("role"), is_active=changes.get("is_active")):
            active_admin_ids = {admin.id for admin in self._lock_active_admins()}
            if user.id in active_admin_ids and len(active_admin_ids) <= 1:
                self.session.rollback()
                logger.warning(f"Refused to remove the last active admin (user {user.id})")
                raise ConflictError(LAST_ADMIN_MESSAGE)

        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        self.session.add(user)
        self.session.flush()

        # Re-check inside the same transaction before it becomes visible
        if self.count_active_admins() == 0:
            self.session.rollback()
            logger.warning(f"Rolled back update of user {user.id}: no active admin would remain")
            raise ConflictError(LAST_ADMIN_MESSAGE)

        self.session.commit()
        self.session.refresh(user)
        logger.info(f"Updated user {user.id}: {sorted(changes)}")
        return user
