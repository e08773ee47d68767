from typing import Annotated, Optional

from fastapi import Depends, Path, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from ..core.config import Settings
from ..core.errors import AuthenticationError, PermissionDeniedError
from ..core.permissions import is_admin
from ..db.session import get_session
from ..models.user import User
from ..schemas.common import MAX_ID
from ..schemas.task import TaskFilters
from ..schemas.user import UserFilters
from ..services.sessions import SessionManager
from ..services.statuses import StatusRegistry
from ..services.tasks import TaskRepository
from ..services.users import UserDirectory

# Missing credentials are reported by get_bearer_token, not by HTTPBearer itself
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# --- services, one set per request sharing the request's Session ---

def get_session_manager(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> SessionManager:
    return SessionManager(session, ttl_days=settings.AUTH_SESSION_DAYS)


def get_user_directory(session: Session = Depends(get_session)) -> UserDirectory:
    return UserDirectory(session)


def get_task_repository(session: Session = Depends(get_session)) -> TaskRepository:
    return TaskRepository(session)


def get_status_registry(session: Session = Depends(get_session)) -> StatusRegistry:
    return StatusRegistry(session)


# Path ids outside 1..MAX_ID fail validation (400) before reaching the store
IdPath = Annotated[int, Path(gt=0, le=MAX_ID)]


# --- authentication ---

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Authentication required")
    return credentials.credentials.strip()


def get_current_user(
    token: str = Depends(get_bearer_token),
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    return sessions.resolve_session(token)


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not is_admin(current_user):
        raise PermissionDeniedError("Admin access required")
    return current_user


# --- query-string filters (lenient: bad values fall back to defaults) ---

def get_task_filters(
    q: Optional[str] = None,
    status_id: Optional[str] = Query(None, alias="statusId"),
    priority: Optional[str] = None,
    assigned_to_user_id: Optional[str] = Query(None, alias="assignedToUserId"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
) -> TaskFilters:
    return TaskFilters(
        search=q,
        status_id=status_id,
        priority=priority,
        assigned_to_user_id=assigned_to_user_id,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )


def get_user_filters(
    q: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
) -> UserFilters:
    return UserFilters(search=q, page=page, limit=limit)
