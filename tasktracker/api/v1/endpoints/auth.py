from fastapi import APIRouter, Depends, Response, status

from tasktracker.api.deps import (
    get_bearer_token,
    get_current_user,
    get_session_manager,
    get_user_directory,
)
from tasktracker.core.logger import setup_logger
from tasktracker.models.user import User
from tasktracker.schemas.user import (
    SessionResponse,
    UserLogin,
    UserRead,
    UserRegister,
    to_user_read,
)
from tasktracker.services.sessions import SessionManager
from tasktracker.services.users import UserDirectory

logger = setup_logger("auth")

router = APIRouter()


def _session_response(user: User, sessions: SessionManager) -> SessionResponse:
    issued = sessions.issue_session(user)
    return SessionResponse(
        token=issued.raw_token,
        expires_at=issued.expires_at,
        user=to_user_read(user),
    )


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_register: UserRegister,
    users: UserDirectory = Depends(get_user_directory),
    sessions: SessionManager = Depends(get_session_manager),
):
    # Self-registration always yields a regular, active user
    user = users.create_user(
        full_name=user_register.full_name,
        email=user_register.email,
        password=user_register.password,
    )
    return _session_response(user, sessions)


@router.post("/login", response_model=SessionResponse)
def login(
    user_credentials: UserLogin,
    users: UserDirectory = Depends(get_user_directory),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.reap_expired_sessions()
    user = users.authenticate(user_credentials.email, user_credentials.password)
    logger.info(f"User {user.id} logged in")
    return _session_response(user, sessions)


@router.get("/me", response_model=UserRead)
def get_current_user_profile(current_user: User = Depends(get_current_user)):
    return to_user_read(current_user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: str = Depends(get_bearer_token),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.revoke_session(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
