"""
Session-token lifecycle: issue, resolve, revoke and reap.

Only the SHA-256 of a bearer token is ever stored; the raw token leaves the
service exactly once, in the response to login or registration.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlmodel import Session, select

from ..core.clock import utcnow
from ..core.errors import (
    AuthenticationError,
    InactiveAccountError,
    InvalidSessionError,
    SessionExpiredError,
)
from ..core.logger import setup_logger
from ..core.security import generate_session_token, hash_token
from ..models.session import UserSession
from ..models.user import User

logger = setup_logger("sessions")

DEFAULT_SESSION_DAYS = 7


@dataclass(frozen=True)
class IssuedSession:
    raw_token: str
    expires_at: datetime


class SessionManager:
    def __init__(self, session: Session, ttl_days: int = DEFAULT_SESSION_DAYS):
        self.session = session
        self.ttl = timedelta(days=ttl_days)

    def issue_session(self, user: User) -> IssuedSession:
        raw_token = generate_session_token()
        expires_at = utcnow() + self.ttl
        self.session.add(
            UserSession(
                user_id=user.id,
                token_hash=hash_token(raw_token),
                expires_at=expires_at,
            )
        )
        self.session.commit()
        return IssuedSession(raw_token=raw_token, expires_at=expires_at)

    def resolve_session(self, raw_token: str) -> User:
        """Return the user bound to ``raw_token`` or raise the matching authentication error."""
        if not raw_token:
            raise AuthenticationError()

        token_hash = hash_token(raw_token)
        statement = (
            select(UserSession, User)
            .join(User, User.id == UserSession.user_id)
            .where(UserSession.token_hash == token_hash)
        )
        # The indexed equality lookup on the digest is the token match
        row = self.session.exec(statement).first()
        if row is None:
            raise InvalidSessionError()

        user_session, user = row
        if not user.is_active:
            raise InactiveAccountError()
        if user_session.expires_at <= utcnow():
            raise SessionExpiredError()
        return user

    def revoke_session(self, raw_token: str) -> None:
        # Unknown tokens are not an error
        self.session.exec(
            delete(UserSession).where(UserSession.token_hash == hash_token(raw_token))
        )
        self.session.commit()

    def reap_expired_sessions(self) -> int:
        result = self.session.exec(
            delete(UserSession).where(UserSession.expires_at <= utcnow())
        )
        self.session.commit()
        reaped = result.rowcount or 0
        if reaped:
            logger.info(f"Removed {reaped} expired sessions")
        return reaped
