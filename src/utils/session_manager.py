"""Login session management module.

This module keeps the server-side table of logged-in sessions. Each session
binds a client token to the username and role of the user who logged in and
is dropped after a fixed period of inactivity or on logout.

Tokens handed to clients are HS256-signed wrappers around a random session
id, so a forged or altered token never reaches the session table.
"""

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, Optional

import pytz
from jose import JWTError, jwt
from pydantic import BaseModel

from config import (
    SESSION_IDLE_TIMEOUT_SECONDS,
    SESSION_SECRET_KEY,
    SESSION_TOKEN_ALGORITHM,
)
from core.exceptions import ForbiddenError
from schemas.user import ANONYMOUS, Identity

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(pytz.utc)


class LoginSession(BaseModel):
    session_id: str
    username: str
    role: str
    created_at: datetime
    last_seen: datetime


class SessionManager:
    """Manages login sessions held in process memory.

    All methods are safe to call from the request thread pool.
    """

    def __init__(
        self,
        idle_timeout_seconds: int = SESSION_IDLE_TIMEOUT_SECONDS,
        secret_key: str = SESSION_SECRET_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize SessionManager.

        Args:
            idle_timeout_seconds: Seconds of inactivity after which a session expires.
            secret_key: Key used to sign session tokens.
            clock: Returns the current aware datetime; replaceable in tests.
        """
        self.idle_timeout = timedelta(seconds=idle_timeout_seconds)
        self._secret_key = secret_key
        self._clock = clock
        self._sessions: Dict[str, LoginSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _encode(self, session_id: str) -> str:
        return jwt.encode(
            {"sid": session_id}, self._secret_key, algorithm=SESSION_TOKEN_ALGORITHM
        )

    def _decode(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token, self._secret_key, algorithms=[SESSION_TOKEN_ALGORITHM]
            )
        except JWTError:
            logger.debug("Rejected session token with bad signature")
            return None
        return payload.get("sid")

    def _is_expired(self, session: LoginSession, now: datetime) -> bool:
        return now - session.last_seen > self.idle_timeout

    def create_session(self, username: str, role: str) -> str:
        """Start a session bound to a user.

        Args:
            username: The logged-in user's name.
            role: The logged-in user's role.

        Returns:
            Signed token identifying the new session.
        """
        # Reclaim sessions abandoned without logout
        self.purge_expired()

        now = self._clock()
        session = LoginSession(
            session_id=secrets.token_urlsafe(32),
            username=username,
            role=role,
            created_at=now,
            last_seen=now,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Session started for user: %s", username)
        return self._encode(session.session_id)

    def get_identity(self, token: Optional[str]) -> Identity:
        """Resolve a token to the identity it is bound to.

        A successful lookup counts as activity and restarts the idle timer.

        Args:
            token: Token presented by the client, or None.

        Returns:
            The bound Identity, or ANONYMOUS if the token is missing,
            invalid, unknown, or expired.
        """
        session_id = self._decode(token)
        if session_id is None:
            return ANONYMOUS

        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return ANONYMOUS
            if self._is_expired(session, now):
                del self._sessions[session_id]
                logger.info("Session expired for user: %s", session.username)
                return ANONYMOUS
            session.last_seen = now
            return Identity(username=session.username, role=session.role)

    def destroy_session(self, token: Optional[str]) -> None:
        """End a session. Unknown or missing tokens are ignored.

        Args:
            token: Token presented by the client, or None.
        """
        session_id = self._decode(token)
        if session_id is None:
            return
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info("Session ended for user: %s", session.username)

    def purge_expired(self) -> int:
        """Drop every expired session.

        Returns:
            Number of sessions removed.
        """
        now = self._clock()
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items() if self._is_expired(s, now)
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)


def authorize(identity: Identity, allowed_roles: Iterable[str]) -> Identity:
    """Check that the caller holds one of the allowed roles.

    Args:
        identity: The caller's identity.
        allowed_roles: Roles permitted to perform the action.

    Returns:
        The identity, unchanged.

    Raises:
        ForbiddenError: If the caller is anonymous or their role is not allowed.
    """
    allowed = list(allowed_roles)
    if identity.is_anonymous:
        raise ForbiddenError("Please login first.")
    if identity.role not in allowed:
        raise ForbiddenError(
            f"Only {' or '.join(r + 's' for r in allowed)} can perform this action."
        )
    return identity
