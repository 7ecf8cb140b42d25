"""
Cookie sessions - opaque session ids mapped to logged-in users.

Sessions live in process memory; a restart logs everyone out.
"""

import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from storefront.domain.models import User, utc_now


@dataclass(frozen=True)
class Session:
    user_id: int
    email: str
    expires_at: datetime


class SessionStore:
    """Thread-safe in-memory session registry."""

    def __init__(self, max_age_seconds: int, clock: Callable[[], datetime] = utc_now) -> None:
        self._max_age = timedelta(seconds=max_age_seconds)
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    @property
    def max_age_seconds(self) -> int:
        return int(self._max_age.total_seconds())

    def create(self, user: User) -> str:
        """Start a session for ``user`` and return its id."""
        session_id = secrets.token_urlsafe(32)
        session = Session(user.id, user.email, self._clock() + self._max_age)
        with self._lock:
            self._sessions[session_id] = session
        return session_id

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._clock() > session.expires_at:
                del self._sessions[session_id]
                return None
            return session

    def destroy(self, session_id: str | None) -> None:
        if session_id:
            with self._lock:
                self._sessions.pop(session_id, None)
