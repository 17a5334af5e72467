# Session registry + gate — which browsers may drive which authorized identity.
# Created: 2026-10-19
#
# The registry is the session → identity relation; the credential store is the
# identity → tokens relation. The gate only consults the former, so a browser
# without a marker is refused even while server-side tokens exist.

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from playdeck.auth.credentials import DEFAULT_IDENTITY
from playdeck.errors import NotAuthorized
from playdeck.security.session_tokens import (
    create_session_token,
    new_session_id,
    verify_session_token,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE = "playdeck_session"


@dataclass
class Session:
    session_id: str
    identity: str
    created_at: float
    expires_at: float


class SessionRegistry:
    """In-memory map of live browser sessions.

    Sessions do not survive a restart; the browser simply goes through
    ``/auth/login`` again, which is quick while the refresh token is stored.
    """

    def __init__(
        self,
        secret: str,
        ttl_hours: int = 168,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self.ttl_hours = ttl_hours
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    @property
    def max_age(self) -> int:
        """Cookie lifetime in seconds."""
        return self.ttl_hours * 3600

    def create(self, identity: str = DEFAULT_IDENTITY) -> str:
        """Register a new session for *identity* and return its signed cookie value."""
        self._prune()
        session_id = new_session_id()
        now = self._clock()
        self._sessions[session_id] = Session(
            session_id=session_id,
            identity=identity,
            created_at=now,
            expires_at=now + self.max_age,
        )
        logger.info("Opened browser session for %s (%d live)", identity, len(self._sessions))
        return create_session_token(session_id, self._secret, ttl_hours=self.ttl_hours)

    def resolve(self, cookie_value: str | None) -> Session | None:
        """Return the live session behind *cookie_value*, if any."""
        if not cookie_value:
            return None
        session_id = verify_session_token(cookie_value, self._secret)
        if session_id is None:
            return None

        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.expires_at <= self._clock():
            del self._sessions[session_id]
            return None
        return session

    def revoke(self, cookie_value: str | None) -> bool:
        """Drop the session behind *cookie_value*. Returns True if one was live."""
        session = self.resolve(cookie_value)
        if session is None:
            return False
        del self._sessions[session.session_id]
        return True

    def revoke_identity(self, identity: str) -> int:
        """Drop every session bound to *identity*. Returns count removed."""
        doomed = [sid for sid, s in self._sessions.items() if s.identity == identity]
        for sid in doomed:
            del self._sessions[sid]
        if doomed:
            logger.info("Revoked %d session(s) for %s", len(doomed), identity)
        return len(doomed)

    def _prune(self) -> int:
        now = self._clock()
        stale = [sid for sid, s in self._sessions.items() if s.expires_at <= now]
        for sid in stale:
            del self._sessions[sid]
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)


class SessionGate:
    """Guard for proxy routes: allow only browsers holding a live session marker."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    def authorize(self, cookie_value: str | None) -> Session:
        """Return the caller's session.

        Raises:
            NotAuthorized: the marker is missing, forged, expired or revoked.
        """
        session = self.registry.resolve(cookie_value)
        if session is None:
            raise NotAuthorized()
        return session
