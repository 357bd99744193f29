"""Session Store — opaque bearer tokens mapped to authenticated identities.

Invariants:
    - Tokens carry 256 bits of entropy (secrets.token_urlsafe(32))
    - One token maps to exactly one (account_id, role)
    - Expired and revoked tokens resolve as UnauthenticatedError
    - revoke() is idempotent
    - With a ttl, abandoned sessions are swept at most sweep_interval after expiry
      plus the next issue/resolve call

Design Decisions:
    - ttl=None reproduces "tokens never expire"; a positive ttl enables expiry
    - Expired sessions dropped lazily on resolve, plus a passive sweep piggybacked on
      issue/resolve once per interval (no background thread), like RateLimiter.check
"""

import secrets
import threading
from datetime import datetime, timedelta

from chore_match.core.domain_types import AccountId, Role, Session, SessionToken, utc_now
from chore_match.core.errors import UnauthenticatedError
from chore_match.core.repository_protocols import Clock

TOKEN_BYTES = 32


class SessionStore:
    """Thread-safe token -> Session map."""

    def __init__(
        self,
        ttl_seconds: int | None = None,
        clock: Clock = utc_now,
        sweep_interval_seconds: int = 60,
    ):
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive or None")
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._sweep_interval = timedelta(seconds=sweep_interval_seconds)
        self._clock = clock
        self._sessions: dict[SessionToken, Session] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def issue(self, account_id: AccountId, role: Role) -> SessionToken:
        now = self._clock()
        token = SessionToken(secrets.token_urlsafe(TOKEN_BYTES))
        session = Session(
            token=token,
            account_id=account_id,
            role=Role(role),
            issued_at=now,
            expires_at=now + self._ttl if self._ttl else None,
        )
        with self._lock:
            self._maybe_sweep(now)
            self._sessions[token] = session
        return token

    def resolve(self, token: str | None) -> Session:
        if not token:
            raise UnauthenticatedError()
        now = self._clock()
        with self._lock:
            self._maybe_sweep(now)
            session = self._sessions.get(SessionToken(token))
            if session is not None and session.is_expired(now):
                del self._sessions[session.token]
                session = None
        if session is None:
            raise UnauthenticatedError()
        return session

    def revoke(self, token: str | None) -> Session | None:
        """Invalidate a token. Returns the revoked session, None if it was unknown."""
        if not token:
            return None
        with self._lock:
            return self._sessions.pop(SessionToken(token), None)

    def purge_expired(self) -> int:
        """Drop expired sessions. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._sweep(now)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    # --- Helpers (caller holds _lock) -----------------------------------------

    def _maybe_sweep(self, now: datetime) -> None:
        if self._ttl is not None and now - self._last_sweep >= self._sweep_interval:
            self._sweep(now)

    def _sweep(self, now: datetime) -> int:
        self._last_sweep = now
        if self._ttl is None:
            return 0
        expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        return len(expired)
