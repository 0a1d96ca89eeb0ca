"""Session stores — the per-client key-value state behind CSRF tokens.

The dispatcher never reaches for a global session. It asks the
configured ``SessionStore`` to ``load`` one for the request when the
request context first needs it, and to ``save`` it onto the response
when something changed.

Two stores ship:

- ``SignedCookieSessionStore`` — the whole session is JSON, signed with
  ``itsdangerous`` and kept in the cookie. Used when
  ``AppConfig.secret_key`` is set.
- ``MemorySessionStore`` — the cookie holds a random session id, data
  stays in this process. Used when no secret key is configured.
"""

import logging
import secrets
import threading
import time
from collections.abc import Callable
from typing import Any, Protocol

from wicket.config import AppConfig, SessionConfig
from wicket.errors import ConfigurationError
from wicket.http.cookies import SetCookie
from wicket.http.request import Request
from wicket.http.response import Response

logger = logging.getLogger("wicket.sessions")


class Session(dict[str, Any]):
    """A session mapping that remembers whether it was changed.

    Stores only persist a session whose ``modified`` flag is set, so
    plain page views do not emit a ``Set-Cookie`` header.
    """

    __slots__ = ("modified", "session_id")

    def __init__(self, data: dict[str, Any] | None = None, session_id: str | None = None) -> None:
        super().__init__(data or {})
        self.modified = False
        self.session_id = session_id

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(key, value)
        self.modified = True

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key)
        self.modified = True

    def clear(self) -> None:
        super().clear()
        self.modified = True

    def pop(self, key: str, *default: Any) -> Any:
        self.modified = True
        return super().pop(key, *default)

    def setdefault(self, key: str, default: Any = None) -> Any:
        if key not in self:
            self.modified = True
        return super().setdefault(key, default)

    def update(self, *args: Any, **kwargs: Any) -> None:
        super().update(*args, **kwargs)
        self.modified = True


class SessionStore(Protocol):
    """Load a session for a request and persist it onto a response."""

    def load(self, request: Request) -> Session: ...

    def save(self, response: Response, session: Session) -> Response: ...


def _session_cookie(config: SessionConfig, value: str) -> SetCookie:
    return SetCookie(
        name=config.cookie_name,
        value=value,
        max_age=config.max_age,
        path=config.path,
        domain=config.domain,
        secure=config.secure,
        httponly=config.httponly,
        samesite=config.samesite,
    )


class SignedCookieSessionStore:
    """Signed cookie sessions.

    Session data is serialized as JSON and signed (not encrypted) with
    ``itsdangerous``. A tampered or expired cookie yields an empty
    session rather than an error.
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, secret_key: str, config: SessionConfig | None = None) -> None:
        if not secret_key:
            msg = "SignedCookieSessionStore requires a non-empty secret_key."
            raise ConfigurationError(msg)

        from itsdangerous import URLSafeTimedSerializer

        self._config = config or SessionConfig()
        self._serializer = URLSafeTimedSerializer(secret_key, salt="wicket.session")

    def load(self, request: Request) -> Session:
        from itsdangerous import BadSignature

        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return Session()
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadSignature:
            logger.debug("Discarding session cookie with a bad or expired signature")
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session(data)

    def save(self, response: Response, session: Session) -> Response:
        if not session.modified:
            return response
        value = self._serializer.dumps(dict(session))
        return response.with_cookie(_session_cookie(self._config, value))


class MemorySessionStore:
    """Process-local sessions keyed by a random id cookie.

    Suitable for development, tests and single-process deployments;
    sessions vanish when the process exits. Each session lives for
    ``max_age`` seconds from creation, matching its cookie. Expired
    entries are dropped when looked up and swept whenever a new
    session is created.
    """

    __slots__ = ("_clock", "_config", "_lock", "_sessions")

    def __init__(
        self,
        config: SessionConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or SessionConfig()
        self._clock = clock
        # session id -> (data, expires_at)
        self._sessions: dict[str, tuple[dict[str, Any], float]] = {}
        self._lock = threading.Lock()

    def load(self, request: Request) -> Session:
        session_id = request.cookies.get(self._config.cookie_name)
        if session_id:
            with self._lock:
                entry = self._sessions.get(session_id)
                if entry is not None and entry[1] <= self._clock():
                    del self._sessions[session_id]
                    entry = None
            if entry is not None:
                return Session(dict(entry[0]), session_id=session_id)
        return Session()

    def save(self, response: Response, session: Session) -> Response:
        if not session.modified:
            return response
        now = self._clock()
        with self._lock:
            entry = None
            if session.session_id is not None:
                entry = self._sessions.get(session.session_id)
            if entry is None or entry[1] <= now:
                self._prune(now)
                session.session_id = secrets.token_urlsafe(32)
                expires_at = now + self._config.max_age
                is_new = True
            else:
                expires_at = entry[1]
                is_new = False
            self._sessions[session.session_id] = (dict(session), expires_at)
        if not is_new:
            return response
        return response.with_cookie(_session_cookie(self._config, session.session_id))

    def _prune(self, now: float) -> None:
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("Dropped %d expired in-memory sessions", len(expired))

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def create_session_store(config: AppConfig) -> SessionStore:
    """Pick the store implied by *config*: signed cookies when a secret is set."""
    if config.secret_key:
        return SignedCookieSessionStore(config.secret_key, config.session)
    logger.debug("No secret_key configured; using the in-memory session store")
    return MemorySessionStore(config.session)
