"""Per-request context passed explicitly through gates and handlers.

There are no ambient request globals. The dispatcher builds one
``RequestContext`` at request entry, every gate reads and annotates it,
and the matched handler receives it as its first argument::

    @app.post("/form")
    def submit(ctx):
        return f"Thanks, {escape(ctx.input('message', ''))}"

The context owns the per-request state the gates share: headers they
want on the final response, the ``bearer_authenticated`` flag that lets
API clients skip CSRF, and the lazily loaded session.
"""

import secrets
from enum import Enum
from typing import Any

from wicket.config import CSRFConfig
from wicket.errors import BadRequest
from wicket.http.forms import FormData
from wicket.http.headers import Headers
from wicket.http.query import QueryParams
from wicket.http.request import Request
from wicket.routing.pattern import normalize_path
from wicket.sessions import Session, SessionStore


class DispatchState(Enum):
    """How far a request got through the pipeline."""

    START = "start"
    MAINTENANCE_CHECKED = "maintenance_checked"
    HEADERS_SENT = "headers_sent"
    CORS_CHECKED = "cors_checked"
    BEARER_CHECKED = "bearer_checked"
    CSRF_CHECKED = "csrf_checked"
    ROUTED = "routed"
    HANDLED = "handled"
    NOT_FOUND = "not_found"
    FAULTED = "faulted"
    ERROR_HANDLED = "error_handled"


class RequestContext:
    """Everything one request carries through the pipeline.

    Attributes:
        request: The underlying immutable ``Request``.
        method: Upper-cased HTTP method.
        path: Normalized path (one trailing slash stripped, root kept).
        form: Parsed form body; empty until ``read_form()`` and for non-form requests.
        bearer_authenticated: Set by the bearer gate on a valid token.
        response_headers: Headers gates want on whatever response is sent.
        params: Captured route parameters, in pattern order.
        state: The last ``DispatchState`` reached.
    """

    __slots__ = (
        "_csrf",
        "_form_read",
        "_session",
        "_store",
        "bearer_authenticated",
        "form",
        "method",
        "params",
        "path",
        "request",
        "response_headers",
        "state",
    )

    def __init__(
        self,
        request: Request,
        store: SessionStore,
        *,
        form: FormData | None = None,
        csrf: CSRFConfig | None = None,
    ) -> None:
        self.request = request
        self.method = request.method
        self.path = normalize_path(request.path)
        self.form = form if form is not None else FormData()
        self._form_read = form is not None
        self.bearer_authenticated = False
        self.response_headers: list[tuple[str, str]] = []
        self.params: tuple[str, ...] = ()
        self.state = DispatchState.START
        self._store = store
        self._csrf = csrf or CSRFConfig()
        self._session: Session | None = None

    async def read_form(self) -> FormData:
        """Parse a form-encoded body into ``form`` on first call.

        The CSRF gate calls this only when it has a token to check, and
        the dispatcher calls it once the route is matched, so ``input()``
        stays synchronous in handlers. Non-form bodies are left unread
        for the handler to consume.

        Raises ``BadRequest`` when the body claims a form encoding but
        cannot be parsed.
        """
        if not self._form_read:
            try:
                self.form = await self.request.form()
            except ValueError as exc:
                raise BadRequest(f"Malformed form body: {exc}") from exc
            self._form_read = True
        return self.form

    @property
    def headers(self) -> Headers:
        return self.request.headers

    @property
    def query(self) -> QueryParams:
        return self.request.query

    @property
    def session(self) -> Session:
        """The client's session, loaded from the store on first access."""
        if self._session is None:
            self._session = self._store.load(self.request)
        return self._session

    @property
    def session_loaded(self) -> bool:
        """True once ``session`` has been touched during this request."""
        return self._session is not None

    def add_header(self, name: str, value: str) -> None:
        """Queue a header for the final response, whatever it turns out to be."""
        self.response_headers.append((name, value))

    def input(self, key: str, default: Any = None) -> Any:
        """Return a request input: form body first, then the query string."""
        value = self.form.get(key)
        if value is not None:
            return value
        return self.query.get(key, default)

    def csrf_token(self) -> str:
        """Return this session's CSRF token, creating it on first use.

        The token is generated once per session and never rotated, so
        every form rendered in the session carries the same value.
        """
        key = self._csrf.session_key
        token = self.session.get(key)
        if not token:
            token = secrets.token_hex(self._csrf.token_length)
            self.session[key] = token
        return token

    def csrf_field(self) -> str:
        """Render a hidden ``<input>`` carrying the CSRF token."""
        return (
            f'<input type="hidden" name="{self._csrf.field_name}" '
            f'value="{self.csrf_token()}">'
        )

    def __repr__(self) -> str:
        return f"<RequestContext {self.method} {self.path} state={self.state.name}>"
