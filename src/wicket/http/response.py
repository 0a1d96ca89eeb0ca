"""HTTP response with a chainable ``.with_*()`` API.

Each transformation returns a new Response. Gates, the dispatcher and
the session store build the final response incrementally without ever
mutating one in place.
"""

from __future__ import annotations

import html
import json as json_module
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from wicket.http.cookies import SetCookie

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = HTML_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> Response:
        """Return a new Response with additional headers."""
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        return replace(self, headers=(*self.headers, *pairs))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def with_cookie(self, cookie: SetCookie) -> Response:
        """Return a new Response with an additional ``Set-Cookie``."""
        return replace(self, cookies=(*self.cookies, cookie))

    def header(self, name: str) -> str | None:
        """Return the first header value set under *name* (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    @property
    def json(self) -> Any:
        """Body parsed as JSON."""
        return json_module.loads(self.body_bytes)


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response. Returned from a handler, negotiated to 302."""

    url: str
    status: int = 302


def json_response(data: Any, status: int = 200) -> Response:
    """Serialize *data* as a JSON response."""
    return Response(body=json_module.dumps(data), status=status, content_type=JSON_CONTENT_TYPE)


def error_response(message: str, status: int) -> Response:
    """The ``{"error": message}`` body shared by every gate rejection."""
    return json_response({"error": message}, status=status)


def escape(value: object) -> str:
    """HTML-escape *value* (quotes included) for safe interpolation."""
    return html.escape(str(value), quote=True)
