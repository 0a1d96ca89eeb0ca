"""Immutable HTTP request.

Frozen metadata with async body access. The gates and the router only
ever read a request; per-request state lives on ``RequestContext``.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from wicket._internal.asgi import Receive, Scope
from wicket.http.cookies import parse_cookies
from wicket.http.forms import FormData, is_form_content_type, parse_form_data
from wicket.http.headers import Headers
from wicket.http.query import QueryParams


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the raw ASGI path; the normalized form used for matching
    lives on ``RequestContext.path``. Body access is async and cached:
    the ASGI receive channel is consumed once.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    cookies: Mapping[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    _receive: Receive = field(default=_empty_receive, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string, as the client sent it."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "body" not in self._cache:
            self._cache["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["body"]

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks as the server delivers them."""
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        """Read the body as UTF-8 text."""
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def form(self) -> FormData:
        """Parse the body as form data.

        Returns an empty ``FormData`` when the body is not form-encoded,
        so callers can always look up ``csrf_token`` and friends.
        """
        if "form" not in self._cache:
            if is_form_content_type(self.content_type):
                assert self.content_type is not None
                self._cache["form"] = parse_form_data(await self.body(), self.content_type)
            else:
                self._cache["form"] = FormData()
        return self._cache["form"]

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        headers = Headers(scope.get("headers", ()))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"] or "/",
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            cookies=parse_cookies(headers.get("cookie", "")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
