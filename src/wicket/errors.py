"""Wicket exception hierarchy.

Shared across Router, App, gates and the dispatcher so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class WicketError(Exception):
    """Base for all wicket-specific errors."""


class ConfigurationError(WicketError):
    """Raised when app configuration is invalid.

    Malformed route or exemption patterns, unsupported methods and bad
    config keys all surface here, at setup time, never mid-request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WicketError):
    """An error that maps directly to an HTTP status code.

    Gates report their rejections with the subclasses below. Handlers
    may raise one deliberately; the dispatcher renders it with its
    status instead of treating it as a crash.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request body could not be parsed."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """401 — missing or unrecognized bearer token."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status=401, detail=detail)


class CSRFError(HTTPError):
    """403 — CSRF token absent, unknown to the session, or mismatched."""

    def __init__(self, detail: str = "CSRF Validation Failed") -> None:
        super().__init__(status=403, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
