"""Security headers gate — nosniff, frame and XSS-filter headers.

Queued on the request context rather than set on a response, so the
headers reach every response the request produces: handler output,
401/403/404/500 pages and CORS preflight replies alike.
"""

from typing import ClassVar

from wicket.context import DispatchState, RequestContext
from wicket.http.response import Response

SECURITY_HEADERS: tuple[tuple[str, str], ...] = (
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "SAMEORIGIN"),
    ("X-XSS-Protection", "1; mode=block"),
)


class SecurityHeadersGate:
    """Queue the standard security headers. Never short-circuits.

    Usage::

        gate = SecurityHeadersGate()
        await gate(ctx)
        ctx.response_headers  # [("X-Content-Type-Options", "nosniff"), ...]
    """

    __slots__ = ("enabled",)

    state: ClassVar[DispatchState] = DispatchState.HEADERS_SENT

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    async def __call__(self, ctx: RequestContext) -> Response | None:
        if self.enabled:
            ctx.response_headers.extend(SECURITY_HEADERS)
        return None
