"""Maintenance gate — 503 while a sentinel file exists.

Drop the sentinel (``.maintenance`` by default) next to the app to take
it offline; remove it to bring the app back. The check runs first, on
every request, so nothing else happens while the file is present: no
gates, no routing, no session writes.
"""

from pathlib import Path
from typing import ClassVar

from wicket.context import DispatchState, RequestContext
from wicket.http.response import Response

MAINTENANCE_BODY = (
    "<h1>503 Service Unavailable</h1>"
    "<p>We are currently undergoing maintenance. Please check back later.</p>"
)


class MaintenanceGate:
    """Answer 503 while *sentinel* exists.

    Args:
        sentinel: File whose presence enables maintenance mode.
            ``None`` disables the check.
        page: Optional HTML file served as the 503 body when it exists.
    """

    __slots__ = ("page", "sentinel")

    state: ClassVar[DispatchState] = DispatchState.MAINTENANCE_CHECKED

    def __init__(self, sentinel: str | Path | None, page: str | Path | None = None) -> None:
        self.sentinel = Path(sentinel) if sentinel is not None else None
        self.page = Path(page) if page is not None else None

    @property
    def active(self) -> bool:
        return self.sentinel is not None and self.sentinel.exists()

    def body(self) -> str | bytes:
        """The maintenance page, or the built-in notice."""
        if self.page is not None and self.page.is_file():
            return self.page.read_bytes()
        return MAINTENANCE_BODY

    async def __call__(self, ctx: RequestContext) -> Response | None:
        if not self.active:
            return None
        return Response(body=self.body(), status=503)
