"""CORS gate — origin check, response headers, and preflight replies.

The gate decides once per request whether the caller's ``Origin`` is
allowed and queues the matching headers on the context. ``OPTIONS``
requests are answered here with an empty body (200 when the origin is
allowed, 403 when not), without ever consulting the router.
"""

from typing import ClassVar

from wicket.config import CORSConfig
from wicket.context import DispatchState, RequestContext
from wicket.http.response import Response
from wicket.routing.pattern import compile_exemptions, is_exempt


class CORSGate:
    """Cross-origin resource sharing.

    ``"*"`` in ``allowed_origins`` allows every origin and reflects the
    caller's ``Origin`` back (or sends ``*`` when the request has none).
    Otherwise the origin must appear in the list verbatim.

    Usage::

        gate = CORSGate(CORSConfig(enabled=True, allowed_origins=("*",)))
    """

    __slots__ = ("_exemptions", "config")

    state: ClassVar[DispatchState] = DispatchState.CORS_CHECKED

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()
        self._exemptions = compile_exemptions(self.config.exempt)

    def allow_origin(self, origin: str | None) -> str | None:
        """Return the ``Access-Control-Allow-Origin`` value, or ``None`` if denied."""
        origins = self.config.allowed_origins
        if "*" in origins:
            return origin if origin else "*"
        if origin is not None and origin in origins:
            return origin
        return None

    async def __call__(self, ctx: RequestContext) -> Response | None:
        cfg = self.config
        if not cfg.enabled or is_exempt(ctx.path, self._exemptions):
            return None

        allowed = self.allow_origin(ctx.headers.get("origin"))
        if allowed is not None:
            ctx.add_header("Access-Control-Allow-Origin", allowed)
            ctx.add_header("Access-Control-Allow-Methods", ", ".join(cfg.allow_methods))
            ctx.add_header("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
            ctx.add_header("Access-Control-Max-Age", str(cfg.max_age))

        if ctx.method == "OPTIONS":
            return Response(body="", status=200 if allowed is not None else 403)
        return None
