"""The request pipeline: gates, routing, handler, fault boundary.

One ``Dispatcher`` is built when the app freezes and serves every
request after that. A request moves through a fixed sequence of
``DispatchState``s::

    START → MAINTENANCE_CHECKED → HEADERS_SENT → CORS_CHECKED
          → BEARER_CHECKED → CSRF_CHECKED → ROUTED → HANDLED | NOT_FOUND

Any gate may short-circuit straight to ``HANDLED``. Anything that
raises unexpectedly lands in ``FAULTED`` and leaves as a rendered 500
(``ERROR_HANDLED``). Nothing propagates past ``handle()``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from wicket._internal.invoke import invoke
from wicket._internal.types import ErrorHandler
from wicket.config import AppConfig, CSRFConfig
from wicket.context import DispatchState, RequestContext
from wicket.errors import HTTPError, NotFound
from wicket.gates import (
    BearerAuthGate,
    CORSGate,
    CSRFGate,
    Gate,
    MaintenanceGate,
    SecurityHeadersGate,
)
from wicket.http.request import Request
from wicket.http.response import Response
from wicket.routing.router import Router
from wicket.server.errors import (
    log_fault,
    render_http_error,
    render_internal_error,
    render_not_found,
    render_rejection,
)
from wicket.server.negotiation import negotiate
from wicket.server.sender import encode_headers
from wicket.sessions import SessionStore

logger = logging.getLogger("wicket.server")


class Dispatcher:
    """Runs one request through gates, router and handler.

    Usage::

        dispatcher = Dispatcher.from_config(config, router, error_handlers, store)
        response = await dispatcher.dispatch(request)
    """

    __slots__ = (
        "csrf",
        "debug",
        "error_handlers",
        "gates",
        "maintenance",
        "router",
        "sessions",
    )

    def __init__(
        self,
        *,
        router: Router,
        sessions: SessionStore,
        gates: tuple[Gate, ...] = (),
        maintenance: MaintenanceGate | None = None,
        error_handlers: Mapping[int | type, ErrorHandler] | None = None,
        csrf: CSRFConfig | None = None,
        debug: bool = False,
    ) -> None:
        self.router = router
        self.sessions = sessions
        self.gates = gates
        self.maintenance = maintenance
        self.error_handlers = dict(error_handlers or {})
        self.csrf = csrf or CSRFConfig()
        self.debug = debug

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        router: Router,
        error_handlers: Mapping[int | type, ErrorHandler],
        sessions: SessionStore,
    ) -> Dispatcher:
        """Build the standard gate chain from *config*.

        Exemption patterns compile here, so a malformed one fails at
        freeze time with ``ConfigurationError``.
        """
        security = config.security
        dispatcher = cls(
            router=router,
            sessions=sessions,
            maintenance=MaintenanceGate(config.maintenance_file, config.maintenance_page),
            error_handlers=error_handlers,
            csrf=security.csrf,
            debug=config.debug,
        )
        dispatcher.gates = (
            SecurityHeadersGate(security.headers_enabled),
            CORSGate(security.cors),
            BearerAuthGate(security.bearer),
            CSRFGate(security.csrf, on_reject=dispatcher.reject),
        )
        return dispatcher

    async def dispatch(self, request: Request) -> Response:
        """Handle *request* and return the final response."""
        return await self.handle(RequestContext(request, self.sessions, csrf=self.csrf))

    async def handle(self, ctx: RequestContext) -> Response:
        """Run *ctx* through the pipeline; the single fault boundary.

        The state reached is left on ``ctx.state``.
        """
        try:
            if self.maintenance is not None:
                response = await self.maintenance(ctx)
                if response is not None:
                    # Nothing else runs while the app is down, logging included
                    ctx.state = DispatchState.HANDLED
                    return response
            ctx.state = DispatchState.MAINTENANCE_CHECKED

            response = await self._run(ctx)
            if ctx.session_loaded:
                response = self.sessions.save(response, ctx.session)
            encode_headers(response)
        except NotFound as exc:
            ctx.state = DispatchState.NOT_FOUND
            response = await render_not_found(ctx, self.error_handlers, exc)
        except HTTPError as exc:
            ctx.state = DispatchState.HANDLED
            response = await render_http_error(exc, ctx, self.error_handlers)
        except Exception as exc:
            ctx.state = DispatchState.FAULTED
            log_fault(exc)
            response = await render_internal_error(exc, ctx, self.error_handlers, self.debug)
            ctx.state = DispatchState.ERROR_HANDLED

        if ctx.response_headers:
            response = response.with_headers(ctx.response_headers)
        logger.debug(
            "%s %s -> %d (%s)", ctx.method, ctx.path, response.status, ctx.state.name
        )
        return response

    async def reject(self, ctx: RequestContext, exc: HTTPError) -> Response:
        """Render a gate rejection through the registered error handlers."""
        return await render_rejection(exc, ctx, self.error_handlers)

    async def _run(self, ctx: RequestContext) -> Response:
        for gate in self.gates:
            response = await gate(ctx)
            if response is not None:
                ctx.state = DispatchState.HANDLED
                return response
            ctx.state = gate.state

        try:
            match = self.router.match(ctx.method, ctx.path)
        except NotFound:
            ctx.state = DispatchState.NOT_FOUND
            return await render_not_found(ctx, self.error_handlers)

        ctx.state = DispatchState.ROUTED
        ctx.params = match.params
        await ctx.read_form()
        result = await invoke(match.route.handler, ctx, *match.params)
        response = negotiate(result)
        ctx.state = DispatchState.HANDLED
        return response
