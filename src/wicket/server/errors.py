"""Error rendering for wicket requests.

Maps 404s, deliberate ``HTTPError``s, gate rejections and unexpected
failures to Response objects, using registered error handlers or
fixed default bodies. A failing error handler never escapes: it is
logged and the default body is sent instead.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from wicket._internal.types import ErrorHandler
from wicket.context import RequestContext
from wicket.errors import HTTPError, NotFound
from wicket.http.response import Response, error_response
from wicket.server.debug_page import fault_location, render_debug_page
from wicket.server.negotiation import negotiate
from wicket.server.sender import encode_headers

logger = logging.getLogger("wicket.server")

NOT_FOUND_BODY = "<h1>404 Not Found</h1>"
INTERNAL_ERROR_BODY = "<h1>500 Internal Server Error</h1><p>Something went wrong.</p>"

ErrorHandlers: TypeAlias = Mapping[int | type, ErrorHandler]


def find_handler(
    handlers: ErrorHandlers, exc: BaseException, *statuses: int
) -> ErrorHandler | None:
    """Look up a handler by exact exception type, then by each status in turn."""
    handler = handlers.get(type(exc))
    if handler is not None:
        return handler
    for status in statuses:
        handler = handlers.get(status)
        if handler is not None:
            return handler
    return None


async def call_error_handler(
    handler: Callable[..., Any],
    ctx: RequestContext,
    exc: BaseException,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (ctx), or two (ctx, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(ctx, exc)
    elif len(params) == 1:
        result = handler(ctx)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result)


async def _render_with(
    handler: ErrorHandler | None,
    ctx: RequestContext,
    exc: BaseException,
    status: int,
    default: Callable[[], Response],
) -> Response:
    """Run *handler* if there is one, keeping *status* unless it chose its own."""
    if handler is None:
        return default()
    try:
        response = await call_error_handler(handler, ctx, exc)
        encode_headers(response)
    except Exception as handler_exc:
        log_fault(handler_exc, prefix="Error handler failed")
        return default()
    if response.status == 200:
        response = response.with_status(status)
    return response


def log_fault(exc: BaseException, *, prefix: str = "Uncaught Exception") -> None:
    """Log *exc* at ERROR as ``<prefix>: <message> in <file>:<line>`` plus traceback."""
    filename, lineno = fault_location(exc)
    logger.error("%s: %s in %s:%d", prefix, exc, filename, lineno, exc_info=exc)


async def render_not_found(
    ctx: RequestContext,
    handlers: ErrorHandlers,
    exc: NotFound | None = None,
) -> Response:
    """The 404 page: registered handler or the built-in notice."""
    logger.warning("404 Not Found: %s %s", ctx.method, ctx.path)
    exc = exc or NotFound()
    return await _render_with(
        find_handler(handlers, exc, 404),
        ctx,
        exc,
        404,
        lambda: Response(body=NOT_FOUND_BODY, status=404),
    )


async def render_http_error(
    exc: HTTPError,
    ctx: RequestContext,
    handlers: ErrorHandlers,
) -> Response:
    """Render a deliberate ``HTTPError`` with its status and detail."""
    logger.debug("%d %s %s: %s", exc.status, ctx.method, ctx.path, exc.detail)

    def default() -> Response:
        return error_response(exc.detail or f"Error {exc.status}", exc.status).with_headers(
            exc.headers
        )

    return await _render_with(find_handler(handlers, exc, exc.status), ctx, exc, exc.status, default)


async def render_rejection(
    exc: HTTPError,
    ctx: RequestContext,
    handlers: ErrorHandlers,
) -> Response:
    """Render a gate rejection, falling back to the 500 handler.

    Used by the CSRF gate: a 403-specific handler wins, then the
    catch-all 500 handler, then the JSON error body.
    """
    return await _render_with(
        find_handler(handlers, exc, exc.status, 500),
        ctx,
        exc,
        exc.status,
        lambda: error_response(exc.detail, exc.status),
    )


async def render_internal_error(
    exc: Exception,
    ctx: RequestContext,
    handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""

    def default() -> Response:
        body = render_debug_page(exc) if debug else INTERNAL_ERROR_BODY
        return Response(body=body, status=500)

    return await _render_with(find_handler(handlers, exc, 500), ctx, exc, 500, default)
