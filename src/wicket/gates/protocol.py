"""Gate protocol and the rejection renderer gates hand failures to.

A gate is any callable object matching::

    async def __call__(self, ctx: RequestContext) -> Response | None: ...

Returning ``None`` lets the request continue; returning a ``Response``
short-circuits the pipeline with it. Gates never raise for an expected
rejection. The ``state`` attribute names the ``DispatchState`` the
request reaches once the gate lets it through.
"""

from collections.abc import Awaitable, Callable
from typing import ClassVar, Protocol, TypeAlias

from wicket.context import DispatchState, RequestContext
from wicket.errors import HTTPError
from wicket.http.response import Response

# Renders a gate's rejection, honouring any registered error handler
RejectionRenderer: TypeAlias = Callable[[RequestContext, HTTPError], Awaitable[Response]]


class Gate(Protocol):
    """Protocol for wicket gates.

    No base class required::

        class RequireJSON:
            state = DispatchState.CSRF_CHECKED

            async def __call__(self, ctx):
                if ctx.request.content_type != "application/json":
                    return error_response("JSON only", 415)
                return None
    """

    state: ClassVar[DispatchState]

    async def __call__(self, ctx: RequestContext) -> Response | None: ...
