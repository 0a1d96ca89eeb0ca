"""CSRF gate — token-based, session-backed.

Every session gets one random token (see ``RequestContext.csrf_token``)
that forms embed as a hidden ``csrf_token`` field and scripts send as
``X-CSRF-Token``. State-changing requests must echo it back.

Skipped entirely for bearer-authenticated requests (API clients hold
no session), when disabled, and for ``GET``, ``HEAD`` and ``OPTIONS``.

Templates::

    <form method="post">
        {ctx.csrf_field()}
        ...
    </form>
"""

import logging
import secrets
from typing import ClassVar

from wicket.config import CSRFConfig
from wicket.context import DispatchState, RequestContext
from wicket.errors import BadRequest, CSRFError
from wicket.gates.protocol import RejectionRenderer
from wicket.http.forms import FormData
from wicket.http.response import Response, error_response
from wicket.routing.pattern import compile_exemptions, is_exempt
from wicket.security.audit import emit_security_event

logger = logging.getLogger("wicket.gates")

# Methods that never mutate state and are never checked
SAFE_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS"})


async def _default_rejection(ctx: RequestContext, exc: CSRFError) -> Response:
    return error_response(exc.detail, exc.status)


class CSRFGate:
    """Reject unsafe requests whose token does not match the session's.

    The rejection itself is rendered by *on_reject*, which the app wires
    to its error handlers, so a registered handler can style the 403
    page. The status always stays 403.
    """

    __slots__ = ("_exemptions", "_on_reject", "config")

    state: ClassVar[DispatchState] = DispatchState.CSRF_CHECKED

    def __init__(
        self,
        config: CSRFConfig | None = None,
        on_reject: RejectionRenderer | None = None,
    ) -> None:
        self.config = config or CSRFConfig()
        self._exemptions = compile_exemptions(self.config.exempt)
        self._on_reject = on_reject or _default_rejection

    def applies_to(self, ctx: RequestContext) -> bool:
        """True if *ctx* needs a token check at all."""
        if ctx.bearer_authenticated or not self.config.enabled:
            return False
        if ctx.method in SAFE_METHODS:
            return False
        return not is_exempt(ctx.path, self._exemptions)

    async def submitted_token(self, ctx: RequestContext) -> str | None:
        """The token the client sent: form field first, then header.

        The body is parsed here, only for requests that need the check.
        A body that fails to parse carries no form token.
        """
        try:
            form = await ctx.read_form()
        except BadRequest:
            form = FormData()
        token = form.get(self.config.field_name)
        if token is None:
            token = ctx.headers.get(self.config.header_name)
        return token

    async def is_valid(self, ctx: RequestContext) -> bool:
        expected = ctx.session.get(self.config.session_key)
        submitted = await self.submitted_token(ctx)
        if not expected or submitted is None:
            return False
        # Bytes, so a non-ASCII submission compares instead of raising
        return secrets.compare_digest(submitted.encode("utf-8"), str(expected).encode("utf-8"))

    async def __call__(self, ctx: RequestContext) -> Response | None:
        if not self.applies_to(ctx) or await self.is_valid(ctx):
            return None

        logger.warning("CSRF Validation Failed: %s %s", ctx.method, ctx.path)
        emit_security_event("csrf.rejected", ctx=ctx)
        response = await self._on_reject(ctx, CSRFError())
        return response.with_status(403)
