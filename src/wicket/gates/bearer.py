"""Bearer-token gate — shared-secret API authentication.

Clients send ``Authorization: Bearer <token>``. The scheme prefix is
matched case-insensitively; the remainder is the token, byte for byte.
A request that presents a valid token on a non-exempt path is marked
``bearer_authenticated``, which later exempts it from CSRF.
"""

import logging
import secrets
from typing import ClassVar

from wicket.config import BearerConfig
from wicket.context import DispatchState, RequestContext
from wicket.errors import Unauthorized
from wicket.http.response import Response, error_response
from wicket.routing.pattern import compile_exemptions, is_exempt
from wicket.security.audit import emit_security_event

logger = logging.getLogger("wicket.gates")


class BearerAuthGate:
    """Require a configured bearer token on every non-exempt path.

    Rejections are a fixed ``401 {"error": "Unauthorized"}``; the
    pipeline stops there.

    Usage::

        gate = BearerAuthGate(BearerConfig(
            enabled=True,
            tokens=("secret-token-123",),
            exempt=("/", "/api/public*"),
        ))
    """

    __slots__ = ("_exemptions", "_tokens", "config")

    state: ClassVar[DispatchState] = DispatchState.BEARER_CHECKED

    def __init__(self, config: BearerConfig | None = None) -> None:
        self.config = config or BearerConfig()
        self._exemptions = compile_exemptions(self.config.exempt)
        self._tokens = tuple(token.encode("utf-8") for token in self.config.tokens)

    def extract_token(self, ctx: RequestContext) -> str | None:
        """Return the token after the scheme prefix, or ``None`` if malformed."""
        header = ctx.headers.get(self.config.header_name)
        if header is None:
            return None
        prefix = f"{self.config.scheme} "
        if header[: len(prefix)].lower() != prefix.lower():
            return None
        return header[len(prefix) :]

    def is_valid(self, token: str) -> bool:
        """Compare *token* against every configured token in constant time."""
        submitted = token.encode("utf-8")
        valid = False
        for expected in self._tokens:
            # No early exit: every token is compared on every request
            valid |= secrets.compare_digest(submitted, expected)
        return valid

    async def __call__(self, ctx: RequestContext) -> Response | None:
        if not self.config.enabled or is_exempt(ctx.path, self._exemptions):
            return None

        token = self.extract_token(ctx)
        if token is not None and self.is_valid(token):
            ctx.bearer_authenticated = True
            return None

        logger.info("Bearer authentication failed: %s %s", ctx.method, ctx.path)
        emit_security_event(
            "auth.bearer.rejected",
            ctx=ctx,
            details={"reason": "missing" if token is None else "invalid"},
        )
        return error_response(Unauthorized().detail, 401)
