"""Security audit events.

An opt-in, process-wide event channel. The bearer and CSRF gates emit
``auth.bearer.rejected`` and ``csrf.rejected`` here; register a sink to
forward them to logs, metrics or a SIEM::

    set_security_event_sink(lambda event: audit_log.append(event))
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, TypeAlias

logger = logging.getLogger("wicket.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """One rejected or suspicious request."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    client: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


SecurityEventSink: TypeAlias = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Install the process-wide sink. ``None`` turns delivery off."""
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    ctx: Any | None = None,
    details: dict[str, Any] | None = None,
) -> SecurityEvent | None:
    """Deliver an event to the sink, if one is installed.

    *ctx* is anything with ``path`` and ``method`` attributes, normally
    the ``RequestContext``. A sink that raises is logged and ignored so
    telemetry can never change a response.
    """
    with _sink_lock:
        sink = _sink
    if sink is None:
        return None

    client = None
    request = getattr(ctx, "request", None)
    if request is not None and request.client:
        client = request.client[0]

    event = SecurityEvent(
        name=name,
        path=getattr(ctx, "path", None),
        method=getattr(ctx, "method", None),
        client=client,
        details=details or {},
    )
    try:
        sink(event)
    except Exception:
        logger.exception("Security event sink failed for %s", name)
    return event
