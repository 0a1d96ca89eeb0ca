"""Security telemetry.

Gates report rejected credentials here; applications decide where the
events go.
"""

from wicket.security.audit import (
    SecurityEvent,
    SecurityEventSink,
    emit_security_event,
    set_security_event_sink,
)

__all__ = [
    "SecurityEvent",
    "SecurityEventSink",
    "emit_security_event",
    "set_security_event_sink",
]
