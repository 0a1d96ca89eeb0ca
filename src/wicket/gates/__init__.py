"""Gates — the security pipeline every request passes before routing.

A gate is any object with ``async __call__(ctx) -> Response | None``.
The dispatcher runs them in a fixed order:

    MaintenanceGate -- 503 while the sentinel file exists
    SecurityHeadersGate -- nosniff, SAMEORIGIN, XSS filter headers
    CORSGate -- origin headers and preflight replies
    BearerAuthGate -- shared-secret API tokens
    CSRFGate -- session token check on unsafe methods
"""

from wicket.gates.bearer import BearerAuthGate
from wicket.gates.cors import CORSGate
from wicket.gates.csrf import SAFE_METHODS, CSRFGate
from wicket.gates.maintenance import MAINTENANCE_BODY, MaintenanceGate
from wicket.gates.protocol import Gate, RejectionRenderer
from wicket.gates.security_headers import SECURITY_HEADERS, SecurityHeadersGate

__all__ = [
    "MAINTENANCE_BODY",
    "SAFE_METHODS",
    "SECURITY_HEADERS",
    "BearerAuthGate",
    "CORSGate",
    "CSRFGate",
    "Gate",
    "MaintenanceGate",
    "RejectionRenderer",
    "SecurityHeadersGate",
]
