"""Cookie parsing and ``Set-Cookie`` serialization.

The read side (``parse_cookies``) feeds ``Request.cookies``; the write
side (``SetCookie``) is attached to a ``Response`` by the session stores.
"""

from dataclasses import dataclass


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name-value dict.

    Malformed pairs (no ``=``) are skipped. The first occurrence of a
    name wins, matching how browsers order more specific paths first.
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep and name.strip():
            cookies.setdefault(name.strip(), value.strip())
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a Response."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value."""
        attrs = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            attrs.append(f"Max-Age={self.max_age}")
        if self.path:
            attrs.append(f"Path={self.path}")
        if self.domain:
            attrs.append(f"Domain={self.domain}")
        if self.secure:
            attrs.append("Secure")
        if self.httponly:
            attrs.append("HttpOnly")
        if self.samesite:
            attrs.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(attrs)
