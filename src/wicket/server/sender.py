"""ASGI response sending — translates a Response into ASGI messages."""

from wicket._internal.asgi import Send
from wicket.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(response: Response) -> list[tuple[bytes, bytes]]:
    """Build the raw ASGI header list, cookies and length included."""
    body = response.body_bytes if _body_allowed(response.status) else b""
    raw = [(b"content-type", response.content_type.encode("latin-1"))]
    raw.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )
    raw.extend(
        (b"set-cookie", cookie.to_header_value().encode("latin-1"))
        for cookie in response.cookies
    )
    raw.append((b"content-length", str(len(body)).encode("latin-1")))
    return raw


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Send *response* as one start message and one body message.

    For ``HEAD`` requests the headers describe the full body but no
    body bytes are sent.
    """
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response),
        }
    )
    body = b"" if head or not _body_allowed(response.status) else response.body_bytes
    await send({"type": "http.response.body", "body": body})
