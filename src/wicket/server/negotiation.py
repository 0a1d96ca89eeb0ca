"""Content negotiation — maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable. The same rules
apply to route handlers and error handlers.
"""

import json as json_module
from typing import Any
from urllib.parse import quote

from wicket.http.response import HTML_CONTENT_TYPE, JSON_CONTENT_TYPE, Redirect, Response

# Reserved URL characters plus "%" so already-encoded targets pass through unchanged
LOCATION_SAFE = ":/?#[]@!$&'()*+,;=%~"


def negotiate(value: Any) -> Response:
    """Convert a handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> 302 (or its own status) with Location header
    3. ``None``             -> 200, empty body
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``dict`` / ``list``  -> 200, application/json
    7. ``(value, int)``     -> negotiate value, override status
    8. ``(value, int, dict)`` -> negotiate value, override status + add headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            location = quote(value.url, safe=LOCATION_SAFE)
            return Response(body="", status=value.status).with_header("Location", location)
        case None:
            return Response(body="")
        case str():
            return Response(body=value, content_type=HTML_CONTENT_TYPE)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type=JSON_CONTENT_TYPE,
            )
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a str, bytes, dict, list, Response, Redirect or (value, status) tuple."
            )
            raise TypeError(msg)
