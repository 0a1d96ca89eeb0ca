"""ASGI handler — translates ASGI scope/messages to wicket types.

The only component that touches raw HTTP ASGI messages. Converts the
scope to a ``Request``, hands it to the ``Dispatcher`` and sends the
resulting ``Response`` back through ``send()``.
"""

from wicket._internal.asgi import Receive, Scope, Send
from wicket.http.request import Request
from wicket.server.dispatch import Dispatcher
from wicket.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await dispatcher.dispatch(request)
    await send_response(response, send, head=request.method == "HEAD")
