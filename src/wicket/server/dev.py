"""Development server.

Starts a pounce ASGI server with the live wicket App object in
single-worker mode, reloading on file changes when debug is on.
"""


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = True,
    app_path: str | None = None,
) -> None:
    """Start a pounce server for *app*.

    Pounce's ``run()`` takes an import string (e.g. ``"myapp:app"``),
    but wicket has a live ``App`` object, so ``pounce.Server`` is used
    directly with the ASGI callable.

    Args:
        app: ASGI callable (wicket App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes.
        app_path: Optional ``"module:attribute"`` import string. When
            provided, pounce reimports the app on each reload cycle.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        from wicket.errors import ConfigurationError

        msg = "Serving requires the 'pounce' package. Install it with: pip install wicket[server]"
        raise ConfigurationError(msg) from None

    config = ServerConfig(host=host, port=port, workers=1, reload=reload)
    server = Server(config, app, app_path=app_path)
    server.run()
