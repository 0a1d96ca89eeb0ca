"""Wicket: a small request-dispatch framework with a gate chain in front.

Every request passes maintenance, security headers, CORS, bearer auth
and CSRF before it reaches a route handler. Each gate can be turned on
or off in ``AppConfig``.

Basic usage::

    from wicket import App, AppConfig, escape

    app = App(AppConfig(debug=True))

    @app.get("/hello/:name")
    def hello(ctx, name):
        return f"<h1>Hello, {escape(name)}!</h1>"

    app.run()

Batch jobs::

    @app.batch("cleanupLogs")
    def cleanup_logs():
        ...

    $ wicket batch myapp:app cleanupLogs
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "BatchRunner",
    "BearerConfig",
    "CORSConfig",
    "CSRFConfig",
    "CSRFError",
    "ConfigurationError",
    "DatabaseConfig",
    "DispatchState",
    "HTTPError",
    "NotFound",
    "Redirect",
    "Request",
    "RequestContext",
    "Response",
    "SecurityConfig",
    "SessionConfig",
    "Unauthorized",
    "WicketError",
    "escape",
    "json_response",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wicket`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wicket.app import App

        return App

    if name in (
        "AppConfig",
        "BearerConfig",
        "CORSConfig",
        "CSRFConfig",
        "DatabaseConfig",
        "SecurityConfig",
        "SessionConfig",
    ):
        from wicket import config as _config

        return getattr(_config, name)

    if name == "Request":
        from wicket.http.request import Request

        return Request

    if name in ("Response", "Redirect", "escape", "json_response"):
        from wicket.http import response as _resp

        return getattr(_resp, name)

    if name in ("RequestContext", "DispatchState"):
        from wicket import context as _ctx

        return getattr(_ctx, name)

    if name == "BatchRunner":
        from wicket.batch import BatchRunner

        return BatchRunner

    if name in (
        "WicketError",
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "Unauthorized",
        "CSRFError",
    ):
        from wicket import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
