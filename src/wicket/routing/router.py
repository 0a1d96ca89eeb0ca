"""Ordered router.

A flat, append-only list of routes scanned in registration order.
Registration order is the priority order, so an earlier
``/users/:id`` shadows a later ``/users/me`` for the same method.
"""

from wicket._internal.types import Handler
from wicket.errors import ConfigurationError, NotFound
from wicket.routing.pattern import compile_pattern
from wicket.routing.route import ROUTE_METHODS, Route, RouteMatch


class Router:
    """First-match-wins router over compiled route patterns.

    Usage::

        router = Router()
        router.add("GET", "/hello/:name", hello)
        router.compile()
        match = router.match("GET", "/hello/World")
        match.params  # ("World",)
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, method: str, path: str, handler: Handler) -> Route:
        """Append a route. Must be called before ``compile()``.

        The pattern is compiled here so a malformed path fails at
        registration instead of on the first request.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        method = method.upper()
        if method not in ROUTE_METHODS:
            msg = f"Unsupported route method {method!r}. Supported: {', '.join(ROUTE_METHODS)}"
            raise ConfigurationError(msg)
        if not path.startswith("/"):
            msg = f"Route path {path!r} must start with '/'"
            raise ConfigurationError(msg)

        route = Route(
            method=method,
            path=path,
            handler=handler,
            pattern=compile_pattern(path, "route"),
        )
        self._routes.append(route)
        return route

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in match-priority order."""
        return tuple(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Return the first route matching *method* and *path*.

        *path* should already be normalized (see ``normalize_path``).
        Raises ``NotFound`` when no route matches.
        """
        for route in self._routes:
            if route.method != method:
                continue
            params = route.pattern.extract(path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        raise NotFound(f"No route matches {method} {path!r}")
