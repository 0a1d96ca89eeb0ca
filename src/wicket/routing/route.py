"""Route and RouteMatch frozen dataclasses."""

from dataclasses import dataclass

from wicket._internal.types import Handler
from wicket.routing.pattern import PathPattern

# Methods a route can be registered for, in registration-helper order
ROUTE_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route. Immutable once added to a Router."""

    method: str
    path: str
    handler: Handler
    pattern: PathPattern


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``params`` holds the captured path segments in pattern order; the
    handler receives them positionally.
    """

    route: Route
    params: tuple[str, ...]
