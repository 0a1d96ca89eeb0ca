"""Routing — ordered route table over compiled path patterns.

Routes are registered during setup and matched in registration order:
the first route whose method and pattern both match wins.
"""

from wicket.routing.pattern import PathPattern, compile_pattern
from wicket.routing.route import Route, RouteMatch
from wicket.routing.router import Router

__all__ = ["PathPattern", "Route", "RouteMatch", "Router", "compile_pattern"]
