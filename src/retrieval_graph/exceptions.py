"""Error types raised by the retrieval graph."""

from __future__ import annotations

from typing import Any, Optional


class RetrievalGraphError(Exception):
    """Base exception for failures originating in the retrieval graph itself."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class GraphConfigurationError(RetrievalGraphError):
    """Raised when the graph is wired incorrectly or state is written out of order."""


class RouteNotSetError(GraphConfigurationError):
    """Raised when routing dispatch runs before the router has set a route."""

    def __init__(self, message: str = "Route is not set") -> None:
        super().__init__(message)


class InvalidRouteError(GraphConfigurationError):
    """Raised when the state holds a route the dispatcher does not recognise."""

    def __init__(self, route: Any) -> None:
        self.route = route
        super().__init__(f"Invalid route: {route!r}")


class RoutingSchemaError(RetrievalGraphError):
    """Raised when the routing model output cannot be coerced into ``RouteDecision``."""

    def __init__(self, message: str, raw_output: Optional[Any] = None) -> None:
        self.raw_output = raw_output
        super().__init__(message)


__all__ = [
    "GraphConfigurationError",
    "InvalidRouteError",
    "RetrievalGraphError",
    "RouteNotSetError",
    "RoutingSchemaError",
]
