# errors.py
# Exceptions raised by the routing core and its adapters.

from typing import Any, Optional


class RoutingError(Exception):
    """Base class for every routing failure."""


class AdapterError(RoutingError):
    """The remote directions provider failed (transport error or non-2xx)."""

    def __init__(self, status_code: Optional[int], body: Any = None, message: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Directions request failed (status {status_code}).")


class NoRouteError(RoutingError):
    """The local network has no path between two nodes."""

    def __init__(self, start_id: Any, end_id: Any) -> None:
        self.start_id = start_id
        self.end_id = end_id
        super().__init__(f"No local route between nodes {start_id} and {end_id}.")


class InputError(RoutingError):
    """An endpoint could not be snapped to the network."""
