# directions_client.py
# Public road directions: the adapter interface the routing machine consumes,
# plus a Mapbox Directions API client.
#
# Sole responsibility of the client: talk to Mapbox over HTTP and return a
# normalized RemoteRoute. Coordinates go out as "lon,lat;lon,lat".
# It does not know anything about the local network or entrances.

import logging
from typing import List, Optional, Protocol, Sequence

import requests

from .errors import AdapterError
from .models import Maneuver, Point, RemoteRoute, as_point
from .nav_config import RoutingOptions

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Adapter interface
# ---------------------------------------------------------------------------

class DirectionsAdapter(Protocol):
    """What the routing machine needs from a public directions provider."""

    def route(self, waypoints: Sequence[Point], profile: str = "driving") -> RemoteRoute:
        ...


# ---------------------------------------------------------------------------
# Mapbox client
# ---------------------------------------------------------------------------

class MapboxDirectionsClient:
    """
    Mapbox Directions API v5 client.

    Args:
        access_token: Mapbox access token.
        base_url:     Directions endpoint root.
        timeout:      Seconds to wait for Mapbox before giving up.
        session:      Optional requests.Session to reuse connections.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.mapbox.com/directions/v5",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests

        if not self.access_token:
            logger.warning("No Mapbox access token configured; directions requests will be rejected.")

    @classmethod
    def from_options(cls, options: RoutingOptions) -> "MapboxDirectionsClient":
        return cls(
            access_token=options.mapbox_access_token,
            base_url=options.directions_base_url,
            timeout=options.request_timeout_s,
        )

    #----------------
    # Internal helpers
    #----------------
    @staticmethod
    def format_coordinates(waypoints: Sequence[Point]) -> str:
        """Convert a list of (lon, lat) to Mapbox format 'lon,lat;lon,lat;...'"""
        return ";".join(f"{lon},{lat}" for lon, lat in waypoints)

    def build_url(self, waypoints: Sequence[Point], profile: str) -> str:
        return f"{self.base_url}/mapbox/{profile}/{self.format_coordinates(waypoints)}"

    #----------------
    # Public methods
    #----------------
    def route(self, waypoints: Sequence[Point], profile: str = "driving") -> RemoteRoute:
        """
        Request a route through the waypoints in order.

        Returns:
            RemoteRoute with the full route geometry and the first leg's
            step maneuvers, exactly as Mapbox reported them.

        Raises:
            ValueError:   Fewer than two waypoints.
            AdapterError: Transport failure, non-200 status, malformed body, or no route.
        """
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required to compute a route.")

        url = self.build_url(waypoints, profile)
        logger.debug(f"Mapbox request: {url}")
        try:
            response = self._http.get(
                url,
                params={
                    "geometries": "geojson",
                    "steps": "true",
                    "overview": "full",
                    "access_token": self.access_token,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AdapterError(None, str(e), message=f"Directions request failed: {e}") from e

        if response.status_code != 200:
            raise AdapterError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(response.status_code, response.text,
                               message="Directions response was not valid JSON.") from e

        routes = data.get("routes") or []
        if not routes:
            raise AdapterError(response.status_code, data,
                               message=f"Directions returned no route: {data.get('code', 'unknown')}")

        try:
            route = routes[0]  # Mapbox may return alternatives; we only want the best one
            legs = route.get("legs") or []
            steps = legs[0].get("steps", []) if legs else []

            geometry: List[Point] = [as_point(c) for c in route["geometry"]["coordinates"]]
            maneuvers = [Maneuver.from_dict(s["maneuver"]) for s in steps if "maneuver" in s]
        except (KeyError, TypeError, IndexError, ValueError, AttributeError) as e:
            raise AdapterError(response.status_code, data,
                               message=f"Directions response was malformed: {e!r}") from e
        logger.info(f"Mapbox route: {len(geometry)} points, {len(maneuvers)} maneuvers.")
        return RemoteRoute(geometry=geometry, maneuvers=maneuvers)
