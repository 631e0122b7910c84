from typing import List, Sequence, Tuple

import pytest

from navigation.site_router.errors import AdapterError
from navigation.site_router.models import Entrance, Maneuver, RemoteRoute
from navigation.site_router.nav_config import RoutingOptions
from navigation.site_router.network import GeoJSONNetwork


# Gate at the west end of a short east-west site road on the equator:
#   (0, 0) ---- (0.001, 0) ---- (0.002, 0)
GATE = (0.0, 0.0)
SITE_ROAD = [(0.0, 0.0), (0.001, 0.0), (0.002, 0.0)]
ONSITE_POINT = (0.002, 0.0001)     # ~11 m from the east end
OFFSITE_WEST = (-0.01, 0.0)        # ~1.1 km west of the gate
OFFSITE_SOUTH = (0.0, -0.01)       # ~1.1 km south of the gate


def road(coords, **props) -> dict:
    return {
        "type": "Feature",
        "properties": props,
        "geometry": {"type": "LineString", "coordinates": [list(c) for c in coords]},
    }


class RecordingNetwork(GeoJSONNetwork):
    """GeoJSONNetwork that remembers every shortest_path call."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.path_calls: List[Tuple] = []

    def shortest_path(self, node_a, node_b):
        self.path_calls.append((node_a, node_b))
        return super().shortest_path(node_a, node_b)


class FakeDirections:
    """Directions adapter returning a canned route and recording requests."""

    def __init__(self, route: RemoteRoute = None, error: Exception = None) -> None:
        self.calls: List[Tuple[List, str]] = []
        self._route = route
        self._error = error

    def route(self, waypoints: Sequence, profile: str = "driving") -> RemoteRoute:
        self.calls.append((list(waypoints), profile))
        if self._error is not None:
            raise self._error
        return self._route


@pytest.fixture
def site_network():
    return RecordingNetwork({"type": "FeatureCollection", "features": [road(SITE_ROAD)]})


@pytest.fixture
def entrance():
    return Entrance(
        coordinates=GATE,
        enter_maneuver=Maneuver(type="stop", instruction="Check in at the security gate."),
        exit_maneuver=Maneuver(type="stop", instruction="Check out at the security gate."),
    )


@pytest.fixture
def options(entrance):
    return RoutingOptions(max_snap=200.0, entrances=[entrance], mapbox_access_token="test-token")


@pytest.fixture
def remote_route():
    return RemoteRoute(
        geometry=[(-0.01, 0.0), (-0.005, 0.0), (-0.0001, 0.0)],
        maneuvers=[
            Maneuver(type="depart", instruction="Head east", location=(-0.01, 0.0)),
            Maneuver(type="turn", modifier="left", instruction="Turn left", location=(-0.005, 0.0)),
            Maneuver(type="arrive", instruction="You have arrived", location=(-0.0001, 0.0)),
        ],
    )


@pytest.fixture
def failing_directions():
    return FakeDirections(error=AdapterError(401, '{"message": "Not Authorized - Invalid Token"}'))
