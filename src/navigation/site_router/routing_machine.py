# routing_machine.py
# Public entry point for routing.
# Decides which parts of a trip run on the local way network and which on
# public roads, then stitches the pieces together through the site entrance.

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from .directions_client import DirectionsAdapter, MapboxDirectionsClient
from .errors import InputError, RoutingError
from .maneuvers import synthesize
from .models import Entrance, Maneuver, Point, RouteResult, SnapResult, as_point
from .nav_config import RoutingOptions
from .network import NetworkAdapter

logger = logging.getLogger(__name__)


def _join(first: List[Point], second: List[Point]) -> List[Point]:
    """Concatenate two polylines, dropping the shared point at the seam."""
    if first and second and first[-1] == second[0]:
        return first + second[1:]
    return first + second


class RoutingMachine:
    """
    Directions across a private way network and public roads.

    Typical lifecycle:
        machine = RoutingMachine(network, RoutingOptions(entrances=[gate]))
        future = machine.get_directions((-100.38, 47.13), (-100.37, 47.13))
        result = future.result()

    The network is shared, never modified, and owned by the caller. The
    machine keeps no state between requests, so one instance can serve any
    number of calls.

    Args:
        network:    Local network adapter (nearest_node / shortest_path).
        options:    RoutingOptions; defaults to RoutingOptions().
        directions: Public directions adapter; defaults to a Mapbox client
                    built from the options.
    """

    def __init__(
        self,
        network: NetworkAdapter,
        options: Optional[RoutingOptions] = None,
        directions: Optional[DirectionsAdapter] = None,
    ) -> None:
        self.network = network
        self.options = options or RoutingOptions()
        self.directions = directions or MapboxDirectionsClient.from_options(self.options)
        self._executor = ThreadPoolExecutor(
            max_workers=self.options.max_workers,
            thread_name_prefix="routing",
        )

        if len(self.options.entrances) > 1:
            logger.warning(
                f"{len(self.options.entrances)} entrances configured; only the first one is used."
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "RoutingMachine":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_directions(
        self,
        a: Point,
        b: Point,
        callback: Optional[Callable[[Future], None]] = None,
    ) -> "Future[RouteResult]":
        """
        Asynchronously get directions from a to b.

        Failures (AdapterError, NoRouteError, InputError) are set on the
        returned future rather than raised here.

        Args:
            a:        Start point (lon, lat).
            b:        Destination point (lon, lat).
            callback: Optional function called with the finished future.

        Returns:
            Future resolving to a RouteResult.
        """
        future = self._executor.submit(self.route, a, b)
        if callback is not None:
            future.add_done_callback(callback)
        return future

    def route(self, a: Point, b: Point) -> RouteResult:
        """
        Synchronously get directions from a to b.

        Raises:
            InputError:   An endpoint could not be snapped.
            NoRouteError: The local network cannot connect the nodes.
            AdapterError: The public directions request failed.
        """
        a, b = as_point(a), as_point(b)
        try:
            return self._route(a, b)
        except RoutingError as e:
            logger.warning(f"Directions {a} → {b} failed: {e}")
            raise

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _snap(self, point: Point, label: str) -> SnapResult:
        snap = self.network.nearest_node(point)
        if snap is None:
            raise InputError(f"Could not snap {label} point {point} to the local network.")
        logger.debug(f"Snapped {label} {point} to node {snap.node.id} ({snap.distance:.1f} m).")
        return snap

    def is_offsite(self, snap: SnapResult, entrance: Optional[Entrance]) -> bool:
        """Offsite only when too far from the network and an entrance exists."""
        return entrance is not None and snap.distance > self.options.max_snap

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def _route(self, a: Point, b: Point) -> RouteResult:
        snap_a = self._snap(a, "start")
        snap_b = self._snap(b, "end")

        entrance = self.options.active_entrance
        offsite_a = self.is_offsite(snap_a, entrance)
        offsite_b = self.is_offsite(snap_b, entrance)
        logger.info(
            f"Directions {a} → {b}: start {'offsite' if offsite_a else 'onsite'}, "
            f"end {'offsite' if offsite_b else 'onsite'}."
        )

        if not offsite_a and not offsite_b:
            geometry, maneuvers = self._local_route(snap_a.node, snap_b.node)
            return RouteResult(geometry=geometry, maneuvers=maneuvers)

        # The entrance stands in for whichever endpoint stays on site
        waypoints = [
            a if offsite_a else entrance.coordinates,
            b if offsite_b else entrance.coordinates,
        ]
        remote = self.directions.route(waypoints, profile=self.options.profile)

        if offsite_a and offsite_b:
            return RouteResult(geometry=list(remote.geometry), maneuvers=list(remote.maneuvers))

        entrance_node = self._snap(entrance.coordinates, "entrance").node
        if offsite_a:
            geometry, maneuvers = self._local_route(entrance_node, snap_b.node)
            return RouteResult(
                geometry=_join(list(remote.geometry), geometry),
                maneuvers=list(remote.maneuvers[:-1]) + [entrance.enter_maneuver.at(entrance.coordinates)]
                + maneuvers[1:],
            )

        geometry, maneuvers = self._local_route(snap_a.node, entrance_node)
        return RouteResult(
            geometry=_join(geometry, list(remote.geometry)),
            maneuvers=maneuvers + [entrance.exit_maneuver.at(entrance.coordinates)]
            + list(remote.maneuvers),
        )

    def _local_route(self, node_a, node_b) -> Tuple[List[Point], List[Maneuver]]:
        path = self.network.shortest_path(node_a, node_b)
        maneuvers = synthesize(path.nodes)
        logger.debug(f"Local route: {len(path.nodes)} nodes, {len(maneuvers)} maneuvers.")
        return list(path.geometry), maneuvers
