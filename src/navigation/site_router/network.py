# network.py
# Local way network: the adapter interface the routing machine consumes,
# plus an in-memory graph built from a GeoJSON road layer.
# Depends only on: geo_utils, models, errors.

import heapq
import json
import logging
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple, Union

from shapely.geometry import LineString, MultiLineString, shape

from .errors import NoRouteError
from .geo_utils import point_distance
from .models import LocalPath, Point, SnapResult, as_point

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Adapter interface
# ---------------------------------------------------------------------------

class NetworkAdapter(Protocol):
    """What the routing machine needs from a local way network."""

    def nearest_node(self, point: Point) -> Optional[SnapResult]:
        ...

    def shortest_path(self, node_a, node_b) -> LocalPath:
        ...


# ---------------------------------------------------------------------------
# Graph primitives
# ---------------------------------------------------------------------------

class Edge:
    """Directed weighted edge between two graph nodes."""

    __slots__ = ["target", "distance", "weight"]

    def __init__(self, target: "Node", distance: float, factor: float = 1.0) -> None:
        self.target = target
        self.distance = distance
        self.weight = distance * factor


class Node:
    """A vertex of the local way network (intersection or shape point)."""

    __slots__ = ["id", "coordinates", "edges"]

    def __init__(self, nid, coordinates: Point) -> None:
        self.id = nid
        self.coordinates = as_point(coordinates)
        self.edges: List[Edge] = []

    @property
    def degree(self) -> int:
        return len(self.edges)

    def __repr__(self) -> str:
        return f"Node({self.id!r}, {self.coordinates})"


# ---------------------------------------------------------------------------
# Routing graph
# ---------------------------------------------------------------------------

FeatureSource = Union[dict, Iterable[dict]]


class GeoJSONNetwork:
    """
    In-memory graph of local ways built from GeoJSON LineString features.

    Vertices that round to the same coordinate at ``precision`` decimals are
    merged into a single node, which is how separate way features join up
    into intersections. Each consecutive vertex pair becomes a bidirectional
    edge whose weight is its length times the feature's ``weight_property``.

    Args:
        features:         FeatureCollection dict or an iterable of features.
        weight_property:  Feature property scaling edge cost (default 1).
        precision:        Decimal places used when merging vertices.
        feature_filter:   Optional predicate selecting which features to use.
    """

    def __init__(
        self,
        features: Optional[FeatureSource] = None,
        weight_property: str = "weight",
        precision: int = 7,
        feature_filter: Optional[Callable[[dict], bool]] = None,
    ) -> None:
        self.weight_property = weight_property
        self.precision = precision
        self.nodes: Dict[int, Node] = {}
        self._index: Dict[Tuple[float, float], Node] = {}
        self._min_factor: Optional[float] = None
        self._next_id = 0
        if features is not None:
            self.add_features(features, feature_filter)
            self.cleanup()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_features(
        self,
        features: FeatureSource,
        feature_filter: Optional[Callable[[dict], bool]] = None,
    ) -> int:
        """Add road features; returns how many were used."""
        if isinstance(features, dict):
            features = features.get("features", [features])
        used = 0
        for feature in features:
            if feature_filter and not feature_filter(feature):
                continue
            if not feature.get("geometry"):
                continue
            geom = shape(feature["geometry"])
            if isinstance(geom, LineString):
                lines = [geom]
            elif isinstance(geom, MultiLineString):
                lines = list(geom.geoms)
            else:
                continue
            props = feature.get("properties") or {}
            factor = float(props.get(self.weight_property, 1.0) or 1.0)
            for line in lines:
                self.add_line(list(line.coords), factor)
            used += 1
        logger.debug(f"Added {used} road features ({len(self.nodes)} nodes).")
        return used

    def add_line(self, coords: List[Tuple[float, ...]], factor: float = 1.0) -> None:
        if factor <= 0:
            raise ValueError(f"Edge weight factor must be positive, got {factor}.")
        if self._min_factor is None or factor < self._min_factor:
            self._min_factor = factor
        prev = None
        for c in coords:
            node = self.add_node((c[0], c[1]))
            if prev is not None:
                self.add_edge(prev, node, factor)
            prev = node

    def add_node(self, coordinates: Point) -> Node:
        key = (round(coordinates[0], self.precision), round(coordinates[1], self.precision))
        node = self._index.get(key)
        if node is None:
            node = Node(self._next_id, coordinates)
            self._next_id += 1
            self.nodes[node.id] = node
            self._index[key] = node
        return node

    def add_edge(self, u: Node, v: Node, factor: float = 1.0) -> None:
        if u is v or any(e.target is v for e in u.edges):
            return
        d = point_distance(u.coordinates, v.coordinates)
        u.edges.append(Edge(v, d, factor))
        v.edges.append(Edge(u, d, factor))

    def cleanup(self) -> None:
        """Remove isolated nodes (no edges) to save memory."""
        self.nodes = {k: v for k, v in self.nodes.items() if v.edges}
        self._index = {k: v for k, v in self._index.items() if v.edges}

    # ------------------------------------------------------------------
    # Adapter operations
    # ------------------------------------------------------------------

    def nearest_node(self, point: Point) -> Optional[SnapResult]:
        """Return the closest graph node to point, or None on an empty graph."""
        best_node = None
        min_dist = float("inf")
        for node in self.nodes.values():
            d = point_distance(point, node.coordinates)
            if d < min_dist:
                min_dist = d
                best_node = node
        if best_node is None:
            return None
        return SnapResult(node=best_node, distance=min_dist)

    def shortest_path(self, node_a: Node, node_b: Node) -> LocalPath:
        """
        A* from node_a to node_b over edge weights.

        Raises:
            NoRouteError: If node_b is unreachable from node_a.
        """
        counter = 0
        open_set: list = []
        heapq.heappush(open_set, (0.0, counter, node_a))
        came_from: dict = {node_a: None}
        cost_so_far: dict = {node_a: 0.0}
        visited: set = set()

        while open_set:
            _, _, current = heapq.heappop(open_set)
            if current in visited:
                continue
            visited.add(current)
            if current is node_b:
                break
            for edge in current.edges:
                new_cost = cost_so_far[current] + edge.weight
                neighbor = edge.target
                if neighbor not in cost_so_far or new_cost < cost_so_far[neighbor]:
                    cost_so_far[neighbor] = new_cost
                    heuristic = point_distance(neighbor.coordinates, node_b.coordinates) * (self._min_factor or 1.0)
                    counter += 1
                    heapq.heappush(open_set, (new_cost + heuristic, counter, neighbor))
                    came_from[neighbor] = current

        if node_b not in came_from:
            raise NoRouteError(node_a.id, node_b.id)

        nodes = [node_b]
        while nodes[-1] is not node_a:
            nodes.append(came_from[nodes[-1]])
        nodes.reverse()
        return LocalPath(nodes=nodes, geometry=[n.coordinates for n in nodes])


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_network(
    geojson_file: str,
    layers: Optional[Iterable[str]] = None,
    layer_property: str = "layer",
    **kwargs,
) -> GeoJSONNetwork:
    """
    Read a GeoJSON file and return a populated GeoJSONNetwork.

    Args:
        geojson_file:   Path to a FeatureCollection file.
        layers:         Keep only features whose ``layer_property`` is one of these.
        layer_property: Feature property holding the layer name.
        **kwargs:       Passed through to GeoJSONNetwork.

    Raises:
        FileNotFoundError: If geojson_file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    logger.info(f"Loading network: {geojson_file}")
    with open(geojson_file, "r", encoding="utf-8") as f:
        data = json.load(f)

    feature_filter = None
    if layers:
        wanted = set(layers)

        def feature_filter(feature: dict) -> bool:
            return (feature.get("properties") or {}).get(layer_property) in wanted

    network = GeoJSONNetwork(data, feature_filter=feature_filter, **kwargs)
    logger.info(f"Network ready: {len(network.nodes)} routable nodes.")
    return network
