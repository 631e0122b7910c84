# models.py
# Shared data structures used across all modules.

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from shapely.geometry import LineString


# (lon, lat) in decimal degrees, GeoJSON order
Point = Tuple[float, float]


def as_point(coords) -> Point:
    """Coerce any 2-element sequence into a (lon, lat) tuple."""
    return (float(coords[0]), float(coords[1]))


# ---------------------------------------------------------------------------
# Maneuver
# ---------------------------------------------------------------------------

DEPART = "depart"
TURN = "turn"
CONTINUE = "continue"
STOP = "stop"


@dataclass
class Maneuver:
    """
    A single turn-by-turn instruction.

    Locally synthesized maneuvers use the types depart, turn, continue and
    stop. Maneuvers coming from the directions provider keep whatever type
    and modifier the provider reported (e.g. "arrive", "sharp right"); any
    other provider keys (roundabout "exit", ...) are kept in `extra` and
    written back by to_dict().
    """
    type: str
    instruction: str = ""
    location: Optional[Point] = None
    bearing_before: Optional[float] = None
    bearing_after: Optional[float] = None
    modifier: Optional[str] = None
    distance: Optional[float] = None          # metres, always set on continue
    extra: Dict[str, Any] = field(default_factory=dict)

    def at(self, location: Point) -> "Maneuver":
        """Copy of this maneuver placed at a new location."""
        return replace(self, location=as_point(location), extra=dict(self.extra))

    def to_dict(self) -> dict:
        d: Dict[str, Any] = dict(self.extra)
        d["type"] = self.type
        if self.bearing_before is not None:
            d["bearing_before"] = self.bearing_before
        if self.bearing_after is not None:
            d["bearing_after"] = self.bearing_after
        if self.modifier is not None:
            d["modifier"] = self.modifier
        if self.location is not None:
            d["location"] = list(self.location)
        if self.distance is not None:
            d["distance"] = self.distance
        d["instruction"] = self.instruction
        return d

    @staticmethod
    def from_dict(d: dict) -> "Maneuver":
        location = d.get("location")
        return Maneuver(
            type=d["type"],
            instruction=d.get("instruction", ""),
            location=as_point(location) if location else None,
            bearing_before=d.get("bearing_before"),
            bearing_after=d.get("bearing_after"),
            modifier=d.get("modifier"),
            distance=d.get("distance"),
            extra={k: v for k, v in d.items() if k not in _MANEUVER_FIELDS},
        )


_MANEUVER_FIELDS = frozenset(
    ("type", "instruction", "location", "bearing_before", "bearing_after", "modifier", "distance")
)


# ---------------------------------------------------------------------------
# Entrance
# ---------------------------------------------------------------------------

@dataclass
class Entrance:
    """Sanctioned transition point between the local and public networks."""
    coordinates: Point
    enter_maneuver: Maneuver
    exit_maneuver: Maneuver

    def __post_init__(self) -> None:
        self.coordinates = as_point(self.coordinates)
        # Canned maneuvers always happen at the gate itself
        self.enter_maneuver = self.enter_maneuver.at(self.coordinates)
        self.exit_maneuver = self.exit_maneuver.at(self.coordinates)

    @staticmethod
    def from_dict(d: dict) -> "Entrance":
        enter = d.get("enter_maneuver", d.get("enterManeuver"))
        exit_ = d.get("exit_maneuver", d.get("exitManeuver"))
        if enter is None or exit_ is None:
            raise ValueError("Entrance needs both an enter and an exit maneuver.")
        return Entrance(
            coordinates=as_point(d["coordinates"]),
            enter_maneuver=enter if isinstance(enter, Maneuver) else Maneuver.from_dict(enter),
            exit_maneuver=exit_ if isinstance(exit_, Maneuver) else Maneuver.from_dict(exit_),
        )


# ---------------------------------------------------------------------------
# Adapter results
# ---------------------------------------------------------------------------

@dataclass
class SnapResult:
    """Nearest network node to a query point and its distance in metres."""
    node: Any
    distance: float


@dataclass
class LocalPath:
    """Shortest path over the local network."""
    nodes: List[Any]
    geometry: List[Point]


@dataclass
class RemoteRoute:
    """Route returned by the public directions provider."""
    geometry: List[Point]
    maneuvers: List[Maneuver]


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------

@dataclass
class RouteResult:
    geometry: List[Point] = field(default_factory=list)
    maneuvers: List[Maneuver] = field(default_factory=list)

    @property
    def line(self) -> LineString:
        # A route that starts and ends on the same node has a single point
        if len(self.geometry) < 2:
            return LineString()
        return LineString(self.geometry)

    @property
    def length_m(self) -> float:
        """Sum of the distances carried by continue maneuvers."""
        return sum(m.distance or 0.0 for m in self.maneuvers if m.type == CONTINUE)

    def to_geojson(self) -> dict:
        return {"type": "LineString", "coordinates": [list(p) for p in self.geometry]}

    def to_dict(self) -> dict:
        return {
            "geometry": self.to_geojson(),
            "maneuvers": [m.to_dict() for m in self.maneuvers],
        }

    @staticmethod
    def from_dict(d: dict) -> "RouteResult":
        return RouteResult(
            geometry=[as_point(c) for c in d["geometry"]["coordinates"]],
            maneuvers=[Maneuver.from_dict(m) for m in d.get("maneuvers", [])],
        )
