# maneuvers.py
# Turn-by-turn synthesis for routes over the local network.
# Converts an ordered node sequence into depart / continue / turn maneuvers.

from typing import List, Optional, Sequence, Tuple

from .geo_utils import degrees_to_cardinal, format_distance, normalize_delta, point_bearing, point_distance
from .models import CONTINUE, DEPART, TURN, Maneuver, Point

# Bearing change (degrees) that counts as a turn at an intersection
TURN_THRESHOLD_DEG = 15.0
SHARP_TURN_DEG = 90.0
SLIGHT_TURN_DEG = 22.5


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _degree(node) -> int:
    degree = getattr(node, "degree", None)
    return degree if degree is not None else len(node.edges)


def classify_turn(delta: float) -> Tuple[str, str]:
    """
    Direction and sharpness for a normalized bearing change.

    Returns:
        (direction, sharpness), e.g. ("right", "sharp"); sharpness is ""
        for an ordinary turn.
    """
    direction = "right" if delta > 0 else "left"
    if abs(delta) > SHARP_TURN_DEG:
        sharpness = "sharp"
    elif abs(delta) < SLIGHT_TURN_DEG:
        sharpness = "slight"
    else:
        sharpness = ""
    return direction, sharpness


def _depart(location: Point, bearing: float) -> Maneuver:
    return Maneuver(
        type=DEPART,
        bearing_before=bearing,
        bearing_after=bearing,
        location=location,
        instruction=f"Start heading {degrees_to_cardinal(bearing)}",
    )


def _continue(location: Point, distance: float, before: float, after: float) -> Maneuver:
    return Maneuver(
        type=CONTINUE,
        bearing_before=before,
        bearing_after=after,
        modifier="straight",
        location=location,
        distance=distance,
        instruction=f"Continue for {format_distance(distance)}",
    )


def _turn(location: Point, delta: float, before: float, after: float) -> Maneuver:
    direction, sharpness = classify_turn(delta)
    modifier = f"{sharpness}-{direction}" if sharpness else direction
    spoken = f"{sharpness} {direction}" if sharpness else direction
    return Maneuver(
        type=TURN,
        bearing_before=before,
        bearing_after=after,
        modifier=modifier,
        location=location,
        instruction=f"Take a {spoken} turn",
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def synthesize(nodes: Sequence) -> List[Maneuver]:
    """
    Build a maneuver list from an ordered sequence of route nodes.

    Each node needs ``coordinates`` (lon, lat) and a ``degree`` (or an
    ``edges`` list). A turn is reported only where the route leaves an
    intersection (degree > 2) with a bearing change above 15 degrees.
    Every straight stretch is closed by a continue maneuver carrying its
    length, and the route always ends with one.

    Args:
        nodes: Route nodes from start to end.

    Returns:
        List of Maneuver; empty for fewer than two nodes.
    """
    maneuvers: List[Maneuver] = []
    if len(nodes) < 2:
        return maneuvers

    last = len(nodes) - 1
    prev_node = nodes[0]
    prev_bearing: Optional[float] = None
    segment_m = 0.0

    for i in range(1, len(nodes)):
        node = nodes[i]
        bearing = point_bearing(prev_node.coordinates, node.coordinates)
        edge_m = point_distance(prev_node.coordinates, node.coordinates)
        turned = False

        if prev_bearing is None:
            maneuvers.append(_depart(prev_node.coordinates, bearing))
            segment_m += edge_m
        else:
            delta = normalize_delta(bearing - prev_bearing)
            if _degree(prev_node) > 2 and abs(delta) > TURN_THRESHOLD_DEG:
                maneuvers.append(_continue(prev_node.coordinates, segment_m, prev_bearing, bearing))
                maneuvers.append(_turn(prev_node.coordinates, delta, prev_bearing, bearing))
                segment_m = edge_m
                turned = True
            else:
                segment_m += edge_m

        if i == last:
            before = bearing if prev_bearing is None or turned else prev_bearing
            maneuvers.append(_continue(node.coordinates, segment_m, before, bearing))

        prev_node = node
        prev_bearing = bearing

    return maneuvers
