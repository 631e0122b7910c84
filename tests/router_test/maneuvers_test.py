import pytest

from navigation.site_router import maneuvers
from navigation.site_router.geo_utils import point_distance
from navigation.site_router.maneuvers import classify_turn, synthesize


class FakeNode:
    def __init__(self, nid, coordinates, degree=2):
        self.id = nid
        self.coordinates = coordinates
        self.degree = degree


class EdgeListNode:
    """Node exposing only an edge list, like most graph libraries."""

    def __init__(self, coordinates, n_edges):
        self.coordinates = coordinates
        self.edges = [object()] * n_edges


def straight_nodes(count, degree=3):
    """Nodes 0.001 deg apart along the equator; every inner node has the given degree."""
    return [FakeNode(i, (i * 0.001, 0.0), degree) for i in range(count)]


@pytest.fixture
def headings(monkeypatch):
    """Force exact edge bearings: headings(nodes, [b01, b12, ...])."""
    def apply(nodes, bearings):
        by_target = {nodes[i + 1].coordinates: b for i, b in enumerate(bearings)}
        monkeypatch.setattr(maneuvers, "point_bearing", lambda a, b: by_target[b])
        return nodes
    return apply


# ---------------------------------------------------------------------------
# Shape of the output
# ---------------------------------------------------------------------------

def test_fewer_than_two_nodes_yield_nothing():
    assert synthesize([]) == []
    assert synthesize([FakeNode(0, (0.0, 0.0))]) == []


def test_two_node_route_is_depart_then_continue():
    n1 = FakeNode(1, (-100.0, 47.0), degree=1)
    n2 = FakeNode(2, (-100.001, 47.001), degree=1)

    result = synthesize([n1, n2])

    assert [m.type for m in result] == ["depart", "continue"]
    depart, cont = result
    assert depart.location == n1.coordinates
    assert depart.bearing_before == depart.bearing_after
    assert depart.modifier is None
    assert depart.instruction == "Start heading northwest"
    assert cont.distance == pytest.approx(point_distance(n1.coordinates, n2.coordinates))
    assert cont.modifier == "straight"
    assert cont.instruction == f"Continue for {cont.distance:.0f} meters"


def test_route_without_intersections_is_one_continue():
    nodes = [FakeNode(i, c, degree=2) for i, c in enumerate(
        [(0.0, 0.0), (0.001, 0.0), (0.001, 0.001), (0.0, 0.001)]
    )]

    result = synthesize(nodes)

    assert [m.type for m in result] == ["depart", "continue"]
    assert result[1].distance == pytest.approx(3 * 111.195, abs=0.05)


def test_long_segment_reports_kilometres():
    nodes = [FakeNode(0, (0.0, 0.0)), FakeNode(1, (0.01, 0.0))]

    result = synthesize(nodes)

    assert result[-1].instruction == "Continue for 1.11 km"


def test_real_left_turn_at_intersection():
    a = FakeNode("a", (0.0, 0.0), degree=1)
    b = FakeNode("b", (0.001, 0.0), degree=3)
    c = FakeNode("c", (0.001, 0.001), degree=1)

    result = synthesize([a, b, c])

    assert [m.type for m in result] == ["depart", "continue", "turn", "continue"]
    assert result[0].instruction == "Start heading east"
    closing, turn, last = result[1], result[2], result[3]
    assert closing.location == b.coordinates
    assert closing.distance == pytest.approx(111.195, abs=0.01)
    assert turn.location == b.coordinates
    assert turn.modifier == "left"
    assert turn.instruction == "Take a left turn"
    assert turn.bearing_before == pytest.approx(90.0)
    assert turn.bearing_after == pytest.approx(0.0)
    assert last.distance == pytest.approx(111.195, abs=0.01)


def test_degree_is_read_from_edge_list():
    nodes = [
        EdgeListNode((0.0, 0.0), 1),
        EdgeListNode((0.001, 0.0), 4),
        EdgeListNode((0.001, 0.001), 1),
    ]

    assert [m.type for m in synthesize(nodes)] == ["depart", "continue", "turn", "continue"]


def test_bend_at_degree_two_node_is_not_a_turn():
    a = FakeNode("a", (0.0, 0.0), degree=1)
    b = FakeNode("b", (0.001, 0.0), degree=2)
    c = FakeNode("c", (0.001, 0.001), degree=1)

    result = synthesize([a, b, c])

    assert [m.type for m in result] == ["depart", "continue"]
    assert result[1].distance == pytest.approx(2 * 111.195, abs=0.02)


def test_segment_length_restarts_after_each_turn():
    # east, north, west, north: a turn at every degree-3 corner
    coords = [(0.0, 0.0), (0.002, 0.0), (0.002, 0.001), (0.0, 0.001), (0.0, 0.003)]
    nodes = [FakeNode(i, c, degree=3) for i, c in enumerate(coords)]

    result = synthesize(nodes)

    types = [m.type for m in result]
    assert types == ["depart", "continue", "turn", "continue", "turn", "continue", "turn", "continue"]
    distances = [m.distance for m in result if m.type == "continue"]
    assert all(d >= 0 for d in distances)
    assert distances == pytest.approx([222.39, 111.195, 222.39, 222.39], abs=0.05)
    assert sum(distances) == pytest.approx(
        sum(point_distance(coords[i], coords[i + 1]) for i in range(len(coords) - 1))
    )


# ---------------------------------------------------------------------------
# Turn thresholds with exact bearings
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("bearings, modifier, text", [
    ([0, 46], "right", "Take a right turn"),
    ([46, 0], "left", "Take a left turn"),
    ([0, 91], "sharp-right", "Take a sharp right turn"),
    ([91, 0], "sharp-left", "Take a sharp left turn"),
    ([0, 20], "slight-right", "Take a slight right turn"),
    ([0, 50], "right", "Take a right turn"),
    ([350, 10], "slight-right", "Take a slight right turn"),
    ([10, 350], "slight-left", "Take a slight left turn"),
])
def test_turn_modifiers(headings, bearings, modifier, text):
    nodes = headings(straight_nodes(3), bearings)

    result = synthesize(nodes)

    assert [m.type for m in result] == ["depart", "continue", "turn", "continue"]
    assert result[2].modifier == modifier
    assert result[2].instruction == text
    assert result[2].bearing_before == bearings[0]
    assert result[2].bearing_after == bearings[1]


def test_exactly_fifteen_degrees_is_not_a_turn(headings):
    nodes = headings(straight_nodes(3), [0, 15.0])

    assert [m.type for m in synthesize(nodes)] == ["depart", "continue"]


def test_turn_on_first_node_is_impossible(headings):
    # The start node has degree 3 but there is no incoming bearing there
    nodes = headings(straight_nodes(2), [90])

    assert [m.type for m in synthesize(nodes)] == ["depart", "continue"]


def test_turn_before_final_edge_adds_closing_continue(headings):
    nodes = headings(straight_nodes(4), [0, 0, 90])

    result = synthesize(nodes)

    assert [m.type for m in result] == ["depart", "continue", "turn", "continue"]
    assert result[1].distance == pytest.approx(2 * 111.195, abs=0.02)
    assert result[3].distance == pytest.approx(111.195, abs=0.01)
    assert result[3].location == nodes[-1].coordinates


def test_synthesize_is_deterministic():
    coords = [(0.0, 0.0), (0.002, 0.0), (0.002, 0.001)]
    nodes = [FakeNode(i, c, degree=3) for i, c in enumerate(coords)]

    assert synthesize(nodes) == synthesize(nodes)


@pytest.mark.parametrize("delta, expected", [
    (46, ("right", "")),
    (-46, ("left", "")),
    (90, ("right", "")),
    (90.1, ("right", "sharp")),
    (22.5, ("right", "")),
    (22.4, ("right", "slight")),
    (-180, ("left", "sharp")),
])
def test_classify_turn(delta, expected):
    assert classify_turn(delta) == expected
