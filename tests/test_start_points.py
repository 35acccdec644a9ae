import math

from cutpath import (
    Arc,
    Chain,
    Circle,
    Line,
    Polyline,
    PolylineVertex,
    find_best_shape_to_split,
    is_chain_closed,
    optimize_chain_start_point,
    optimize_start_points,
)
from cutpath.chain_normalization import analyze_chain_traversal


def _close(a, b, tol=1e-9):
    return math.isclose(a[0], b[0], abs_tol=tol) and math.isclose(a[1], b[1], abs_tol=tol)


def _triangle():
    corners = [(0.0, 0.0), (10.0, 0.0), (5.0, 8.0)]
    return Chain("chain-1", tuple(Line(corners[i], corners[(i + 1) % 3], id=f"e{i}") for i in range(3)))


def test_triangle_starts_mid_edge():
    result = optimize_chain_start_point(_triangle())

    assert result.modified
    assert result.reason == "Split line at midpoint"
    chain = result.optimized_chain
    assert [shape.id for shape in chain.shapes] == ["e0-split-2", "e1", "e2", "e0-split-1"]
    assert chain.shapes[0].start_point() == (5.0, 0.0)
    assert chain.shapes[-1].end_point() == (5.0, 0.0)
    assert is_chain_closed(chain)
    assert analyze_chain_traversal(chain).can_traverse


def test_chain_identity_survives():
    original = _triangle().with_clockwise(False)

    result = optimize_chain_start_point(original)

    assert result.chain.id == "chain-1"
    assert result.chain.clockwise is False
    assert result.original_chain is original


def test_preference_order():
    arc = Arc((0.0, 0.0), 1.0, 0.0, 1.0)
    two_point = Polyline((PolylineVertex(0.0, 0.0), PolylineVertex(1.0, 0.0)))
    long_poly = Polyline((PolylineVertex(0.0, 0.0), PolylineVertex(1.0, 0.0), PolylineVertex(1.0, 1.0)))
    line = Line((0.0, 0.0), (1.0, 1.0))

    assert find_best_shape_to_split([arc, long_poly, two_point, line]) == 3
    assert find_best_shape_to_split([arc, long_poly, two_point]) == 2
    assert find_best_shape_to_split([long_poly, arc]) == 1
    assert find_best_shape_to_split([long_poly]) == 0
    assert find_best_shape_to_split([Circle((0.0, 0.0), 1.0)]) is None


def test_two_arc_circle_starts_at_arc_midpoint():
    chain = Chain(
        "chain-1",
        (
            Arc((0.0, 0.0), 5.0, 0.0, math.pi, id="top"),
            Arc((0.0, 0.0), 5.0, math.pi, 2 * math.pi, id="bottom"),
        ),
    )

    result = optimize_chain_start_point(chain)

    shapes = result.optimized_chain.shapes
    assert [shape.id for shape in shapes] == ["top-split-2", "bottom", "top-split-1"]
    assert _close(shapes[0].start_point(), (0.0, 5.0))
    assert _close(shapes[-1].end_point(), (0.0, 5.0))


def test_single_circle_is_left_alone():
    chain = Chain("chain-1", (Circle((0.0, 0.0), 3.0),))

    result = optimize_chain_start_point(chain)

    assert not result.modified
    assert result.optimized_chain is None
    assert result.chain is chain
    assert result.reason == "Single circle cannot be optimized (no meaningful start point)"


def test_closed_polyline_is_split_into_two_halves():
    square = Polyline(
        (PolylineVertex(0.0, 0.0), PolylineVertex(10.0, 0.0), PolylineVertex(10.0, 10.0), PolylineVertex(0.0, 10.0)),
        closed=True,
        id="outline",
    )

    result = optimize_chain_start_point(Chain("chain-1", (square,)))

    assert result.modified
    tail, head = result.optimized_chain.shapes
    assert [v.point for v in tail.vertices] == [(10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]
    assert [v.point for v in head.vertices] == [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
    assert not tail.closed and not head.closed
    assert math.isclose(tail.length() + head.length(), square.length())


def test_open_chain_is_not_modified():
    chain = Chain("chain-1", (Line((0.0, 0.0), (1.0, 0.0)), Line((1.0, 0.0), (2.0, 2.0))))

    result = optimize_chain_start_point(chain)

    assert not result.modified
    assert result.reason == "Chain is not closed"


def test_batch_keeps_order():
    circle = Chain("chain-2", (Circle((50.0, 50.0), 3.0),))

    results = optimize_start_points([_triangle(), circle])

    assert [r.modified for r in results] == [True, False]
    assert [r.chain.id for r in results] == ["chain-1", "chain-2"]
