import math
from itertools import combinations

import pytest

from cutpath import Arc, ChainDetectionParameters, Circle, Line, UnionFind, UnsupportedShapeError, detect_shape_chains
from cutpath.chain_detection import connected_shape_pairs


def _square(x0, y0, size, prefix):
    corners = [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)]
    return [Line(corners[i], corners[(i + 1) % 4], id=f"{prefix}{i}") for i in range(4)]


def _ids(chain):
    return [shape.id for shape in chain.shapes]


def test_empty_input_returns_no_chains():
    assert detect_shape_chains([]) == []


def test_singletons_are_emitted_as_chains():
    shapes = [Line((0.0, 0.0), (1.0, 0.0), id="a"), Circle((50.0, 50.0), 2.0, id="c")]
    chains = detect_shape_chains(shapes)

    assert [chain.id for chain in chains] == ["chain-1", "chain-2"]
    assert [_ids(chain) for chain in chains] == [["a"], ["c"]]


def test_groups_follow_first_appearance_and_keep_input_order():
    left = _square(0.0, 0.0, 10.0, "L")
    right = _square(100.0, 0.0, 10.0, "R")
    shapes = [right[2], left[0], right[0], left[3], left[1], right[1], right[3], left[2]]

    chains = detect_shape_chains(shapes)

    assert len(chains) == 2
    assert _ids(chains[0]) == ["R2", "R0", "R1", "R3"]
    assert _ids(chains[1]) == ["L0", "L3", "L1", "L2"]


def test_connection_is_transitive_through_intermediate_shapes():
    shapes = [
        Line((0.0, 0.0), (10.0, 0.0), id="a"),
        Line((20.0, 0.0), (30.0, 0.0), id="c"),
        Line((10.0, 0.0), (20.0, 0.0), id="b"),
    ]
    chains = detect_shape_chains(shapes)

    assert len(chains) == 1
    assert _ids(chains[0]) == ["a", "c", "b"]


def test_tolerance_is_inclusive():
    shapes = [Line((0.0, 0.0), (10.0, 0.0), id="a"), Line((10.05, 0.0), (20.0, 0.0), id="b")]

    assert len(detect_shape_chains(shapes, ChainDetectionParameters(tolerance=0.06))) == 1
    assert len(detect_shape_chains(shapes, ChainDetectionParameters(tolerance=0.04))) == 2


def test_arc_center_counts_as_key_point():
    arc = Arc((0.0, 0.0), 5.0, 0.0, math.pi / 2, id="arc")
    marker = Line((0.0, 0.0), (-3.0, -3.0), id="to-center")

    chains = detect_shape_chains([arc, marker])

    assert len(chains) == 1


def test_result_is_a_partition_matching_pairwise_connectivity():
    shapes = _square(0.0, 0.0, 10.0, "A") + _square(30.0, 30.0, 5.0, "B") + [
        Line((10.0, 10.0), (20.0, 20.0), id="bridge"),
        Circle((100.0, 100.0), 1.0, id="lonely"),
    ]
    tolerance = 0.05
    chains = detect_shape_chains(shapes, ChainDetectionParameters(tolerance=tolerance))

    seen = [shape.id for chain in chains for shape in chain.shapes]
    assert sorted(seen) == sorted(shape.id for shape in shapes)
    assert len(seen) == len(set(seen))

    owner = {shape.id: chain.id for chain in chains for shape in chain.shapes}
    for a, b in combinations(shapes, 2):
        touching = any(
            math.hypot(p[0] - q[0], p[1] - q[1]) <= tolerance for p in a.key_points() for q in b.key_points()
        )
        if touching:
            assert owner[a.id] == owner[b.id]
    assert len(chains) == 3


def test_pairs_match_exhaustive_search():
    shapes = _square(0.0, 0.0, 1.0, "S") + [Line((1.02, 1.0), (5.0, 5.0), id="near")]
    pairs = connected_shape_pairs(shapes, 0.05)

    brute = set()
    for i, j in combinations(range(len(shapes)), 2):
        if any(
            math.hypot(p[0] - q[0], p[1] - q[1]) <= 0.05
            for p in shapes[i].key_points()
            for q in shapes[j].key_points()
        ):
            brute.add((i, j))
    assert pairs == brute


def test_union_find_merges_by_rank_and_compresses_paths():
    sets = UnionFind(5)
    assert sets.union(0, 1)
    assert sets.union(2, 3)
    assert sets.union(1, 3)
    assert not sets.union(0, 2)

    root = sets.find(3)
    assert all(sets.find(i) == root for i in range(4))
    assert sets.find(4) == 4
    assert sets.groups() == [[0, 1, 2, 3], [4]]


def test_unknown_variant_is_a_programmer_error():
    with pytest.raises(UnsupportedShapeError):
        detect_shape_chains([Line((0.0, 0.0), (1.0, 0.0)), "not a shape"])
