"""Group loose shapes into connected chains.

Two shapes are connected when any key point of one lies within the tolerance
of any key point of the other. Connectivity is transitive: the result is the
partition of the input into connected components, singletons included.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .chains import Chain
from .constants import DEFAULT_CHAIN_TOLERANCE
from .logging_utils import apply_debug_logging
from .shapes import Shape, ensure_shapes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainDetectionParameters:
    tolerance: float = DEFAULT_CHAIN_TOLERANCE


class UnionFind:
    """Disjoint sets over ``0..size-1`` with path compression and union by rank."""

    def __init__(self, size: int) -> None:
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, item: int) -> int:
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, a: int, b: int) -> bool:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return False
        if self.rank[root_a] < self.rank[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        if self.rank[root_a] == self.rank[root_b]:
            self.rank[root_a] += 1
        return True

    def groups(self) -> List[List[int]]:
        """Members per set, ordered by first member index."""

        by_root: Dict[int, List[int]] = {}
        for item in range(len(self.parent)):
            by_root.setdefault(self.find(item), []).append(item)
        return list(by_root.values())


def _key_point_table(shapes: Sequence[Shape]) -> Tuple[np.ndarray, np.ndarray]:
    coords: List[Tuple[float, float]] = []
    owners: List[int] = []
    for index, shape in enumerate(shapes):
        for point in shape.key_points():
            coords.append((float(point[0]), float(point[1])))
            owners.append(index)
    return np.asarray(coords, dtype=float).reshape(-1, 2), np.asarray(owners, dtype=int)


def connected_shape_pairs(shapes: Sequence[Shape], tolerance: float) -> Set[Tuple[int, int]]:
    """Index pairs ``(i, j)``, ``i < j``, of shapes with key points within ``tolerance``."""

    coords, owners = _key_point_table(shapes)
    if len(coords) < 2:
        return set()
    tree = cKDTree(coords)
    pairs: Set[Tuple[int, int]] = set()
    for a, b in tree.query_pairs(r=tolerance):
        i = int(owners[a])
        j = int(owners[b])
        if i != j:
            pairs.add((min(i, j), max(i, j)))
    return pairs


def detect_shape_chains(
    shapes: Sequence[Shape],
    params: ChainDetectionParameters = ChainDetectionParameters(),
) -> List[Chain]:
    """Partition ``shapes`` into chains ``chain-1``, ``chain-2``, ...

    Chains come out in order of their first shape in the input and keep the
    input order of their members. The order is not a traversal; see
    :func:`cutpath.chain_normalization.normalize_chain`.
    """

    checked = ensure_shapes(shapes)
    if not checked:
        return []

    sets = UnionFind(len(checked))
    pairs = connected_shape_pairs(checked, params.tolerance)
    for i, j in sorted(pairs):
        sets.union(i, j)

    chains = [
        Chain(id=f"chain-{number}", shapes=tuple(checked[i] for i in members))
        for number, members in enumerate(sets.groups(), start=1)
    ]
    logger.info(
        "Detected %d chain(s) from %d shape(s) (%d connection(s), tolerance=%g)",
        len(chains),
        len(checked),
        len(pairs),
        params.tolerance,
    )
    return chains


apply_debug_logging(globals(), logger=logger, skip={"_key_point_table"})
