"""Part detection: nest closed chains into shells and holes.

Closed chains are arranged into a containment forest where each chain's parent
is the smallest-area chain that fully contains it. Chains at even depth are
part shells; chains at odd depth are holes of the part directly above them.
An island inside a hole is therefore a new part of its own.

Open chains never take part in nesting and are reported as warnings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence, Tuple

import numpy as np

from .chains import (
    Chain,
    chain_bounding_box,
    chain_end_point,
    chain_start_point,
    is_chain_closed,
    tessellate_chain,
)
from .chain_normalization import ChainNormalizationParameters, normalize_chain
from .constants import (
    ARC_TESSELLATION_DENSITY,
    CIRCLE_TESSELLATION_POINTS,
    DEFAULT_CLOSURE_TOLERANCE,
    MIN_ARC_TESSELLATION_POINTS,
)
from .geometry import BoundingBox, Point, bounding_box_of, points_in_polygon, signed_area
from .logging_utils import apply_debug_logging
from .shapes import TessellationParameters

logger = logging.getLogger(__name__)

WarningKind = Literal["open_chain", "overlapping_boundary", "no_parts"]


@dataclass(frozen=True)
class PartDetectionParameters:
    closure_tolerance: float = DEFAULT_CLOSURE_TOLERANCE
    circle_tessellation_points: int = CIRCLE_TESSELLATION_POINTS
    min_arc_tessellation_points: int = MIN_ARC_TESSELLATION_POINTS
    arc_tessellation_density: float = ARC_TESSELLATION_DENSITY
    normalization: ChainNormalizationParameters = ChainNormalizationParameters()

    @property
    def tessellation(self) -> TessellationParameters:
        return TessellationParameters(
            circle_points=self.circle_tessellation_points,
            min_arc_points=self.min_arc_tessellation_points,
            arc_density=self.arc_tessellation_density,
        )


@dataclass(frozen=True)
class PartHole:
    id: str
    chain: Chain
    bounding_box: BoundingBox
    polygon: Tuple[Point, ...] = field(repr=False, compare=False, default=())


@dataclass(frozen=True)
class PartShell:
    id: str
    chain: Chain
    bounding_box: BoundingBox
    polygon: Tuple[Point, ...] = field(repr=False, compare=False, default=())


@dataclass(frozen=True)
class Part:
    id: str
    shell: PartShell
    holes: Tuple[PartHole, ...] = ()


@dataclass
class PartDetectionWarning:
    kind: WarningKind
    chain_id: str
    message: str

    def __str__(self) -> str:  # pragma: no cover - formatting helper
        return f"{self.chain_id}: {self.message}"


@dataclass
class PartDetectionResult:
    parts: List[Part]
    warnings: List[PartDetectionWarning]
    parents: Dict[str, str] = field(default_factory=dict)
    open_chains: List[Chain] = field(default_factory=list)


@dataclass
class _ClosedRegion:
    order: int
    chain: Chain
    polygon: np.ndarray
    area: float
    bounding_box: BoundingBox


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _region_for(order: int, chain: Chain, tessellation: TessellationParameters) -> _ClosedRegion:
    points = tessellate_chain(chain, tessellation)
    box = chain_bounding_box(chain) or bounding_box_of(points)
    return _ClosedRegion(
        order=order,
        chain=chain,
        polygon=np.asarray(points, dtype=float).reshape(-1, 2),
        area=abs(signed_area(points)),
        bounding_box=box,
    )


def _is_region_inside(inner: _ClosedRegion, outer: _ClosedRegion, tolerance: float) -> bool:
    if not outer.bounding_box.contains_box(inner.bounding_box, tolerance):
        return False
    return bool(points_in_polygon(inner.polygon, outer.polygon).all())


def build_containment_forest(
    regions: Sequence[_ClosedRegion],
    tolerance: float,
) -> Dict[str, str]:
    """Map each contained chain id to its innermost container id.

    Only strictly larger regions are candidate parents; among those that
    contain a region, the smallest area wins, ties going to input order.
    """

    ranked = sorted(regions, key=lambda region: (-region.area, region.order))
    parents: Dict[str, str] = {}
    for index, current in enumerate(ranked):
        best: Optional[_ClosedRegion] = None
        for candidate in ranked[:index]:
            if candidate.area <= current.area:
                continue
            if best is not None and (candidate.area, candidate.order) >= (best.area, best.order):
                continue
            if _is_region_inside(current, candidate, tolerance):
                best = candidate
        if best is not None:
            parents[current.chain.id] = best.chain.id
    return parents


def nesting_depth(chain_id: str, parents: Dict[str, str]) -> int:
    depth = 0
    current = chain_id
    while current in parents:
        depth += 1
        current = parents[current]
    return depth


def _boundary_crossing(open_chain: Chain, regions: Sequence[_ClosedRegion]) -> Optional[str]:
    start = chain_start_point(open_chain)
    end = chain_end_point(open_chain)
    if start is None or end is None:
        return None
    for region in regions:
        if region.bounding_box.contains_point(start) != region.bounding_box.contains_point(end):
            return f"Chain may cross the boundary of a closed region (chain {region.chain.id})"
    return None


def detect_parts(
    chains: Sequence[Chain],
    params: PartDetectionParameters = PartDetectionParameters(),
) -> PartDetectionResult:
    """Classify closed chains into parts with shells and holes."""

    warnings: List[PartDetectionWarning] = []
    normalized = [normalize_chain(chain, params.normalization) for chain in chains]
    closed = [chain for chain in normalized if is_chain_closed(chain, params.closure_tolerance)]
    open_chains = [chain for chain in normalized if not is_chain_closed(chain, params.closure_tolerance)]

    tessellation = params.tessellation
    regions = [_region_for(order, chain, tessellation) for order, chain in enumerate(closed)]

    for chain in open_chains:
        warnings.append(
            PartDetectionWarning(
                "open_chain",
                chain.id,
                f"Chain {chain.id} is not closed and cannot be a shell or hole",
            )
        )
        crossing = _boundary_crossing(chain, regions)
        if crossing:
            warnings.append(PartDetectionWarning("overlapping_boundary", chain.id, crossing))

    parents = build_containment_forest(regions, params.closure_tolerance)
    depths = {region.chain.id: nesting_depth(region.chain.id, parents) for region in regions}

    parts: List[Part] = []
    for region in regions:
        if depths[region.chain.id] % 2 != 0:
            continue
        number = len(parts) + 1
        hole_regions = [
            other
            for other in regions
            if parents.get(other.chain.id) == region.chain.id and depths[other.chain.id] % 2 == 1
        ]
        holes = tuple(
            PartHole(
                id=f"hole-{number}-{idx}",
                chain=hole.chain,
                bounding_box=hole.bounding_box,
                polygon=tuple(map(tuple, hole.polygon.tolist())),
            )
            for idx, hole in enumerate(hole_regions, start=1)
        )
        shell = PartShell(
            id=f"shell-{number}",
            chain=region.chain,
            bounding_box=region.bounding_box,
            polygon=tuple(map(tuple, region.polygon.tolist())),
        )
        parts.append(Part(id=f"part-{number}", shell=shell, holes=holes))

    if not parts and open_chains:
        warnings.append(
            PartDetectionWarning(
                "no_parts",
                "all-open-chains",
                f"No parts detected. Found {_plural(len(open_chains), 'unclosed chain')}. "
                "Check for gaps in the drawing geometry; chains may not connect into closed shapes.",
            )
        )
    if not parts and closed:
        warnings.append(
            PartDetectionWarning(
                "no_parts",
                "all-closed-chains",
                f"No parts detected despite {_plural(len(closed), 'closed chain')}. "
                "Containment analysis may have failed.",
            )
        )

    logger.info(
        "Detected %d part(s) from %d closed and %d open chain(s)",
        len(parts),
        len(closed),
        len(open_chains),
    )
    return PartDetectionResult(parts=parts, warnings=warnings, parents=parents, open_chains=open_chains)


def _ring(polygon: Tuple[Point, ...], chain: Chain) -> Sequence[Point]:
    return polygon if polygon else tessellate_chain(chain)


def is_point_inside_part(point: Point, part: Part) -> bool:
    """True when ``point`` lies in solid material: inside the shell, outside every hole."""

    return bool(points_inside_part([point], part)[0])


def points_inside_part(points: Sequence[Point], part: Part) -> np.ndarray:
    inside = points_in_polygon(points, _ring(part.shell.polygon, part.shell.chain))
    for hole in part.holes:
        inside &= ~points_in_polygon(points, _ring(hole.polygon, hole.chain))
    return inside


def points_inside_chain(points: Sequence[Point], chain: Chain, polygon: Tuple[Point, ...] = ()) -> np.ndarray:
    return points_in_polygon(points, _ring(polygon, chain))


def is_chain_shell_in_part(chain: Chain, part: Part) -> bool:
    return part.shell.chain.matches(chain)


def find_hole_for_chain(chain: Chain, part: Part) -> Optional[PartHole]:
    for hole in part.holes:
        if hole.chain.matches(chain):
            return hole
    return None


def is_chain_hole_in_part(chain: Chain, part: Part) -> bool:
    return find_hole_for_chain(chain, part) is not None


def find_part_for_chain(chain: Chain, parts: Sequence[Part]) -> Optional[Part]:
    for part in parts:
        if is_chain_shell_in_part(chain, part) or is_chain_hole_in_part(chain, part):
            return part
    return None


apply_debug_logging(
    globals(),
    logger=logger,
    skip={"_plural", "_ring", "_is_region_inside", "nesting_depth", "points_inside_part", "is_point_inside_part"},
)
