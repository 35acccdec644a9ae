"""Move the start of closed chains onto the midpoint of a convenient shape.

Piercing in the middle of a straight edge is preferred over corners, so the
chosen shape is split in two and the chain is rotated to begin at the split.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .chains import Chain, is_chain_closed
from .constants import DEFAULT_CLOSURE_TOLERANCE
from .logging_utils import apply_debug_logging
from .shapes import Arc, Circle, Line, Polyline, PolylineVertex, Shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartPointParameters:
    tolerance: float = DEFAULT_CLOSURE_TOLERANCE


@dataclass
class StartPointOptimizationResult:
    original_chain: Chain
    optimized_chain: Optional[Chain]
    modified: bool
    reason: str

    @property
    def chain(self) -> Chain:
        return self.optimized_chain if self.optimized_chain is not None else self.original_chain


def _rename(pieces: Tuple[Shape, Shape], base_id: str) -> Tuple[Shape, Shape]:
    first, second = pieces
    return replace(first, id=f"{base_id}-split-1"), replace(second, id=f"{base_id}-split-2")


def split_shape_at_midpoint(shape: Shape) -> Optional[Tuple[Shape, Shape]]:
    """Halves of a line, arc or polyline; ``None`` for shapes that are not split."""

    if isinstance(shape, Line):
        mid = shape.point_at_fraction(0.5)
        pieces: Tuple[Shape, Shape] = (replace(shape, end=mid), replace(shape, start=mid))
    elif isinstance(shape, Arc):
        pieces = shape.split_at_fraction(0.5)
    elif isinstance(shape, Polyline):
        if len(shape.vertices) < 2:
            return None
        pieces = shape.split_at_fraction(0.5)
    else:
        return None
    return _rename(pieces, shape.id)


def _is_two_point_polyline(shape: Shape) -> bool:
    return isinstance(shape, Polyline) and len(shape.vertices) == 2


_PREFERENCES: Tuple[Callable[[Shape], bool], ...] = (
    lambda shape: isinstance(shape, Line),
    _is_two_point_polyline,
    lambda shape: isinstance(shape, Arc),
    lambda shape: isinstance(shape, Polyline),
)


def find_best_shape_to_split(shapes: Sequence[Shape]) -> Optional[int]:
    """Index of the first line, else 2-point polyline, else arc, else polyline."""

    for prefer in _PREFERENCES:
        for index, shape in enumerate(shapes):
            if prefer(shape):
                return index
    return None


def _closing_polyline(polyline: Polyline) -> Polyline:
    # An explicit closing vertex lets the split halves cover the closing segment.
    vertices = list(polyline.vertices)
    first = vertices[0]
    last = vertices[-1]
    if (first.x, first.y) != (last.x, last.y):
        vertices.append(PolylineVertex(first.x, first.y, 0.0))
    return replace(polyline, vertices=tuple(vertices), closed=False)


def optimize_chain_start_point(
    chain: Chain,
    params: StartPointParameters = StartPointParameters(),
) -> StartPointOptimizationResult:
    if not is_chain_closed(chain, params.tolerance):
        return StartPointOptimizationResult(chain, None, False, "Chain is not closed")

    if len(chain.shapes) == 1:
        only = chain.shapes[0]
        if isinstance(only, Circle):
            return StartPointOptimizationResult(
                chain, None, False, "Single circle cannot be optimized (no meaningful start point)"
            )
        if isinstance(only, Polyline) and len(only.vertices) > 3:
            halves = split_shape_at_midpoint(_closing_polyline(only))
            if halves is not None:
                optimized = chain.with_shapes((halves[1], halves[0]))
                return StartPointOptimizationResult(
                    chain, optimized, True, "Split single closed polyline at midpoint"
                )
        return StartPointOptimizationResult(chain, None, False, "Single-shape chain cannot be optimized")

    index = find_best_shape_to_split(chain.shapes)
    if index is None:
        return StartPointOptimizationResult(chain, None, False, "No splittable shapes found")
    target = chain.shapes[index]
    halves = split_shape_at_midpoint(target)
    if halves is None:
        return StartPointOptimizationResult(chain, None, False, f"Failed to split {target.kind}")

    first_half, second_half = halves
    shapes: List[Shape] = [second_half]
    shapes.extend(chain.shapes[index + 1:])
    shapes.extend(chain.shapes[:index])
    shapes.append(first_half)
    return StartPointOptimizationResult(
        chain,
        chain.with_shapes(shapes),
        True,
        f"Split {target.kind} at midpoint",
    )


def optimize_start_points(
    chains: Sequence[Chain],
    params: StartPointParameters = StartPointParameters(),
) -> List[StartPointOptimizationResult]:
    results = [optimize_chain_start_point(chain, params) for chain in chains]
    logger.info(
        "Optimized start points of %d of %d chain(s)",
        sum(1 for result in results if result.modified),
        len(results),
    )
    return results


apply_debug_logging(globals(), logger=logger, skip={"_rename", "_is_two_point_polyline"})
