"""Chain value type and chain-level geometry queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .constants import DEFAULT_CLOSURE_TOLERANCE
from .geometry import BoundingBox, Point, Vector, distance, merge_boxes
from .shapes import DEFAULT_TESSELLATION, Circle, Ellipse, Polyline, Shape, TessellationParameters, ensure_shapes


@dataclass(frozen=True)
class Chain:
    """Ordered shapes forming one cut path.

    ``clockwise`` is an orientation hint; ``None`` means unknown and callers
    resolve their own default. ``original_chain_id`` links derived chains
    (e.g. offsets) back to the chain they were produced from.
    """

    id: str
    shapes: Tuple[Shape, ...] = field(default_factory=tuple)
    clockwise: Optional[bool] = None
    original_chain_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "shapes", ensure_shapes(self.shapes))

    def __len__(self) -> int:
        return len(self.shapes)

    @property
    def is_empty(self) -> bool:
        return not self.shapes

    def with_shapes(self, shapes: Sequence[Shape]) -> "Chain":
        return Chain(self.id, tuple(shapes), self.clockwise, self.original_chain_id)

    def with_clockwise(self, clockwise: Optional[bool]) -> "Chain":
        return Chain(self.id, self.shapes, clockwise, self.original_chain_id)

    def matches(self, other: "Chain") -> bool:
        """True when ``other`` is this chain or derived from it."""

        ids = {self.id, self.original_chain_id}
        return other.id in ids or (other.original_chain_id is not None and other.original_chain_id in ids)


def chain_start_point(chain: Chain) -> Optional[Point]:
    if not chain.shapes:
        return None
    return chain.shapes[0].start_point()


def chain_end_point(chain: Chain) -> Optional[Point]:
    if not chain.shapes:
        return None
    return chain.shapes[-1].end_point()


def chain_start_tangent(chain: Chain) -> Optional[Vector]:
    if not chain.shapes:
        return None
    return chain.shapes[0].start_tangent()


def chain_end_tangent(chain: Chain) -> Optional[Vector]:
    if not chain.shapes:
        return None
    return chain.shapes[-1].end_tangent()


def is_chain_closed(chain: Chain, tolerance: float = DEFAULT_CLOSURE_TOLERANCE) -> bool:
    """Closed when the path returns to its start within ``tolerance``.

    A lone circle, closed polyline or full ellipse is closed by construction.
    """

    if not chain.shapes:
        return False
    if len(chain.shapes) == 1:
        only = chain.shapes[0]
        if isinstance(only, (Circle, Polyline, Ellipse)) and only.is_closed(tolerance):
            return True
    start = chain_start_point(chain)
    end = chain_end_point(chain)
    if start is None or end is None:
        return False
    return distance(start, end) < tolerance


def chain_bounding_box(chain: Chain) -> Optional[BoundingBox]:
    return merge_boxes(shape.bounding_box() for shape in chain.shapes)


def tessellate_chain(chain: Chain, params: TessellationParameters = DEFAULT_TESSELLATION) -> List[Point]:
    points: List[Point] = []
    for shape in chain.shapes:
        points.extend(shape.tessellate(params))
    return points

