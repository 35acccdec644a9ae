"""Cut direction of closed chains from their signed area."""

from __future__ import annotations

import logging
from typing import List, Literal, Optional, Sequence

from .chains import Chain, chain_end_point, chain_start_point, tessellate_chain
from .constants import DEFAULT_CLOSURE_TOLERANCE, MIN_POLYGON_POINTS
from .geometry import distance, signed_area
from .logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

CutDirection = Literal["clockwise", "counterclockwise", "none"]


def detect_cut_direction(chain: Chain, tolerance: float = DEFAULT_CLOSURE_TOLERANCE) -> CutDirection:
    """Return the winding of a closed chain; open chains have no direction."""

    start = chain_start_point(chain)
    end = chain_end_point(chain)
    if start is None or end is None or distance(start, end) > tolerance:
        return "none"
    points = tessellate_chain(chain)
    if len(points) < MIN_POLYGON_POINTS:
        return "none"
    return "counterclockwise" if signed_area(points) > 0.0 else "clockwise"


def clockwise_hint(direction: CutDirection) -> Optional[bool]:
    if direction == "clockwise":
        return True
    if direction == "counterclockwise":
        return False
    return None


def set_chain_direction(chain: Chain, tolerance: float = DEFAULT_CLOSURE_TOLERANCE) -> Chain:
    """Copy of ``chain`` whose ``clockwise`` hint reflects its detected winding."""

    return chain.with_clockwise(clockwise_hint(detect_cut_direction(chain, tolerance)))


def set_chains_direction(chains: Sequence[Chain], tolerance: float = DEFAULT_CLOSURE_TOLERANCE) -> List[Chain]:
    result = [set_chain_direction(chain, tolerance) for chain in chains]
    logger.debug(
        "Chain directions: %s",
        ", ".join(f"{chain.id}={chain.clockwise}" for chain in result),
    )
    return result


apply_debug_logging(globals(), logger=logger, skip={"clockwise_hint"})
