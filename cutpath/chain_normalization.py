"""Reorder and reverse chain shapes into a single directed traversal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Tuple

from .chains import Chain
from .constants import DEFAULT_TRAVERSAL_TOLERANCE
from .geometry import Point, points_close
from .logging_utils import apply_debug_logging
from .shapes import Shape

logger = logging.getLogger(__name__)

TraversalIssueKind = Literal["coincident_endpoints", "coincident_startpoints", "broken_traversal"]


@dataclass(frozen=True)
class ChainNormalizationParameters:
    traversal_tolerance: float = DEFAULT_TRAVERSAL_TOLERANCE


@dataclass
class TraversalIssue:
    kind: TraversalIssueKind
    shape_indices: Tuple[int, int]
    points: Tuple[Point, Point]
    description: str

    def __str__(self) -> str:  # pragma: no cover - formatting helper
        return f"[{self.kind}] {self.description}"


@dataclass
class ChainTraversalReport:
    chain_id: str
    can_traverse: bool
    issues: List[TraversalIssue] = field(default_factory=list)
    description: str = ""


def _traverse_from(shapes: Sequence[Shape], start_index: int, tolerance: float) -> Optional[List[Shape]]:
    used = [False] * len(shapes)
    used[start_index] = True
    path: List[Shape] = [shapes[start_index]]
    current_end = shapes[start_index].end_point()

    while len(path) < len(shapes):
        chosen: Optional[Shape] = None
        for index, candidate in enumerate(shapes):
            if used[index]:
                continue
            if points_close(current_end, candidate.start_point(), tolerance):
                chosen = candidate
            elif points_close(current_end, candidate.end_point(), tolerance):
                chosen = candidate.reversed()
            else:
                continue
            used[index] = True
            break
        if chosen is None:
            return None
        path.append(chosen)
        current_end = chosen.end_point()
    return path


def find_traversal(shapes: Sequence[Shape], tolerance: float) -> Optional[List[Shape]]:
    """First complete traversal found, trying every shape as the start."""

    if len(shapes) <= 1:
        return list(shapes)
    for start_index in range(len(shapes)):
        path = _traverse_from(shapes, start_index, tolerance)
        if path is not None:
            return path
    return None


def normalize_chain(
    chain: Chain,
    params: ChainNormalizationParameters = ChainNormalizationParameters(),
) -> Chain:
    """Return ``chain`` with shapes ordered end-to-start.

    Shapes that only connect by their end are reversed before insertion. When
    no complete traversal exists the chain is returned unchanged; use
    :func:`analyze_chain_traversal` to tell the two outcomes apart.
    """

    if len(chain.shapes) <= 1:
        return chain
    path = find_traversal(chain.shapes, params.traversal_tolerance)
    if path is None:
        logger.warning(
            "Chain %s (%d shapes) has no complete traversal; leaving shape order unchanged",
            chain.id,
            len(chain.shapes),
        )
        return chain
    return chain.with_shapes(path)


def normalize_chains(
    chains: Sequence[Chain],
    params: ChainNormalizationParameters = ChainNormalizationParameters(),
) -> List[Chain]:
    return [normalize_chain(chain, params) for chain in chains]


def _endpoint_issues(chain: Chain, tolerance: float) -> List[TraversalIssue]:
    issues: List[TraversalIssue] = []
    shapes = chain.shapes
    for i in range(len(shapes)):
        for j in range(i + 1, len(shapes)):
            end_i, end_j = shapes[i].end_point(), shapes[j].end_point()
            if points_close(end_i, end_j, tolerance):
                issues.append(
                    TraversalIssue(
                        "coincident_endpoints",
                        (i, j),
                        (end_i, end_j),
                        f"Shapes {i + 1} and {j + 1} both end at ({end_i[0]:.3f}, {end_i[1]:.3f}); "
                        "one of them should be reversed.",
                    )
                )
            start_i, start_j = shapes[i].start_point(), shapes[j].start_point()
            if points_close(start_i, start_j, tolerance):
                issues.append(
                    TraversalIssue(
                        "coincident_startpoints",
                        (i, j),
                        (start_i, start_j),
                        f"Shapes {i + 1} and {j + 1} both start at ({start_i[0]:.3f}, {start_i[1]:.3f}); "
                        "one of them should be reversed.",
                    )
                )
    return issues


def _order_issues(chain: Chain, tolerance: float) -> List[TraversalIssue]:
    issues: List[TraversalIssue] = []
    shapes = chain.shapes
    last = len(shapes) - 1
    for i in range(len(shapes)):
        for j in range(i + 2, len(shapes)):
            if i == 0 and j == last:
                # first and last meet on closed chains
                continue
            found = None
            for p in (shapes[i].start_point(), shapes[i].end_point()):
                for q in (shapes[j].start_point(), shapes[j].end_point()):
                    if points_close(p, q, tolerance):
                        found = (p, q)
                        break
                if found:
                    break
            if found is None:
                continue
            issues.append(
                TraversalIssue(
                    "broken_traversal",
                    (i, j),
                    found,
                    f"Non-adjacent shapes {i + 1} and {j + 1} meet at "
                    f"({found[0][0]:.3f}, {found[0][1]:.3f}); shape order is not a traversal.",
                )
            )
    return issues


def analyze_chain_traversal(
    chain: Chain,
    params: ChainNormalizationParameters = ChainNormalizationParameters(),
) -> ChainTraversalReport:
    """Diagnose whether ``chain`` can be walked end-to-start and why not."""

    if len(chain.shapes) < 2:
        return ChainTraversalReport(
            chain_id=chain.id,
            can_traverse=True,
            description=f"Chain {chain.id} has fewer than 2 shapes; nothing to traverse.",
        )

    tolerance = params.traversal_tolerance
    can_traverse = find_traversal(chain.shapes, tolerance) is not None
    issues: List[TraversalIssue] = []
    if not can_traverse:
        issues.extend(_endpoint_issues(chain, tolerance))
    issues.extend(_order_issues(chain, tolerance))

    status = "can be traversed" if can_traverse else "cannot be traversed"
    if issues:
        description = (
            f"Chain {chain.id} ({len(chain.shapes)} shapes): {len(issues)} issue(s) detected; "
            f"chain {status}."
        )
    else:
        description = f"Chain {chain.id} ({len(chain.shapes)} shapes): no issues; chain {status}."
    return ChainTraversalReport(chain.id, can_traverse, issues, description)


apply_debug_logging(
    globals(),
    logger=logger,
    skip={"_traverse_from", "find_traversal", "_endpoint_issues", "_order_issues"},
)
