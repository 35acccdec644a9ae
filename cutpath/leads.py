"""Tangent arc lead-in and lead-out synthesis.

A lead is a quarter-circle arc tangent to the chain at its connection point.
Its center lies on the side given by the curve direction, which starts from
the cut normal (pointing away from material) and is rotated or shortened until
the arc stays clear of solid material of the owning part.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Literal, Optional, Sequence, Tuple

import numpy as np

from .chains import (
    Chain,
    chain_end_point,
    chain_end_tangent,
    chain_start_point,
    chain_start_tangent,
    is_chain_closed,
)
from .constants import (
    LEAD_LENGTH_FACTORS,
    LEAD_ROTATION_STEP_DEGREES,
    LEAD_SAMPLE_SPACING,
    MIN_LEAD_SAMPLE_SEGMENTS,
    PERPENDICULAR_DOT_TOLERANCE,
    PRECISION_TOLERANCE,
)
from .cut_direction import CutDirection
from .geometry import (
    Point,
    Vector,
    _cross,
    _dot,
    _left_normal,
    _normalize,
    _right_normal,
    _rotate,
    normalize_angle,
)
from .lead_config import LeadConfig, LeadType
from .lead_validation import LeadValidationResult, validate_lead_configuration
from .logging_utils import apply_debug_logging
from .part_detection import (
    Part,
    is_chain_hole_in_part,
    is_chain_shell_in_part,
    points_inside_chain,
    points_inside_part,
)
from .shapes import Arc

logger = logging.getLogger(__name__)

NormalSide = Literal["left", "right"]

_QUARTER_TURN = math.pi / 2.0


@dataclass(frozen=True)
class CutNormal:
    normal: Vector
    side: NormalSide
    connection_point: Point


@dataclass(frozen=True)
class Lead:
    geometry: Optional[Arc]
    type: LeadType
    normal: Optional[Vector] = None
    connection_point: Optional[Point] = None


@dataclass
class LeadResult:
    lead_in: Optional[Lead] = None
    lead_out: Optional[Lead] = None
    warnings: List[str] = field(default_factory=list)
    validation: Optional[LeadValidationResult] = None


def create_tangent_arc(
    point: Point,
    tangent: Vector,
    length: float,
    curve_direction: Vector,
    is_lead_in: bool,
    clockwise: bool,
) -> Arc:
    """Quarter arc of arc-length ``length`` tangent to ``tangent`` at ``point``.

    A lead-in ends at ``point``; a lead-out starts there. The center sits on
    the side of ``point`` that ``curve_direction`` points to.
    """

    radius = length / _QUARTER_TURN
    sweep = length / radius
    direction = _normalize(curve_direction) or _left_normal(tangent)
    if abs(_dot(direction, tangent)) < PERPENDICULAR_DOT_TOLERANCE:
        offset = direction
    else:
        left = _left_normal(tangent)
        right = _right_normal(tangent)
        offset = left if _dot(left, direction) > _dot(right, direction) else right

    center = (point[0] + offset[0] * radius, point[1] + offset[1] * radius)
    connection = math.atan2(point[1] - center[1], point[0] - center[0])
    if is_lead_in:
        end = connection
        start = connection + sweep if clockwise else connection - sweep
    else:
        start = connection
        end = connection - sweep if clockwise else connection + sweep
    return Arc(
        center=center,
        radius=radius,
        start_angle=normalize_angle(start),
        end_angle=normalize_angle(end),
        clockwise=clockwise,
    )


def sample_arc_points(arc: Arc, connection_point: Optional[Point] = None) -> np.ndarray:
    """Points along ``arc`` about every two units, at least eight segments.

    Samples within the precision tolerance of ``connection_point`` are dropped
    since they sit on the chain itself.
    """

    segments = max(MIN_LEAD_SAMPLE_SEGMENTS, math.ceil(arc.length() / LEAD_SAMPLE_SPACING))
    angles = arc.start_angle + arc.sweep * np.linspace(0.0, 1.0, segments + 1)
    points = np.column_stack(
        (arc.center[0] + arc.radius * np.cos(angles), arc.center[1] + arc.radius * np.sin(angles))
    )
    if connection_point is None:
        return points
    near = (np.abs(points[:, 0] - connection_point[0]) < PRECISION_TOLERANCE) & (
        np.abs(points[:, 1] - connection_point[1]) < PRECISION_TOLERANCE
    )
    return points[~near]


def calculate_cut_normal(
    chain: Chain,
    cut_direction: CutDirection = "none",
    part: Optional[Part] = None,
) -> Optional[CutNormal]:
    """Normal at the chain start pointing away from material.

    Shells cut clockwise put material on the right, so the left normal faces
    out; holes flip that. Without part context the chain is treated as a shell.
    """

    point = chain_start_point(chain)
    tangent = chain_start_tangent(chain)
    if point is None or tangent is None:
        return None

    side: NormalSide = "left"
    if cut_direction != "none":
        is_hole = part is not None and is_chain_hole_in_part(chain, part)
        if cut_direction == "clockwise":
            side = "right" if is_hole else "left"
        else:
            side = "left" if is_hole else "right"
    normal = _left_normal(tangent) if side == "left" else _right_normal(tangent)
    return CutNormal(normal=normal, side=side, connection_point=point)


def _sweep_clockwise(
    chain: Chain,
    cut_direction: CutDirection,
    part: Optional[Part],
    is_shell: bool,
) -> Optional[bool]:
    """Arc handedness from the cut direction; ``None`` defers to each curve direction."""

    if cut_direction == "none":
        return None
    if part is not None:
        shell_like = is_shell
    else:
        shell_like = True if chain.clockwise is None else chain.clockwise
    if cut_direction == "clockwise":
        return not shell_like
    return shell_like


def _curve_directions(base_direction: Vector, manual_angle: Optional[float]) -> List[Vector]:
    if manual_angle is not None:
        radians = math.radians(manual_angle)
        return [(math.cos(radians), math.sin(radians))]
    steps = 360 // LEAD_ROTATION_STEP_DEGREES
    return [
        _rotate(base_direction, math.radians(i * LEAD_ROTATION_STEP_DEGREES)) for i in range(steps)
    ]


def lead_candidates(
    point: Point,
    tangent: Vector,
    config: LeadConfig,
    base_direction: Vector,
    is_lead_in: bool,
    clockwise: Optional[bool],
) -> Iterator[Tuple[Arc, Vector]]:
    """Candidate arcs, longest first, each length trying every direction."""

    factors: Sequence[float] = LEAD_LENGTH_FACTORS if config.fit else (1.0,)
    directions = _curve_directions(base_direction, config.angle)
    for factor in factors:
        for direction in directions:
            sweep_cw = _cross(tangent, direction) < 0.0 if clockwise is None else clockwise
            arc = create_tangent_arc(point, tangent, config.length * factor, direction, is_lead_in, sweep_cw)
            yield arc, direction


def search_lead(
    candidates: Iterator[Tuple[Arc, Vector]],
    accept: Callable[[Arc], bool],
) -> Optional[Tuple[Arc, Vector]]:
    """First candidate that ``accept`` admits, or ``None``."""

    for arc, direction in candidates:
        if accept(arc):
            return arc, direction
    return None


def _clear_of_material(
    chain: Chain,
    part: Part,
    connection_point: Point,
    is_hole: bool,
) -> Callable[[Arc], bool]:
    check_hole = is_hole and is_chain_closed(chain)

    def accept(arc: Arc) -> bool:
        samples = sample_arc_points(arc, connection_point)
        if len(samples) == 0:
            return True
        if points_inside_part(samples, part).any():
            return False
        if check_hole and not points_inside_chain(samples, chain).all():
            return False
        return True

    return accept


def _calculate_lead(
    chain: Chain,
    config: LeadConfig,
    is_lead_in: bool,
    cut_direction: CutDirection,
    part: Optional[Part],
    base_normal: Vector,
    warnings: List[str],
) -> Optional[Lead]:
    label = "Lead-in" if is_lead_in else "Lead-out"
    point = chain_start_point(chain) if is_lead_in else chain_end_point(chain)
    tangent = chain_start_tangent(chain) if is_lead_in else chain_end_tangent(chain)
    if point is None or tangent is None:
        warnings.append(f"{label} skipped: chain {chain.id} has no tangent at its connection point")
        return None

    is_shell = part is not None and is_chain_shell_in_part(chain, part)
    is_hole = part is not None and is_chain_hole_in_part(chain, part)

    base_direction = (-base_normal[0], -base_normal[1]) if config.flip_side else base_normal
    clockwise = _sweep_clockwise(chain, cut_direction, part, is_shell)

    def candidates() -> Iterator[Tuple[Arc, Vector]]:
        return lead_candidates(point, tangent, config, base_direction, is_lead_in, clockwise)

    if part is None:
        found = next(candidates())
    else:
        found = search_lead(candidates(), _clear_of_material(chain, part, point, is_hole))

    if found is None:
        role = "hole" if is_hole else "shell" if is_shell else "shape"
        message = (
            f"{label} for {role} intersects solid material and cannot be avoided. "
            "Consider reducing lead length or manually adjusting the path."
        )
        logger.warning("Chain %s: %s", chain.id, message)
        warnings.append(message)
        found = next(candidates())

    arc, direction = found
    return Lead(
        geometry=arc,
        type="arc",
        normal=_normalize(direction),
        connection_point=point,
    )


def calculate_leads(
    chain: Chain,
    lead_in: LeadConfig,
    lead_out: LeadConfig,
    cut_direction: CutDirection = "none",
    part: Optional[Part] = None,
    cut_normal: Optional[Vector] = None,
) -> LeadResult:
    """Compute lead-in and lead-out arcs for ``chain``.

    Validation runs first and an error result returns without geometry. A
    supplied ``cut_normal`` replaces the one derived from the chain.
    """

    result = LeadResult()
    validation = validate_lead_configuration(chain, lead_in, lead_out, cut_direction, part)
    result.validation = validation
    result.warnings.extend(validation.warnings)
    if validation.blocking:
        return result

    if lead_in.type == "none" and lead_out.type == "none":
        return result

    if cut_normal is None:
        computed = calculate_cut_normal(chain, cut_direction, part)
        if computed is None:
            result.warnings.append(f"Chain {chain.id} has no tangent at its start point; leads skipped")
            return result
        cut_normal = computed.normal

    if lead_in.enabled:
        result.lead_in = _calculate_lead(chain, lead_in, True, cut_direction, part, cut_normal, result.warnings)
    if lead_out.enabled:
        result.lead_out = _calculate_lead(chain, lead_out, False, cut_direction, part, cut_normal, result.warnings)
    return result


apply_debug_logging(
    globals(),
    logger=logger,
    skip={
        "create_tangent_arc",
        "sample_arc_points",
        "lead_candidates",
        "_curve_directions",
        "_clear_of_material",
    },
)
