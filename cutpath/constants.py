"""Numeric constants shared by the chain, part and lead stages."""

from __future__ import annotations

import math

# Coordinates closer than this are treated as the same point.
PRECISION_TOLERANCE = 1e-3

DEFAULT_CHAIN_TOLERANCE = 0.05
DEFAULT_TRAVERSAL_TOLERANCE = 0.01
DEFAULT_CLOSURE_TOLERANCE = 0.1

CIRCLE_TESSELLATION_POINTS = 64
MIN_ARC_TESSELLATION_POINTS = 8
ARC_TESSELLATION_DENSITY = math.pi / 32

MAX_RECOMMENDED_LEAD_LENGTH = 100.0
MIN_LEAD_LENGTH = 0.5
LEAD_ROTATION_STEP_DEGREES = 5
LEAD_LENGTH_FACTORS = (1.0, 0.75, 0.5, 0.25)

# Arc leads are sampled at roughly this spacing along their length.
LEAD_SAMPLE_SPACING = 2.0
MIN_LEAD_SAMPLE_SEGMENTS = 8

# Tolerance for treating a curve direction as perpendicular to a tangent.
PERPENDICULAR_DOT_TOLERANCE = 0.01

MIN_POLYGON_POINTS = 3
