"""Small 2D vector helpers and polygon predicates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]
Vector = Tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def size(self) -> float:
        return max(self.width, self.height)

    def contains_point(self, point: Point) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def contains_box(self, other: "BoundingBox", tolerance: float = 0.0) -> bool:
        return (
            other.min_x >= self.min_x - tolerance
            and other.max_x <= self.max_x + tolerance
            and other.min_y >= self.min_y - tolerance
            and other.max_y <= self.max_y + tolerance
        )

    def distance_to(self, other: "BoundingBox") -> float:
        """Gap between two boxes; zero when they overlap."""

        dx = max(0.0, max(self.min_x, other.min_x) - min(self.max_x, other.max_x))
        dy = max(0.0, max(self.min_y, other.min_y) - min(self.max_y, other.max_y))
        return math.hypot(dx, dy)

    def edge_clearance(self, inner: "BoundingBox") -> float:
        """Smallest margin between ``inner`` and this box's edges."""

        if not self.contains_box(inner):
            return self.distance_to(inner)
        return min(
            inner.min_x - self.min_x,
            self.max_x - inner.max_x,
            inner.min_y - self.min_y,
            self.max_y - inner.max_y,
        )

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )


def bounding_box_of(points: Iterable[Point]) -> BoundingBox:
    """Box around ``points``; an empty input gives a zero box at the origin."""

    pts = list(points)
    if not pts:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return BoundingBox(min(xs), min(ys), max(xs), max(ys))


def merge_boxes(boxes: Iterable[Optional[BoundingBox]]) -> Optional[BoundingBox]:
    merged: Optional[BoundingBox] = None
    for box in boxes:
        if box is None:
            continue
        merged = box if merged is None else merged.union(box)
    return merged


def _dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _cross(a: Vector, b: Vector) -> float:
    return a[0] * b[1] - a[1] * b[0]


def _norm(v: Vector) -> float:
    return math.hypot(v[0], v[1])


def _normalize(v: Vector) -> Optional[Vector]:
    length = _norm(v)
    if length <= 1e-12:
        return None
    return (v[0] / length, v[1] / length)


def _rotate(v: Vector, angle: float) -> Vector:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (v[0] * cos_a - v[1] * sin_a, v[0] * sin_a + v[1] * cos_a)


def _left_normal(v: Vector) -> Vector:
    return (-v[1], v[0])


def _right_normal(v: Vector) -> Vector:
    return (v[1], -v[0])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def points_close(a: Optional[Point], b: Optional[Point], tolerance: float) -> bool:
    """Strict closeness test used for traversal matching."""

    if a is None or b is None:
        return False
    return distance(a, b) < tolerance


def normalize_angle(angle: float) -> float:
    """Map ``angle`` into ``[0, 2*pi)``."""

    two_pi = 2.0 * math.pi
    result = math.fmod(angle, two_pi)
    if result < 0.0:
        result += two_pi
    if result >= two_pi:
        result -= two_pi
    return result


def signed_area(points: Sequence[Point]) -> float:
    """Shoelace area; positive for counterclockwise rings."""

    if len(points) < 3:
        return 0.0
    arr = np.asarray(points, dtype=float)
    x = arr[:, 0]
    y = arr[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def points_in_polygon(points: Sequence[Point], polygon: Sequence[Point]) -> np.ndarray:
    """Crossing-number test of many points against one polygon ring.

    Returns a boolean array aligned with ``points``. The ring does not need to
    repeat its first vertex. Points exactly on an edge may land on either side.
    """

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(polygon) < 3 or pts.size == 0:
        return np.zeros(len(pts), dtype=bool)
    ring = np.asarray(polygon, dtype=float)
    xi = ring[:, 0]
    yi = ring[:, 1]
    xj = np.roll(xi, 1)
    yj = np.roll(yi, 1)

    px = pts[:, 0][:, None]
    py = pts[:, 1][:, None]
    straddles = (yi > py) != (yj > py)
    dy = yj - yi
    safe_dy = np.where(dy == 0.0, 1.0, dy)
    x_cross = (xj - xi) * (py - yi) / safe_dy + xi
    crossings = straddles & (px < x_cross)
    return (np.count_nonzero(crossings, axis=1) % 2) == 1


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    return bool(points_in_polygon([point], polygon)[0])
