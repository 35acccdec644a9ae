"""Immutable 2D shape primitives.

Every variant exposes the same surface: start/end points, start/end tangents
in the direction of travel, key points for connectivity, a bounding box,
tessellation, reversal, closure and length. Degenerate geometry (zero-length
lines, zero-radius arcs) yields ``None`` tangents instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, ClassVar, List, Optional, Sequence, Tuple, Union

from .constants import (
    ARC_TESSELLATION_DENSITY,
    CIRCLE_TESSELLATION_POINTS,
    MIN_ARC_TESSELLATION_POINTS,
    MIN_POLYGON_POINTS,
)
from .geometry import (
    BoundingBox,
    Point,
    Vector,
    _normalize,
    bounding_box_of,
    distance,
    normalize_angle,
)

_TWO_PI = 2.0 * math.pi
_EPS = 1e-12
_SPLIT_EPS = 1e-9


class UnsupportedShapeError(TypeError):
    """Raised when an object that is not a known shape variant reaches the pipeline."""


@dataclass(frozen=True)
class TessellationParameters:
    circle_points: int = CIRCLE_TESSELLATION_POINTS
    min_arc_points: int = MIN_ARC_TESSELLATION_POINTS
    arc_density: float = ARC_TESSELLATION_DENSITY

    def arc_segments(self, span: float) -> int:
        return max(self.min_arc_points, int(round(abs(span) / self.arc_density)))


DEFAULT_TESSELLATION = TessellationParameters()


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point
    id: str = ""
    layer: Optional[str] = None

    kind: ClassVar[str] = "line"

    def start_point(self) -> Point:
        return self.start

    def end_point(self) -> Point:
        return self.end

    def _direction(self) -> Optional[Vector]:
        return _normalize((self.end[0] - self.start[0], self.end[1] - self.start[1]))

    def start_tangent(self) -> Optional[Vector]:
        return self._direction()

    def end_tangent(self) -> Optional[Vector]:
        return self._direction()

    def key_points(self) -> List[Point]:
        return [self.start, self.end]

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(
            min(self.start[0], self.end[0]),
            min(self.start[1], self.end[1]),
            max(self.start[0], self.end[0]),
            max(self.start[1], self.end[1]),
        )

    def tessellate(self, params: TessellationParameters = DEFAULT_TESSELLATION) -> List[Point]:
        return [self.start, self.end]

    def reversed(self) -> "Line":
        return replace(self, start=self.end, end=self.start)

    def is_closed(self, tolerance: float) -> bool:
        return False

    def length(self) -> float:
        return distance(self.start, self.end)

    def point_at_fraction(self, t: float) -> Point:
        return (
            self.start[0] + (self.end[0] - self.start[0]) * t,
            self.start[1] + (self.end[1] - self.start[1]) * t,
        )


@dataclass(frozen=True)
class Arc:
    """Circular arc; angles in radians, counterclockwise unless ``clockwise``."""

    center: Point
    radius: float
    start_angle: float
    end_angle: float
    clockwise: bool = False
    id: str = ""
    layer: Optional[str] = None

    kind: ClassVar[str] = "arc"

    @property
    def sweep(self) -> float:
        """Signed swept angle, negative for clockwise arcs."""

        delta = self.end_angle - self.start_angle
        if self.clockwise:
            if delta > 0.0:
                delta -= _TWO_PI
        elif delta < 0.0:
            delta += _TWO_PI
        return delta

    def point_at_angle(self, angle: float) -> Point:
        return (
            self.center[0] + self.radius * math.cos(angle),
            self.center[1] + self.radius * math.sin(angle),
        )

    def tangent_at_angle(self, angle: float) -> Optional[Vector]:
        if self.radius <= _EPS:
            return None
        if self.clockwise:
            return (math.sin(angle), -math.cos(angle))
        return (-math.sin(angle), math.cos(angle))

    def start_point(self) -> Point:
        return self.point_at_angle(self.start_angle)

    def end_point(self) -> Point:
        return self.point_at_angle(self.end_angle)

    def start_tangent(self) -> Optional[Vector]:
        return self.tangent_at_angle(self.start_angle)

    def end_tangent(self) -> Optional[Vector]:
        return self.tangent_at_angle(self.end_angle)

    def key_points(self) -> List[Point]:
        return [self.start_point(), self.end_point(), self.center]

    def contains_angle(self, angle: float) -> bool:
        sweep = self.sweep
        if sweep >= 0.0:
            offset = normalize_angle(angle - self.start_angle)
        else:
            offset = normalize_angle(self.start_angle - angle)
        return offset <= abs(sweep) + 1e-12

    def bounding_box(self) -> BoundingBox:
        points = [self.start_point(), self.end_point()]
        for quadrant in range(4):
            angle = quadrant * math.pi / 2.0
            if self.contains_angle(angle):
                points.append(self.point_at_angle(angle))
        return bounding_box_of(points)

    def tessellate(self, params: TessellationParameters = DEFAULT_TESSELLATION) -> List[Point]:
        sweep = self.sweep
        segments = params.arc_segments(sweep)
        return [
            self.point_at_angle(self.start_angle + sweep * i / segments)
            for i in range(segments + 1)
        ]

    def reversed(self) -> "Arc":
        return replace(
            self,
            start_angle=self.end_angle,
            end_angle=self.start_angle,
            clockwise=not self.clockwise,
        )

    def is_closed(self, tolerance: float) -> bool:
        return False

    def length(self) -> float:
        return abs(self.sweep) * self.radius

    def split_at_fraction(self, t: float) -> Tuple["Arc", "Arc"]:
        mid = normalize_angle(self.start_angle + self.sweep * t)
        return (
            replace(self, end_angle=mid),
            replace(self, start_angle=mid),
        )


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float
    id: str = ""
    layer: Optional[str] = None

    kind: ClassVar[str] = "circle"

    def start_point(self) -> Point:
        return (self.center[0] + self.radius, self.center[1])

    def end_point(self) -> Point:
        return self.start_point()

    def start_tangent(self) -> Optional[Vector]:
        if self.radius <= _EPS:
            return None
        return (0.0, 1.0)

    def end_tangent(self) -> Optional[Vector]:
        return self.start_tangent()

    def key_points(self) -> List[Point]:
        cx, cy = self.center
        r = self.radius
        return [(cx + r, cy), (cx, cy + r), (cx - r, cy), (cx, cy - r), self.center]

    def bounding_box(self) -> BoundingBox:
        cx, cy = self.center
        r = self.radius
        return BoundingBox(cx - r, cy - r, cx + r, cy + r)

    def tessellate(self, params: TessellationParameters = DEFAULT_TESSELLATION) -> List[Point]:
        n = params.circle_points
        cx, cy = self.center
        return [
            (cx + self.radius * math.cos(_TWO_PI * i / n), cy + self.radius * math.sin(_TWO_PI * i / n))
            for i in range(n)
        ]

    def reversed(self) -> "Circle":
        return self

    def is_closed(self, tolerance: float) -> bool:
        return True

    def length(self) -> float:
        return _TWO_PI * self.radius


@dataclass(frozen=True)
class PolylineVertex:
    x: float
    y: float
    bulge: float = 0.0

    @property
    def point(self) -> Point:
        return (self.x, self.y)


def bulge_to_arc(start: Point, end: Point, bulge: float) -> Optional[Arc]:
    """Return the arc described by ``bulge`` between two polyline vertices."""

    if abs(bulge) <= _EPS:
        return None
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    chord = math.hypot(dx, dy)
    if chord <= _EPS:
        return None
    radius = chord * (1.0 + bulge * bulge) / (4.0 * abs(bulge))
    offset = chord * (1.0 - bulge * bulge) / (4.0 * bulge)
    mid = ((start[0] + end[0]) * 0.5, (start[1] + end[1]) * 0.5)
    center = (mid[0] - dy / chord * offset, mid[1] + dx / chord * offset)
    return Arc(
        center=center,
        radius=radius,
        start_angle=normalize_angle(math.atan2(start[1] - center[1], start[0] - center[0])),
        end_angle=normalize_angle(math.atan2(end[1] - center[1], end[0] - center[0])),
        clockwise=bulge < 0.0,
    )


_Segment = Tuple[PolylineVertex, Point]


@dataclass(frozen=True)
class Polyline:
    """Vertex sequence; each vertex bulge describes the segment that follows it."""

    vertices: Tuple[PolylineVertex, ...]
    closed: bool = False
    id: str = ""
    layer: Optional[str] = None

    kind: ClassVar[str] = "polyline"

    @property
    def points(self) -> List[Point]:
        return [v.point for v in self.vertices]

    def _segments(self) -> List[_Segment]:
        verts = self.vertices
        segments: List[_Segment] = [(verts[i], verts[i + 1].point) for i in range(len(verts) - 1)]
        if self.closed and len(verts) > 2 and distance(verts[0].point, verts[-1].point) > _EPS:
            segments.append((verts[-1], verts[0].point))
        return segments

    @staticmethod
    def _segment_length(segment: _Segment) -> float:
        vertex, end = segment
        arc = bulge_to_arc(vertex.point, end, vertex.bulge)
        if arc is None:
            return distance(vertex.point, end)
        return arc.length()

    @staticmethod
    def _segment_tangent(segment: _Segment, at_end: bool) -> Optional[Vector]:
        vertex, end = segment
        arc = bulge_to_arc(vertex.point, end, vertex.bulge)
        if arc is not None:
            return arc.end_tangent() if at_end else arc.start_tangent()
        return _normalize((end[0] - vertex.x, end[1] - vertex.y))

    def start_point(self) -> Optional[Point]:
        if not self.vertices:
            return None
        return self.vertices[0].point

    def end_point(self) -> Optional[Point]:
        if not self.vertices:
            return None
        if self.closed:
            return self.vertices[0].point
        return self.vertices[-1].point

    def start_tangent(self) -> Optional[Vector]:
        segments = self._segments()
        if not segments:
            return None
        return self._segment_tangent(segments[0], at_end=False)

    def end_tangent(self) -> Optional[Vector]:
        segments = self._segments()
        if not segments:
            return None
        return self._segment_tangent(segments[-1], at_end=True)

    def key_points(self) -> List[Point]:
        return self.points

    def bounding_box(self) -> BoundingBox:
        return bounding_box_of(self.tessellate())

    def tessellate(self, params: TessellationParameters = DEFAULT_TESSELLATION) -> List[Point]:
        segments = self._segments()
        if not segments:
            return self.points
        points: List[Point] = []
        for vertex, end in segments:
            points.append(vertex.point)
            arc = bulge_to_arc(vertex.point, end, vertex.bulge)
            if arc is not None:
                points.extend(arc.tessellate(params)[1:-1])
        if not self.closed:
            points.append(segments[-1][1])
        return points

    def reversed(self) -> "Polyline":
        flipped = list(reversed(self.vertices))
        count = len(flipped)
        vertices = tuple(
            PolylineVertex(v.x, v.y, -flipped[(i + 1) % count].bulge) for i, v in enumerate(flipped)
        )
        return replace(self, vertices=vertices)

    def is_closed(self, tolerance: float) -> bool:
        if not self.vertices:
            return False
        if self.closed:
            return True
        if len(self.vertices) < MIN_POLYGON_POINTS:
            return False
        return distance(self.vertices[0].point, self.vertices[-1].point) <= tolerance

    def length(self) -> float:
        return sum(self._segment_length(segment) for segment in self._segments())

    def split_at_fraction(self, t: float) -> Tuple["Polyline", "Polyline"]:
        """Split at ``t`` of the path length into two open polylines."""

        segments = self._segments()
        lengths = [self._segment_length(segment) for segment in segments]
        target = sum(lengths) * t
        index = len(segments) - 1
        local = 1.0
        accumulated = 0.0
        for i, seg_len in enumerate(lengths):
            if seg_len > 0.0 and accumulated + seg_len >= target:
                index = i
                local = (target - accumulated) / seg_len
                break
            accumulated += seg_len

        vertex, end = segments[index]
        arc = bulge_to_arc(vertex.point, end, vertex.bulge)
        if arc is None:
            split_point = (
                vertex.x + (end[0] - vertex.x) * local,
                vertex.y + (end[1] - vertex.y) * local,
            )
            first_bulge = second_bulge = 0.0
        else:
            split_point = arc.point_at_angle(arc.start_angle + arc.sweep * local)
            included = 4.0 * math.atan(vertex.bulge)
            first_bulge = math.tan(included * local / 4.0)
            second_bulge = math.tan(included * (1.0 - local) / 4.0)

        head = [seg_vertex for seg_vertex, _ in segments[:index]]
        if local > _SPLIT_EPS:
            head.append(PolylineVertex(vertex.x, vertex.y, first_bulge))
        head.append(PolylineVertex(split_point[0], split_point[1], 0.0))

        tail: List[PolylineVertex] = []
        if local < 1.0 - _SPLIT_EPS:
            tail.append(PolylineVertex(split_point[0], split_point[1], second_bulge))
        # a split on a vertex continues from that vertex as is
        tail.extend(seg_vertex for seg_vertex, _ in segments[index + 1:])
        last_end = segments[-1][1]
        tail.append(PolylineVertex(last_end[0], last_end[1], 0.0))

        return (
            replace(self, vertices=tuple(head), closed=False),
            replace(self, vertices=tuple(tail), closed=False),
        )


@dataclass(frozen=True)
class Ellipse:
    """Ellipse or elliptical arc; a full ellipse when either param is ``None``."""

    center: Point
    major_axis: Vector
    minor_to_major_ratio: float
    start_param: Optional[float] = None
    end_param: Optional[float] = None
    clockwise: bool = False
    id: str = ""
    layer: Optional[str] = None

    kind: ClassVar[str] = "ellipse"

    @property
    def is_full(self) -> bool:
        return self.start_param is None or self.end_param is None

    @property
    def _axes(self) -> Tuple[float, float, float]:
        major = math.hypot(self.major_axis[0], self.major_axis[1])
        rotation = math.atan2(self.major_axis[1], self.major_axis[0])
        return major, major * self.minor_to_major_ratio, rotation

    @property
    def param_sweep(self) -> float:
        if self.is_full:
            return -_TWO_PI if self.clockwise else _TWO_PI
        delta = float(self.end_param) - float(self.start_param)  # type: ignore[arg-type]
        if self.clockwise:
            if delta > 0.0:
                delta -= _TWO_PI
        elif delta < 0.0:
            delta += _TWO_PI
        return delta

    @property
    def _first_param(self) -> float:
        return 0.0 if self.is_full else float(self.start_param)  # type: ignore[arg-type]

    def point_at_param(self, param: float) -> Point:
        a, b, rotation = self._axes
        x = a * math.cos(param)
        y = b * math.sin(param)
        cos_r = math.cos(rotation)
        sin_r = math.sin(rotation)
        return (self.center[0] + x * cos_r - y * sin_r, self.center[1] + x * sin_r + y * cos_r)

    def tangent_at_param(self, param: float) -> Optional[Vector]:
        a, b, rotation = self._axes
        dx = -a * math.sin(param)
        dy = b * math.cos(param)
        cos_r = math.cos(rotation)
        sin_r = math.sin(rotation)
        tangent = _normalize((dx * cos_r - dy * sin_r, dx * sin_r + dy * cos_r))
        if tangent is None:
            return None
        if self.clockwise:
            return (-tangent[0], -tangent[1])
        return tangent

    def start_point(self) -> Point:
        return self.point_at_param(self._first_param)

    def end_point(self) -> Point:
        return self.point_at_param(self._first_param + self.param_sweep)

    def start_tangent(self) -> Optional[Vector]:
        return self.tangent_at_param(self._first_param)

    def end_tangent(self) -> Optional[Vector]:
        return self.tangent_at_param(self._first_param + self.param_sweep)

    def key_points(self) -> List[Point]:
        if self.is_full:
            quarter = math.pi / 2.0
            return [self.point_at_param(quarter * i) for i in range(4)] + [self.center]
        return [self.start_point(), self.end_point(), self.center]

    def bounding_box(self) -> BoundingBox:
        return bounding_box_of(self.tessellate(TessellationParameters(circle_points=128)))

    def tessellate(self, params: TessellationParameters = DEFAULT_TESSELLATION) -> List[Point]:
        start = self._first_param
        if self.is_full:
            n = params.circle_points
            step = self.param_sweep / n
            return [self.point_at_param(start + step * i) for i in range(n)]
        sweep = self.param_sweep
        segments = params.arc_segments(sweep)
        return [self.point_at_param(start + sweep * i / segments) for i in range(segments + 1)]

    def reversed(self) -> "Ellipse":
        if self.is_full:
            return self
        return replace(
            self,
            start_param=self.end_param,
            end_param=self.start_param,
            clockwise=not self.clockwise,
        )

    def is_closed(self, tolerance: float) -> bool:
        return self.is_full

    def length(self) -> float:
        points = self.tessellate(TessellationParameters(circle_points=256, min_arc_points=64))
        if self.is_full:
            points = points + points[:1]
        return sum(distance(points[i], points[i + 1]) for i in range(len(points) - 1))


Shape = Union[Line, Arc, Circle, Polyline, Ellipse]
SHAPE_TYPES: Tuple[type, ...] = (Line, Arc, Circle, Polyline, Ellipse)


def ensure_shape(value: Any) -> Shape:
    if not isinstance(value, SHAPE_TYPES):
        raise UnsupportedShapeError(f"unsupported shape variant: {type(value).__name__}")
    return value


def ensure_shapes(values: Sequence[Any]) -> Tuple[Shape, ...]:
    return tuple(ensure_shape(value) for value in values)
