"""Plain dict / JSON form of shapes and pipeline results.

Shapes serialize as ``{"type": ..., "id": ..., "layer": ..., "geometry": {...}}``
with points written as ``{"x": .., "y": ..}`` objects.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .chains import Chain
from .geometry import BoundingBox, Point
from .leads import Lead, LeadResult
from .part_detection import Part, PartDetectionWarning
from .shapes import Arc, Circle, Ellipse, Line, Polyline, PolylineVertex, Shape, UnsupportedShapeError


class ShapeFormatError(ValueError):
    """Raised when serialized shape data is malformed."""


def _point_out(point: Point) -> Dict[str, float]:
    return {"x": float(point[0]), "y": float(point[1])}


def _point_in(data: Any, where: str) -> Point:
    if isinstance(data, Mapping) and "x" in data and "y" in data:
        try:
            return (float(data["x"]), float(data["y"]))
        except (TypeError, ValueError) as exc:
            raise ShapeFormatError(f"{where}: coordinates must be numbers") from exc
    if isinstance(data, (list, tuple)) and len(data) == 2:
        try:
            return (float(data[0]), float(data[1]))
        except (TypeError, ValueError) as exc:
            raise ShapeFormatError(f"{where}: coordinates must be numbers") from exc
    raise ShapeFormatError(f"{where}: expected a point, got {data!r}")


def _number(geometry: Mapping[str, Any], key: str, where: str, default: Optional[float] = None) -> float:
    if key not in geometry:
        if default is not None:
            return default
        raise ShapeFormatError(f"{where}: missing '{key}'")
    try:
        return float(geometry[key])
    except (TypeError, ValueError) as exc:
        raise ShapeFormatError(f"{where}: '{key}' must be a number") from exc


def _optional_number(geometry: Mapping[str, Any], key: str, where: str) -> Optional[float]:
    if geometry.get(key) is None:
        return None
    return _number(geometry, key, where)


def shape_to_dict(shape: Shape) -> Dict[str, Any]:
    if isinstance(shape, Line):
        geometry: Dict[str, Any] = {"start": _point_out(shape.start), "end": _point_out(shape.end)}
    elif isinstance(shape, Arc):
        geometry = {
            "center": _point_out(shape.center),
            "radius": shape.radius,
            "startAngle": shape.start_angle,
            "endAngle": shape.end_angle,
            "clockwise": shape.clockwise,
        }
    elif isinstance(shape, Circle):
        geometry = {"center": _point_out(shape.center), "radius": shape.radius}
    elif isinstance(shape, Polyline):
        geometry = {
            "closed": shape.closed,
            "vertices": [{"x": v.x, "y": v.y, "bulge": v.bulge} for v in shape.vertices],
        }
    elif isinstance(shape, Ellipse):
        geometry = {
            "center": _point_out(shape.center),
            "majorAxisEndpoint": _point_out(shape.major_axis),
            "minorToMajorRatio": shape.minor_to_major_ratio,
            "startParam": shape.start_param,
            "endParam": shape.end_param,
            "clockwise": shape.clockwise,
        }
    else:
        raise UnsupportedShapeError(f"unsupported shape variant: {type(shape).__name__}")
    return {"type": shape.kind, "id": shape.id, "layer": shape.layer, "geometry": geometry}


def shape_from_dict(data: Mapping[str, Any], index: int = 0) -> Shape:
    if not isinstance(data, Mapping):
        raise ShapeFormatError(f"shape[{index}]: expected an object")
    kind = data.get("type")
    where = f"shape[{index}] ({kind})"
    geometry = data.get("geometry")
    if not isinstance(geometry, Mapping):
        raise ShapeFormatError(f"{where}: missing 'geometry' object")
    shape_id = str(data.get("id") or f"shape-{index + 1}")
    layer = data.get("layer")
    layer = str(layer) if layer is not None else None

    if kind == "line":
        return Line(
            start=_point_in(geometry.get("start"), f"{where}.start"),
            end=_point_in(geometry.get("end"), f"{where}.end"),
            id=shape_id,
            layer=layer,
        )
    if kind == "arc":
        return Arc(
            center=_point_in(geometry.get("center"), f"{where}.center"),
            radius=_number(geometry, "radius", where),
            start_angle=_number(geometry, "startAngle", where),
            end_angle=_number(geometry, "endAngle", where),
            clockwise=bool(geometry.get("clockwise", False)),
            id=shape_id,
            layer=layer,
        )
    if kind == "circle":
        return Circle(
            center=_point_in(geometry.get("center"), f"{where}.center"),
            radius=_number(geometry, "radius", where),
            id=shape_id,
            layer=layer,
        )
    if kind == "polyline":
        raw = geometry.get("vertices", geometry.get("points"))
        if not isinstance(raw, list) or not raw:
            raise ShapeFormatError(f"{where}: 'vertices' must be a non-empty list")
        vertices = []
        for vi, vertex in enumerate(raw):
            x, y = _point_in(vertex, f"{where}.vertices[{vi}]")
            bulge = _number(vertex, "bulge", where, default=0.0) if isinstance(vertex, Mapping) else 0.0
            vertices.append(PolylineVertex(x, y, bulge))
        return Polyline(
            vertices=tuple(vertices),
            closed=bool(geometry.get("closed", False)),
            id=shape_id,
            layer=layer,
        )
    if kind == "ellipse":
        return Ellipse(
            center=_point_in(geometry.get("center"), f"{where}.center"),
            major_axis=_point_in(geometry.get("majorAxisEndpoint"), f"{where}.majorAxisEndpoint"),
            minor_to_major_ratio=_number(geometry, "minorToMajorRatio", where),
            start_param=_optional_number(geometry, "startParam", where),
            end_param=_optional_number(geometry, "endParam", where),
            clockwise=bool(geometry.get("clockwise", False)),
            id=shape_id,
            layer=layer,
        )
    raise ShapeFormatError(f"{where}: unknown shape type {kind!r}")


def shapes_from_json(text: str) -> List[Shape]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ShapeFormatError(f"invalid JSON: {exc}") from exc
    if isinstance(payload, Mapping):
        payload = payload.get("shapes")
    if not isinstance(payload, list):
        raise ShapeFormatError("expected a list of shapes or an object with a 'shapes' list")
    return [shape_from_dict(item, index) for index, item in enumerate(payload)]


def load_shapes(path: Union[str, Path]) -> List[Shape]:
    return shapes_from_json(Path(path).read_text(encoding="utf-8"))


def dump_shapes(shapes: Sequence[Shape]) -> str:
    return json.dumps({"shapes": [shape_to_dict(shape) for shape in shapes]}, indent=2)


def _box_out(box: BoundingBox) -> Dict[str, float]:
    return {"minX": box.min_x, "minY": box.min_y, "maxX": box.max_x, "maxY": box.max_y}


def chain_to_dict(chain: Chain) -> Dict[str, Any]:
    return {
        "id": chain.id,
        "clockwise": chain.clockwise,
        "originalChainId": chain.original_chain_id,
        "shapes": [shape_to_dict(shape) for shape in chain.shapes],
    }


def part_to_dict(part: Part) -> Dict[str, Any]:
    return {
        "id": part.id,
        "shell": {"id": part.shell.id, "chainId": part.shell.chain.id, "boundingBox": _box_out(part.shell.bounding_box)},
        "holes": [
            {"id": hole.id, "chainId": hole.chain.id, "boundingBox": _box_out(hole.bounding_box)}
            for hole in part.holes
        ],
    }


def _lead_out(lead: Optional[Lead]) -> Optional[Dict[str, Any]]:
    if lead is None:
        return None
    return {
        "type": lead.type,
        "geometry": shape_to_dict(lead.geometry)["geometry"] if lead.geometry is not None else None,
        "normal": _point_out(lead.normal) if lead.normal is not None else None,
        "connectionPoint": _point_out(lead.connection_point) if lead.connection_point is not None else None,
    }


def lead_result_to_dict(result: LeadResult) -> Dict[str, Any]:
    validation = result.validation
    return {
        "leadIn": _lead_out(result.lead_in),
        "leadOut": _lead_out(result.lead_out),
        "warnings": list(result.warnings),
        "validation": None
        if validation is None
        else {
            "isValid": validation.is_valid,
            "severity": validation.severity,
            "warnings": list(validation.warnings),
            "suggestions": validation.suggestions,
        },
    }


def warning_to_dict(warning: PartDetectionWarning) -> Dict[str, Any]:
    return {"type": warning.kind, "chainId": warning.chain_id, "message": warning.message}
