"""JSON sketch documents.

String identities only exist here. Loading maps every ``id`` onto a fresh arena
handle (kept as the element's label); dumping writes the labels back.

Document layout::

    {
      "points": [{"id": "A", "x": 0.0, "y": 0.0}],
      "lines": [{"id": "AB", "endpoint_a": "A", "endpoint_b": "B"}],
      "arcs": [{"id": "R", "endpoint_a": "A", "endpoint_b": "B", "center": "O"}],
      "constraints": [
        {"id": "C1", "type": "fixed", "point": "A", "position": {"x": 0, "y": 0}},
        {"type": "axis_aligned", "axis": "vertical", "point_a": "A", "point_b": "B"},
        {"type": "point_point_distance", "point_a": "A", "point_b": "B", "distance": 50,
         "cosmetic": {"t": 0.5, "offset": 10}, "measure_only": false},
        {"type": "point_line_distance", "point": "P", "line": "AB", "distance": -5},
        {"type": "point_on_line", "point": "P", "line": "AB"},
        {"type": "point_on_arc", "point": "P", "arc": "R"}
      ]
    }

Constraint ids are optional.
"""

from __future__ import annotations

import json
import logging
import numbers
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .geometry import XY
from .sketch import (
    Axis,
    ConstraintAxisAligned,
    ConstraintFixed,
    ConstraintPointLineDistance,
    ConstraintPointOnArc,
    ConstraintPointOnLine,
    ConstraintPointPointDistance,
    Cosmetic,
    ElementId,
    Sketch,
    SketchArc,
    SketchArena,
    SketchLine,
    SketchPoint,
)

logger = logging.getLogger(__name__)


class SketchFormatError(ValueError):
    """Raised when a sketch document cannot be mapped onto a sketch."""


def _coerce_float(value: object, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise SketchFormatError(f"{where}: expected a number, got {value!r}")
    return float(value)


def _coerce_xy(value: object, where: str) -> XY:
    if isinstance(value, Mapping):
        if "x" not in value or "y" not in value:
            raise SketchFormatError(f"{where}: position needs 'x' and 'y'")
        return XY(_coerce_float(value["x"], where), _coerce_float(value["y"], where))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return XY(_coerce_float(value[0], where), _coerce_float(value[1], where))
    raise SketchFormatError(f"{where}: expected a position, got {value!r}")


def _entries(document: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    entries = document.get(key, [])
    if not isinstance(entries, list) or not all(isinstance(entry, Mapping) for entry in entries):
        raise SketchFormatError(f"'{key}' must be a list of objects")
    return entries


_KIND_NAMES = {SketchPoint: "a point", SketchLine: "a line", SketchArc: "an arc"}


class _Loader:
    def __init__(self) -> None:
        self.arena = SketchArena()
        self.handles: Dict[str, ElementId] = {}

    def label_of(self, entry: Mapping[str, Any], where: str, *, required: bool) -> Optional[str]:
        label = entry.get("id")
        if label is None:
            if required:
                raise SketchFormatError(f"{where}: missing 'id'")
            return None
        label = str(label)
        if label in self.handles:
            raise SketchFormatError(f"{where}: duplicate id {label!r}")
        return label

    def register(self, label: Optional[str], handle: ElementId) -> None:
        if label is not None:
            self.handles[label] = handle

    def ref(
        self, entry: Mapping[str, Any], key: str, where: str, kind: type = SketchPoint
    ) -> ElementId:
        if key not in entry:
            raise SketchFormatError(f"{where}: missing '{key}'")
        label = str(entry[key])
        try:
            handle = self.handles[label]
        except KeyError:
            raise SketchFormatError(f"{where}: '{key}' refers to unknown id {label!r}") from None
        if self.arena.kind_of(handle) is not kind:
            raise SketchFormatError(f"{where}: '{key}' must refer to {_KIND_NAMES[kind]}, got {label!r}")
        return handle

    def cosmetic(self, entry: Mapping[str, Any], where: str) -> Cosmetic:
        raw = entry.get("cosmetic")
        if raw is None:
            return Cosmetic()
        if not isinstance(raw, Mapping):
            raise SketchFormatError(f"{where}: 'cosmetic' must be an object")
        return Cosmetic(
            t=_coerce_float(raw.get("t", 0.5), where),
            offset=_coerce_float(raw.get("offset", 0.0), where),
        )

    def constraint(self, entry: Mapping[str, Any], where: str) -> None:
        kind = entry.get("type")
        label = self.label_of(entry, where, required=False)
        arena = self.arena
        if kind == "fixed":
            point = self.ref(entry, "point", where)
            position = _coerce_xy(entry["position"], where) if "position" in entry else None
            handle = arena.fix(point, position, label=label)
        elif kind == "axis_aligned":
            try:
                axis = Axis(entry.get("axis"))
            except ValueError:
                raise SketchFormatError(f"{where}: unknown axis {entry.get('axis')!r}") from None
            handle = arena.axis_aligned(
                axis, self.ref(entry, "point_a", where), self.ref(entry, "point_b", where), label=label
            )
        elif kind == "point_point_distance":
            handle = arena.distance(
                self.ref(entry, "point_a", where),
                self.ref(entry, "point_b", where),
                _coerce_float(entry.get("distance"), where),
                cosmetic=self.cosmetic(entry, where),
                measure_only=bool(entry.get("measure_only", False)),
                label=label,
            )
        elif kind == "point_line_distance":
            handle = arena.point_line_distance(
                self.ref(entry, "point", where),
                self.ref(entry, "line", where, SketchLine),
                _coerce_float(entry.get("distance"), where),
                cosmetic=self.cosmetic(entry, where),
                measure_only=bool(entry.get("measure_only", False)),
                label=label,
            )
        elif kind == "point_on_line":
            handle = arena.point_on_line(
                self.ref(entry, "point", where), self.ref(entry, "line", where, SketchLine), label=label
            )
        elif kind == "point_on_arc":
            handle = arena.point_on_arc(
                self.ref(entry, "point", where), self.ref(entry, "arc", where, SketchArc), label=label
            )
        else:
            raise SketchFormatError(f"{where}: unknown constraint type {kind!r}")
        self.register(label, handle)


def load_sketch(document: Mapping[str, Any]) -> Sketch:
    """Build a :class:`Sketch` from a decoded JSON document."""

    if not isinstance(document, Mapping):
        raise SketchFormatError("sketch document must be a JSON object")

    loader = _Loader()
    arena = loader.arena

    for idx, entry in enumerate(_entries(document, "points")):
        where = f"points[{idx}]"
        label = loader.label_of(entry, where, required=True)
        if "position" in entry:
            x, y = _coerce_xy(entry["position"], where)
        else:
            x, y = _coerce_float(entry.get("x"), where), _coerce_float(entry.get("y"), where)
        loader.register(label, arena.add_point(x, y, label=label))

    for idx, entry in enumerate(_entries(document, "lines")):
        where = f"lines[{idx}]"
        label = loader.label_of(entry, where, required=True)
        handle = arena.add_line(
            loader.ref(entry, "endpoint_a", where), loader.ref(entry, "endpoint_b", where), label=label
        )
        loader.register(label, handle)

    for idx, entry in enumerate(_entries(document, "arcs")):
        where = f"arcs[{idx}]"
        label = loader.label_of(entry, where, required=True)
        handle = arena.add_arc(
            loader.ref(entry, "endpoint_a", where),
            loader.ref(entry, "endpoint_b", where),
            loader.ref(entry, "center", where),
            label=label,
        )
        loader.register(label, handle)

    for idx, entry in enumerate(_entries(document, "constraints")):
        loader.constraint(entry, f"constraints[{idx}]")

    sketch = arena.build()
    logger.info("Loaded sketch with %d element(s)", len(sketch))
    return sketch


def _xy(position: XY) -> Dict[str, float]:
    return {"x": float(position[0]), "y": float(position[1])}


def _cosmetic(cosmetic: Cosmetic) -> Dict[str, float]:
    return {"t": cosmetic.t, "offset": cosmetic.offset}


def dump_sketch(sketch: Sketch) -> Dict[str, Any]:
    """Return the JSON document describing ``sketch``."""

    label = sketch.label
    document: Dict[str, List[Dict[str, Any]]] = {"points": [], "lines": [], "arcs": [], "constraints": []}
    for e in sketch.elements:
        if isinstance(e, SketchPoint):
            document["points"].append({"id": label(e.id), **_xy(e.position)})
        elif isinstance(e, SketchLine):
            document["lines"].append(
                {"id": label(e.id), "endpoint_a": label(e.endpoint_a), "endpoint_b": label(e.endpoint_b)}
            )
        elif isinstance(e, SketchArc):
            document["arcs"].append(
                {
                    "id": label(e.id),
                    "endpoint_a": label(e.endpoint_a),
                    "endpoint_b": label(e.endpoint_b),
                    "center": label(e.center),
                }
            )
        elif isinstance(e, ConstraintFixed):
            document["constraints"].append(
                {"id": label(e.id), "type": "fixed", "point": label(e.point), "position": _xy(e.position)}
            )
        elif isinstance(e, ConstraintAxisAligned):
            document["constraints"].append(
                {
                    "id": label(e.id),
                    "type": "axis_aligned",
                    "axis": e.axis.value,
                    "point_a": label(e.point_a),
                    "point_b": label(e.point_b),
                }
            )
        elif isinstance(e, ConstraintPointPointDistance):
            document["constraints"].append(
                {
                    "id": label(e.id),
                    "type": "point_point_distance",
                    "point_a": label(e.point_a),
                    "point_b": label(e.point_b),
                    "distance": e.distance,
                    "cosmetic": _cosmetic(e.cosmetic),
                    "measure_only": e.measure_only,
                }
            )
        elif isinstance(e, ConstraintPointLineDistance):
            document["constraints"].append(
                {
                    "id": label(e.id),
                    "type": "point_line_distance",
                    "point": label(e.point),
                    "line": label(e.line),
                    "distance": e.distance,
                    "cosmetic": _cosmetic(e.cosmetic),
                    "measure_only": e.measure_only,
                }
            )
        elif isinstance(e, ConstraintPointOnLine):
            document["constraints"].append(
                {"id": label(e.id), "type": "point_on_line", "point": label(e.point), "line": label(e.line)}
            )
        elif isinstance(e, ConstraintPointOnArc):
            document["constraints"].append(
                {"id": label(e.id), "type": "point_on_arc", "point": label(e.point), "arc": label(e.arc)}
            )
    return document


def read_sketch(path: Union[str, Path]) -> Sketch:
    with open(path, encoding="utf-8") as fh:
        try:
            document = json.load(fh)
        except json.JSONDecodeError as exc:
            raise SketchFormatError(f"{path}: invalid JSON ({exc})") from exc
    return load_sketch(document)


def write_sketch(sketch: Sketch, path: Union[str, Path]) -> None:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(dump_sketch(sketch), indent=2) + "\n", encoding="utf-8")


__all__ = ["SketchFormatError", "dump_sketch", "load_sketch", "read_sketch", "write_sketch"]
