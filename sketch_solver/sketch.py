"""Sketch snapshot: points, lines, arcs and constraint elements keyed by handles.

Handles are plain integers allocated by :class:`SketchArena`. String names only
exist in :attr:`Sketch.labels`, which the JSON boundary reads and writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from .geometry import XY

ElementId = int
PointId = int
LineId = int
ArcId = int
ConstraintId = int


class Axis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Cosmetic:
    """Placement of a dimension label; never read by the solver."""

    t: float = 0.5
    offset: float = 0.0


@dataclass(frozen=True)
class SketchPoint:
    id: PointId
    position: XY


@dataclass(frozen=True)
class SketchLine:
    id: LineId
    endpoint_a: PointId
    endpoint_b: PointId


@dataclass(frozen=True)
class SketchArc:
    """Arc between two endpoints around ``center``.

    The endpoints are implicitly equidistant from the center.
    """

    id: ArcId
    endpoint_a: PointId
    endpoint_b: PointId
    center: PointId


@dataclass(frozen=True)
class ConstraintFixed:
    id: ConstraintId
    point: PointId
    position: XY


@dataclass(frozen=True)
class ConstraintAxisAligned:
    id: ConstraintId
    axis: Axis
    point_a: PointId
    point_b: PointId


@dataclass(frozen=True)
class ConstraintPointPointDistance:
    id: ConstraintId
    point_a: PointId
    point_b: PointId
    distance: float
    cosmetic: Cosmetic = Cosmetic()
    measure_only: bool = False


@dataclass(frozen=True)
class ConstraintPointLineDistance:
    """Signed perpendicular distance from ``point`` to ``line``."""

    id: ConstraintId
    point: PointId
    line: LineId
    distance: float
    cosmetic: Cosmetic = Cosmetic()
    measure_only: bool = False


@dataclass(frozen=True)
class ConstraintPointOnLine:
    id: ConstraintId
    point: PointId
    line: LineId


@dataclass(frozen=True)
class ConstraintPointOnArc:
    id: ConstraintId
    point: PointId
    arc: ArcId


Constraint = Union[
    ConstraintFixed,
    ConstraintAxisAligned,
    ConstraintPointPointDistance,
    ConstraintPointLineDistance,
    ConstraintPointOnLine,
    ConstraintPointOnArc,
]

SketchElement = Union[SketchPoint, SketchLine, SketchArc, Constraint]

CONSTRAINT_TYPES: Tuple[type, ...] = (
    ConstraintFixed,
    ConstraintAxisAligned,
    ConstraintPointPointDistance,
    ConstraintPointLineDistance,
    ConstraintPointOnLine,
    ConstraintPointOnArc,
)

DIMENSION_TYPES: Tuple[type, ...] = (ConstraintPointPointDistance, ConstraintPointLineDistance)

E = TypeVar("E")


@dataclass(frozen=True)
class Sketch:
    """Immutable snapshot of every element in a sketch."""

    elements: Tuple[SketchElement, ...] = ()
    labels: Mapping[ElementId, str] = field(default_factory=dict, compare=False)

    @cached_property
    def _index(self) -> Dict[ElementId, SketchElement]:
        return {element.id: element for element in self.elements}

    def __iter__(self) -> Iterator[SketchElement]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._index

    def get(self, element_id: ElementId) -> Optional[SketchElement]:
        return self._index.get(element_id)

    def element(self, element_id: ElementId, kind: Optional[Type[E]] = None) -> E:
        try:
            found = self._index[element_id]
        except KeyError as exc:
            raise KeyError(f"the sketch has no element {self.label(element_id)!r}") from exc
        if kind is not None and not isinstance(found, kind):
            raise TypeError(
                f"element {self.label(element_id)!r} is a {type(found).__name__}, expected {kind.__name__}"
            )
        return found  # type: ignore[return-value]

    def elements_of(self, kind: Union[Type[E], Tuple[type, ...]]) -> List[E]:
        return [element for element in self.elements if isinstance(element, kind)]  # type: ignore[misc]

    def points(self) -> List[SketchPoint]:
        return self.elements_of(SketchPoint)

    def lines(self) -> List[SketchLine]:
        return self.elements_of(SketchLine)

    def arcs(self) -> List[SketchArc]:
        return self.elements_of(SketchArc)

    def constraints(self) -> List[Constraint]:
        return self.elements_of(CONSTRAINT_TYPES)

    def point_position(self, point: PointId) -> XY:
        return self.element(point, SketchPoint).position

    def line_endpoints(self, line: LineId) -> Tuple[PointId, PointId]:
        found = self.element(line, SketchLine)
        return found.endpoint_a, found.endpoint_b

    def label(self, element_id: ElementId) -> str:
        return self.labels.get(element_id, f"#{element_id}")

    def with_elements(self, elements: Iterable[SketchElement]) -> "Sketch":
        return replace(self, elements=tuple(elements))

    def with_point_positions(self, positions: Mapping[PointId, XY]) -> "Sketch":
        """Return a copy where every point listed in ``positions`` is moved."""

        return self.with_elements(
            replace(element, position=XY(*positions[element.id]))
            if isinstance(element, SketchPoint) and element.id in positions
            else element
            for element in self.elements
        )


class SketchArena:
    """Mutable builder that hands out monotonically increasing handles."""

    def __init__(self, sketch: Optional[Sketch] = None) -> None:
        self._elements: Dict[ElementId, SketchElement] = {}
        self._labels: Dict[ElementId, str] = {}
        self._next_id = 0
        if sketch is not None:
            for element in sketch.elements:
                self._elements[element.id] = element
                self._next_id = max(self._next_id, element.id + 1)
            self._labels.update(sketch.labels)

    def _allocate(self, label: Optional[str]) -> ElementId:
        handle = self._next_id
        self._next_id += 1
        if label is not None:
            self._labels[handle] = label
        return handle

    def _store(self, element: SketchElement) -> ElementId:
        self._elements[element.id] = element
        return element.id

    def kind_of(self, element_id: ElementId) -> type:
        return type(self._elements[element_id])

    def position_of(self, point: PointId) -> XY:
        element = self._elements[point]
        if not isinstance(element, SketchPoint):
            raise TypeError(f"element #{point} is not a point")
        return element.position

    def add_point(self, x: float, y: float, *, label: Optional[str] = None) -> PointId:
        return self._store(SketchPoint(self._allocate(label), XY(float(x), float(y))))

    def move_point(self, point: PointId, x: float, y: float) -> None:
        self._elements[point] = SketchPoint(point, XY(float(x), float(y)))

    def add_line(self, endpoint_a: PointId, endpoint_b: PointId, *, label: Optional[str] = None) -> LineId:
        return self._store(SketchLine(self._allocate(label), endpoint_a, endpoint_b))

    def add_arc(
        self,
        endpoint_a: PointId,
        endpoint_b: PointId,
        center: PointId,
        *,
        label: Optional[str] = None,
    ) -> ArcId:
        return self._store(SketchArc(self._allocate(label), endpoint_a, endpoint_b, center))

    def fix(
        self,
        point: PointId,
        position: Optional[Tuple[float, float]] = None,
        *,
        label: Optional[str] = None,
    ) -> ConstraintId:
        """Pin ``point``; defaults to its current position."""

        target = self.position_of(point) if position is None else XY(float(position[0]), float(position[1]))
        return self._store(ConstraintFixed(self._allocate(label), point, target))

    def axis_aligned(
        self,
        axis: Union[Axis, str],
        point_a: PointId,
        point_b: PointId,
        *,
        label: Optional[str] = None,
    ) -> ConstraintId:
        return self._store(ConstraintAxisAligned(self._allocate(label), Axis(axis), point_a, point_b))

    def horizontal(self, point_a: PointId, point_b: PointId, *, label: Optional[str] = None) -> ConstraintId:
        return self.axis_aligned(Axis.HORIZONTAL, point_a, point_b, label=label)

    def vertical(self, point_a: PointId, point_b: PointId, *, label: Optional[str] = None) -> ConstraintId:
        return self.axis_aligned(Axis.VERTICAL, point_a, point_b, label=label)

    def distance(
        self,
        point_a: PointId,
        point_b: PointId,
        value: float,
        *,
        cosmetic: Cosmetic = Cosmetic(),
        measure_only: bool = False,
        label: Optional[str] = None,
    ) -> ConstraintId:
        return self._store(
            ConstraintPointPointDistance(
                self._allocate(label), point_a, point_b, float(value), cosmetic, measure_only
            )
        )

    def point_line_distance(
        self,
        point: PointId,
        line: LineId,
        value: float,
        *,
        cosmetic: Cosmetic = Cosmetic(),
        measure_only: bool = False,
        label: Optional[str] = None,
    ) -> ConstraintId:
        return self._store(
            ConstraintPointLineDistance(self._allocate(label), point, line, float(value), cosmetic, measure_only)
        )

    def point_on_line(self, point: PointId, line: LineId, *, label: Optional[str] = None) -> ConstraintId:
        return self._store(ConstraintPointOnLine(self._allocate(label), point, line))

    def point_on_arc(self, point: PointId, arc: ArcId, *, label: Optional[str] = None) -> ConstraintId:
        return self._store(ConstraintPointOnArc(self._allocate(label), point, arc))

    def remove(self, element_id: ElementId) -> None:
        self._elements.pop(element_id, None)
        self._labels.pop(element_id, None)

    def build(self) -> Sketch:
        return Sketch(elements=tuple(self._elements.values()), labels=dict(self._labels))


__all__ = [
    "ArcId",
    "Axis",
    "CONSTRAINT_TYPES",
    "Constraint",
    "ConstraintAxisAligned",
    "ConstraintFixed",
    "ConstraintId",
    "ConstraintPointLineDistance",
    "ConstraintPointOnArc",
    "ConstraintPointOnLine",
    "ConstraintPointPointDistance",
    "Cosmetic",
    "DIMENSION_TYPES",
    "ElementId",
    "LineId",
    "PointId",
    "Sketch",
    "SketchArc",
    "SketchArena",
    "SketchElement",
    "SketchLine",
    "SketchPoint",
]
