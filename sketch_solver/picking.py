"""Hit-testing of sketch geometry for selection tools."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .geometry import (
    EPSILON,
    XY,
    ArcSpec,
    LineSpec,
    dimension_label_position,
    distance,
    distance_to_arc,
    distance_to_segment,
    line_line_intersection,
    point_in_aabb,
    project_onto_line,
)
from .sketch import (
    ConstraintPointLineDistance,
    ConstraintPointPointDistance,
    ElementId,
    PointId,
    Sketch,
    SketchArc,
    SketchLine,
)

# Fraction of the visible view size within which geometry counts as "near".
SELECT_NEAR_THRESHOLD = 0.015


def _positions(sketch: Sketch) -> Dict[PointId, XY]:
    return {point.id: point.position for point in sketch.points()}


def dimension_handle_position(sketch: Sketch, dimension: ElementId) -> XY:
    """Where the label of a distance dimension is drawn."""

    positions = _positions(sketch)
    element = sketch.get(dimension)
    if isinstance(element, ConstraintPointPointDistance):
        a = positions[element.point_a]
        b = positions[element.point_b]
    elif isinstance(element, ConstraintPointLineDistance):
        line_a, line_b = sketch.line_endpoints(element.line)
        a = positions[element.point]
        b = project_onto_line(a, LineSpec(positions[line_a], positions[line_b])).point
    else:
        raise TypeError(f"element {sketch.label(dimension)!r} is not a distance dimension")
    return dimension_label_position(a, b, element.cosmetic.t, element.cosmetic.offset)


def _closest(candidates: List[Tuple[ElementId, float]], max_distance: float) -> Optional[ElementId]:
    best: Optional[Tuple[ElementId, float]] = None
    for element_id, gap in candidates:
        if gap > max_distance:
            continue
        if best is None or gap < best[1]:
            best = (element_id, gap)
    return best[0] if best is not None else None


def find_point_near(sketch: Sketch, near: XY, max_distance: float) -> Optional[PointId]:
    return _closest([(p.id, distance(near, p.position)) for p in sketch.points()], max_distance)


def find_closest_geometry_near(sketch: Sketch, near: XY, view_size: float) -> Optional[ElementId]:
    """Pick the element under the cursor.

    Dimension labels win over points, and points win over lines and arcs.
    """

    max_distance = view_size * SELECT_NEAR_THRESHOLD
    positions = _positions(sketch)

    dimensions = [
        (element.id, distance(near, dimension_handle_position(sketch, element.id)))
        for element in sketch.elements_of((ConstraintPointPointDistance, ConstraintPointLineDistance))
    ]
    found = _closest(dimensions, max_distance)
    if found is not None:
        return found

    found = find_point_near(sketch, near, max_distance)
    if found is not None:
        return found

    curves: List[Tuple[ElementId, float]] = []
    for element in sketch.elements:
        if isinstance(element, SketchLine):
            segment = LineSpec(positions[element.endpoint_a], positions[element.endpoint_b])
            curves.append((element.id, distance_to_segment(near, segment)))
        elif isinstance(element, SketchArc):
            arc = ArcSpec(positions[element.endpoint_a], positions[element.endpoint_b], positions[element.center])
            curves.append((element.id, distance_to_arc(near, arc)))
    return _closest(curves, max_distance)


def find_all_geometry_fully_within_box(sketch: Sketch, corner_a: XY, corner_b: XY) -> List[ElementId]:
    positions = _positions(sketch)
    inside: List[ElementId] = [
        point.id for point in sketch.points() if point_in_aabb(point.position, corner_a, corner_b)
    ]
    for line in sketch.lines():
        if point_in_aabb(positions[line.endpoint_a], corner_a, corner_b) and point_in_aabb(
            positions[line.endpoint_b], corner_a, corner_b
        ):
            inside.append(line.id)
    return inside


def _box_edges(corner_a: XY, corner_b: XY) -> List[LineSpec]:
    low = XY(min(corner_a[0], corner_b[0]), min(corner_a[1], corner_b[1]))
    high = XY(max(corner_a[0], corner_b[0]), max(corner_a[1], corner_b[1]))
    corners = [low, XY(low.x, high.y), high, XY(high.x, low.y)]
    return [LineSpec(corners[i], corners[(i + 1) % 4]) for i in range(4)]


def find_all_geometry_partially_within_box(sketch: Sketch, corner_a: XY, corner_b: XY) -> List[ElementId]:
    positions = _positions(sketch)
    inside: List[ElementId] = [
        point.id for point in sketch.points() if point_in_aabb(point.position, corner_a, corner_b)
    ]
    for line in sketch.lines():
        segment = LineSpec(positions[line.endpoint_a], positions[line.endpoint_b])
        if point_in_aabb(segment.a, corner_a, corner_b) or point_in_aabb(segment.b, corner_a, corner_b):
            inside.append(line.id)
            continue
        for edge in _box_edges(corner_a, corner_b):
            crossing = line_line_intersection(segment, edge)
            if crossing is None or distance_to_segment(crossing, segment) > EPSILON:
                continue
            if point_in_aabb(crossing, corner_a, corner_b, slack=EPSILON):
                inside.append(line.id)
                break
    return inside


__all__ = [
    "SELECT_NEAR_THRESHOLD",
    "dimension_handle_position",
    "find_all_geometry_fully_within_box",
    "find_all_geometry_partially_within_box",
    "find_closest_geometry_near",
    "find_point_near",
]
