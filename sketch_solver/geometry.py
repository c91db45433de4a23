"""Pure 2D vector, line, circle and arc helpers used by the sketch solver."""

from __future__ import annotations

import math
from typing import List, NamedTuple, Optional, Tuple

EPSILON = 1e-5


class XY(NamedTuple):
    x: float
    y: float


class LineSpec(NamedTuple):
    """Infinite line (or segment, depending on the caller) through ``a`` and ``b``."""

    a: XY
    b: XY


class CircleSpec(NamedTuple):
    center: XY
    radius: float


class ArcSpec(NamedTuple):
    """Arc from ``a`` to ``b`` around ``center``, always taken the short way."""

    a: XY
    b: XY
    center: XY


class Projection(NamedTuple):
    point: XY
    t: float


ORIGIN = XY(0.0, 0.0)


def distance(a: XY, b: XY) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def dot_product(p: XY, q: XY) -> float:
    return p[0] * q[0] + p[1] * q[1]


def cross_product(p: XY, q: XY) -> float:
    return p[0] * q[1] - p[1] * q[0]


def point_add(a: XY, b: XY) -> XY:
    return XY(a[0] + b[0], a[1] + b[1])


def point_subtract(a: XY, b: XY) -> XY:
    return XY(a[0] - b[0], a[1] - b[1])


def point_scale(p: XY, k: float) -> XY:
    return XY(p[0] * k, p[1] * k)


def point_normalize(p: XY) -> XY:
    """Return ``p`` scaled to unit length.

    A vector shorter than :data:`EPSILON` has no direction; the zero vector is
    returned instead of dividing by (almost) zero.
    """

    length = math.hypot(p[0], p[1])
    if length < EPSILON:
        return ORIGIN
    return XY(p[0] / length, p[1] / length)


def midpoint(a: XY, b: XY) -> XY:
    return XY((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5)


def rotate90(v: XY) -> XY:
    return XY(-v[1], v[0])


def project_onto_line(p: XY, line: LineSpec) -> Projection:
    """Project ``p`` onto the infinite line through ``line.a`` and ``line.b``.

    ``t`` is the parametric position of the projection, ``0`` at ``a`` and ``1``
    at ``b``. A degenerate line projects everything onto ``a`` with ``t == 0``.
    """

    a, b = line
    length_ab = distance(a, b)
    if length_ab < EPSILON:
        return Projection(XY(a[0], a[1]), 0.0)
    direction = point_normalize(point_subtract(b, a))
    along = dot_product(point_subtract(p, a), direction)
    return Projection(point_add(a, point_scale(direction, along)), along / length_ab)


def distance_to_segment(p: XY, line: LineSpec) -> float:
    a, b = line
    if distance(a, b) < EPSILON:
        return distance(p, a)
    projection = project_onto_line(p, line)
    if 0.0 <= projection.t <= 1.0:
        return distance(p, projection.point)
    if projection.t < 0.0:
        return distance(p, a)
    return distance(p, b)


def line_circle_intersection(line: LineSpec, circle: CircleSpec) -> List[XY]:
    """Intersect an infinite line with a circle.

    Returns no points, one point when the line is tangent, or two points.
    """

    a, b = line
    if distance(a, b) < EPSILON:
        return []
    direction = point_normalize(point_subtract(b, a))
    offset = point_subtract(a, circle.center)
    # |offset + t * direction|^2 = r^2 with a unit direction
    half_b = dot_product(offset, direction)
    c = dot_product(offset, offset) - circle.radius * circle.radius
    discriminant = half_b * half_b - c
    if abs(discriminant) < EPSILON:
        return [point_add(a, point_scale(direction, -half_b))]
    if discriminant < 0.0:
        return []
    root = math.sqrt(discriminant)
    return [
        point_add(a, point_scale(direction, -half_b - root)),
        point_add(a, point_scale(direction, -half_b + root)),
    ]


def circle_circle_intersection(first: CircleSpec, second: CircleSpec) -> List[XY]:
    """Intersect two circles.

    Coincident centers are degenerate and yield no points. Circles that are too
    far apart, or nested without touching, also yield no points. Tangent
    circles yield a single point.
    """

    center_gap = distance(first.center, second.center)
    if center_gap < EPSILON:
        return []
    r1 = first.radius
    r2 = second.radius
    if center_gap > r1 + r2 + EPSILON:
        return []
    if center_gap < abs(r1 - r2) - EPSILON:
        return []

    forward = point_normalize(point_subtract(second.center, first.center))
    right = XY(forward[1], -forward[0])
    along = (center_gap * center_gap + r1 * r1 - r2 * r2) / (2.0 * center_gap)
    base = point_add(first.center, point_scale(forward, along))

    external_tangent = abs(center_gap - (r1 + r2)) < EPSILON
    internal_tangent = abs(center_gap - abs(r1 - r2)) < EPSILON
    height_sq = r1 * r1 - along * along
    if external_tangent or internal_tangent or height_sq <= 0.0:
        return [base]

    height = math.sqrt(height_sq)
    return [
        point_add(base, point_scale(right, height)),
        point_add(base, point_scale(right, -height)),
    ]


def _line_line_parameters(first: LineSpec, second: LineSpec) -> Optional[Tuple[float, float]]:
    d1 = point_subtract(first.b, first.a)
    d2 = point_subtract(second.b, second.a)
    if math.hypot(*d1) < EPSILON or math.hypot(*d2) < EPSILON:
        return None
    if abs(cross_product(point_normalize(d1), point_normalize(d2))) < EPSILON:
        return None
    denom = cross_product(d1, d2)
    diff = point_subtract(second.a, first.a)
    return cross_product(diff, d2) / denom, cross_product(diff, d1) / denom


def line_line_intersection(first: LineSpec, second: LineSpec) -> Optional[XY]:
    """Return the intersection of two infinite lines, or ``None`` when parallel."""

    params = _line_line_parameters(first, second)
    if params is None:
        return None
    t_first, _ = params
    return point_add(first.a, point_scale(point_subtract(first.b, first.a), t_first))


def segment_segment_intersection(first: LineSpec, second: LineSpec) -> Optional[XY]:
    """Return the point where two segments cross, or ``None``.

    A crossing within :data:`EPSILON` of an endpoint snaps to that endpoint.
    """

    params = _line_line_parameters(first, second)
    if params is None:
        return None
    t_first, t_second = params
    point = point_add(first.a, point_scale(point_subtract(first.b, first.a), t_first))

    for endpoint in (first.a, first.b, second.a, second.b):
        if distance(point, endpoint) < EPSILON:
            point = XY(endpoint[0], endpoint[1])
            break

    slack_first = EPSILON / distance(first.a, first.b)
    slack_second = EPSILON / distance(second.a, second.b)
    if not -slack_first <= t_first <= 1.0 + slack_first:
        return None
    if not -slack_second <= t_second <= 1.0 + slack_second:
        return None
    return point


def adjusted_arc_center(a: XY, b: XY, center: XY) -> XY:
    """Move ``center`` onto the perpendicular bisector of ``a``-``b``.

    Arcs coming out of an unfinished solve can have endpoints at slightly
    different radii; the adjusted center is equidistant from both.
    """

    if distance(a, b) < EPSILON:
        return center
    mid = midpoint(a, b)
    bisector = LineSpec(mid, point_add(mid, rotate90(point_subtract(b, a))))
    return project_onto_line(center, bisector).point


def _wrap_angle(angle: float) -> float:
    while angle <= -math.pi:
        angle += 2.0 * math.pi
    while angle > math.pi:
        angle -= 2.0 * math.pi
    return angle


def distance_to_arc(p: XY, arc: ArcSpec) -> float:
    center = adjusted_arc_center(arc.a, arc.b, arc.center)
    radius = distance(center, arc.a)

    angle_a = math.atan2(arc.a[1] - center[1], arc.a[0] - center[0])
    angle_b = math.atan2(arc.b[1] - center[1], arc.b[0] - center[0])
    angle_p = math.atan2(p[1] - center[1], p[0] - center[0])

    sweep = _wrap_angle(angle_b - angle_a)
    relative = _wrap_angle(angle_p - angle_a)
    if sweep >= 0.0:
        within = 0.0 <= relative <= sweep
    else:
        within = sweep <= relative <= 0.0

    if within:
        return abs(distance(p, center) - radius)
    return min(distance(p, arc.a), distance(p, arc.b))


def dimension_label_parameters(a: XY, b: XY, label_position: XY) -> Tuple[float, float]:
    """Return ``(t, offset)`` placing ``label_position`` relative to ``a``-``b``."""

    direction = point_normalize(point_subtract(b, a))
    perpendicular = rotate90(direction)
    relative = point_subtract(label_position, a)
    length = distance(a, b)
    t = dot_product(direction, relative) / length if length >= EPSILON else 0.0
    offset = dot_product(perpendicular, relative)
    return t, offset


def dimension_label_position(a: XY, b: XY, t: float, offset: float) -> XY:
    delta = point_subtract(b, a)
    perpendicular = point_normalize(rotate90(delta))
    return point_add(point_add(a, point_scale(delta, t)), point_scale(perpendicular, offset))


def point_in_aabb(point: XY, corner_a: XY, corner_b: XY, *, slack: float = 0.0) -> bool:
    min_x, max_x = min(corner_a[0], corner_b[0]), max(corner_a[0], corner_b[0])
    min_y, max_y = min(corner_a[1], corner_b[1]), max(corner_a[1], corner_b[1])
    return (
        min_x - slack <= point[0] <= max_x + slack
        and min_y - slack <= point[1] <= max_y + slack
    )


__all__ = [
    "ArcSpec",
    "CircleSpec",
    "EPSILON",
    "LineSpec",
    "ORIGIN",
    "Projection",
    "XY",
    "adjusted_arc_center",
    "circle_circle_intersection",
    "cross_product",
    "dimension_label_parameters",
    "dimension_label_position",
    "distance",
    "distance_to_arc",
    "distance_to_segment",
    "dot_product",
    "line_circle_intersection",
    "line_line_intersection",
    "midpoint",
    "point_add",
    "point_in_aabb",
    "point_normalize",
    "point_scale",
    "point_subtract",
    "project_onto_line",
    "rotate90",
    "segment_segment_intersection",
]
