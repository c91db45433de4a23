from typing import Tuple

from .facts import (
    CircleFact,
    CollinearFact,
    DistanceFact,
    EquidistantFact,
    Fact,
    FixedFact,
    HorizontalFact,
    LineFact,
    PointLineDistanceFact,
    VerticalFact,
)
from .sketch import (
    ConstraintAxisAligned,
    ConstraintFixed,
    ConstraintPointLineDistance,
    ConstraintPointOnArc,
    ConstraintPointOnLine,
    ConstraintPointPointDistance,
    Sketch,
    SketchArc,
    SketchElement,
    SketchLine,
    SketchPoint,
)


def xy_str(position: Tuple[float, float]) -> str:
    return f"({position[0]:.6g}, {position[1]:.6g})"


def _dimension_suffix(measure_only: bool) -> str:
    return " [measure-only]" if measure_only else ""


def format_element(sketch: Sketch, element: SketchElement) -> str:
    """Return a single-line representation of ``element``."""

    name = sketch.label
    e = element
    if isinstance(e, SketchPoint):
        return f"point {name(e.id)} at {xy_str(e.position)}"
    if isinstance(e, SketchLine):
        return f"line {name(e.id)} {name(e.endpoint_a)}-{name(e.endpoint_b)}"
    if isinstance(e, SketchArc):
        return f"arc {name(e.id)} {name(e.endpoint_a)}-{name(e.endpoint_b)} center {name(e.center)}"
    if isinstance(e, ConstraintFixed):
        return f"fixed {name(e.point)} at {xy_str(e.position)}"
    if isinstance(e, ConstraintAxisAligned):
        return f"{e.axis.value} {name(e.point_a)}-{name(e.point_b)}"
    if isinstance(e, ConstraintPointPointDistance):
        return (
            f"distance {name(e.point_a)}-{name(e.point_b)} = {e.distance:.6g}"
            f"{_dimension_suffix(e.measure_only)}"
        )
    if isinstance(e, ConstraintPointLineDistance):
        return (
            f"distance {name(e.point)} to line {name(e.line)} = {e.distance:.6g}"
            f"{_dimension_suffix(e.measure_only)}"
        )
    if isinstance(e, ConstraintPointOnLine):
        return f"point {name(e.point)} on line {name(e.line)}"
    if isinstance(e, ConstraintPointOnArc):
        return f"point {name(e.point)} on arc {name(e.arc)}"
    raise ValueError(f"unknown sketch element {type(e).__name__}")


def print_sketch(sketch: Sketch) -> str:
    return "\n".join(format_element(sketch, element) for element in sketch.elements) + "\n"


def format_fact(sketch: Sketch, fact: Fact) -> str:
    name = sketch.label
    if isinstance(fact, FixedFact):
        return f"fixed {name(fact.point)} at {xy_str(fact.position)}"
    if isinstance(fact, LineFact):
        return f"{name(fact.point)} on line {xy_str(fact.a)}-{xy_str(fact.b)}"
    if isinstance(fact, CircleFact):
        return f"{name(fact.point)} on circle center {xy_str(fact.center)} radius {fact.radius:.6g}"
    if isinstance(fact, VerticalFact):
        return f"vertical {name(fact.point1)}-{name(fact.point2)}"
    if isinstance(fact, HorizontalFact):
        return f"horizontal {name(fact.point1)}-{name(fact.point2)}"
    if isinstance(fact, DistanceFact):
        return f"distance {name(fact.point1)}-{name(fact.point2)} = {fact.distance:.6g}"
    if isinstance(fact, PointLineDistanceFact):
        return (
            f"distance {name(fact.point)} to {name(fact.line1)}->{name(fact.line2)} = {fact.distance:.6g}"
        )
    if isinstance(fact, CollinearFact):
        return "collinear (" + ", ".join(name(p) for p in fact.points) + ")"
    if isinstance(fact, EquidistantFact):
        return f"equidistant from {name(fact.center)}: {name(fact.point1)}, {name(fact.point2)}"
    raise ValueError(f"unknown fact {type(fact).__name__}")
