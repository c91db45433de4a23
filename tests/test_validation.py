import math

import pytest

from sketch_solver.geometry import XY
from sketch_solver.sketch import (
    ConstraintPointOnLine,
    ConstraintPointPointDistance,
    Sketch,
    SketchArena,
    SketchLine,
    SketchPoint,
)
from sketch_solver.validate import ValidationError, validate


def _square():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(10.0, 0.0, label="B")
    c = arena.add_point(10.0, 10.0, label="C")
    o = arena.add_point(5.0, 5.0, label="O")
    ab = arena.add_line(a, b, label="AB")
    arc = arena.add_arc(b, c, o, label="BC")
    arena.fix(a)
    arena.horizontal(a, b)
    arena.distance(a, b, 10.0)
    arena.point_line_distance(c, ab, 10.0)
    arena.point_on_line(o, ab)
    arena.point_on_arc(o, arc)
    return arena


def test_validate_accepts_valid_sketch():
    validate(_square().build())


def test_dangling_line_endpoint():
    sketch = Sketch((SketchPoint(0, XY(0.0, 0.0)), SketchLine(1, 0, 5)), labels={1: "L"})

    with pytest.raises(ValidationError) as exc:
        validate(sketch)

    assert "[SketchLine L] endpoint_b refers to missing element #5" in str(exc.value)


def test_line_endpoints_must_differ():
    sketch = Sketch((SketchPoint(0, XY(0.0, 0.0)), SketchLine(1, 0, 0)))

    with pytest.raises(ValidationError) as exc:
        validate(sketch)

    assert "endpoints must be distinct" in str(exc.value)


def test_reference_must_have_the_right_kind():
    arena = _square()
    sketch = arena.build()
    a = next(p.id for p in sketch.points() if sketch.label(p.id) == "A")
    b = next(p.id for p in sketch.points() if sketch.label(p.id) == "B")
    bad = sketch.with_elements(sketch.elements + (ConstraintPointOnLine(99, a, b),))

    with pytest.raises(ValidationError) as exc:
        validate(bad)

    assert "line must be a SketchLine, got SketchPoint B" in str(exc.value)


@pytest.mark.parametrize("value", [-1.0, math.nan, math.inf])
def test_point_distance_must_be_finite_and_non_negative(value):
    sketch = Sketch(
        (
            SketchPoint(0, XY(0.0, 0.0)),
            SketchPoint(1, XY(1.0, 0.0)),
            ConstraintPointPointDistance(2, 0, 1, value),
        )
    )

    with pytest.raises(ValidationError) as exc:
        validate(sketch)

    assert "distance must be" in str(exc.value)


def test_point_position_must_be_finite():
    sketch = Sketch((SketchPoint(0, XY(math.nan, 0.0)),))

    with pytest.raises(ValidationError):
        validate(sketch)


def test_duplicate_ids_are_rejected():
    sketch = Sketch((SketchPoint(0, XY(0.0, 0.0)), SketchPoint(0, XY(1.0, 1.0))), labels={0: "A"})

    with pytest.raises(ValidationError) as exc:
        validate(sketch)

    assert "duplicate element ids: A" in str(exc.value)
