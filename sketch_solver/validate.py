import math
from collections import Counter
from typing import Iterable

from .sketch import (
    ConstraintAxisAligned,
    ConstraintFixed,
    ConstraintPointLineDistance,
    ConstraintPointOnArc,
    ConstraintPointOnLine,
    ConstraintPointPointDistance,
    ElementId,
    Sketch,
    SketchArc,
    SketchElement,
    SketchLine,
    SketchPoint,
)


class ValidationError(Exception):
    pass


def _where(sketch: Sketch, element: SketchElement) -> str:
    return f'[{type(element).__name__} {sketch.label(element.id)}]'


def _require(sketch: Sketch, element: SketchElement, ref: ElementId, kind: type, role: str) -> None:
    target = sketch.get(ref)
    if target is None:
        raise ValidationError(f'{_where(sketch, element)} {role} refers to missing element {sketch.label(ref)}')
    if not isinstance(target, kind):
        raise ValidationError(
            f'{_where(sketch, element)} {role} must be a {kind.__name__}, got {type(target).__name__} {sketch.label(ref)}'
        )


def _require_points(sketch: Sketch, element: SketchElement, refs: Iterable[tuple]) -> None:
    for role, ref in refs:
        _require(sketch, element, ref, SketchPoint, role)


def _require_finite(sketch: Sketch, element: SketchElement, name: str, *values: float) -> None:
    if not all(math.isfinite(v) for v in values):
        raise ValidationError(f'{_where(sketch, element)} {name} must be finite')


def validate(sketch: Sketch) -> None:
    """Check referential integrity of ``sketch`` before it is handed to the solver."""

    counts = Counter(element.id for element in sketch.elements)
    duplicated = sorted(handle for handle, count in counts.items() if count > 1)
    if duplicated:
        raise ValidationError('duplicate element ids: ' + ', '.join(sketch.label(h) for h in duplicated))

    for e in sketch.elements:
        if isinstance(e, SketchPoint):
            _require_finite(sketch, e, 'position', *e.position)
        elif isinstance(e, SketchLine):
            _require_points(sketch, e, [('endpoint_a', e.endpoint_a), ('endpoint_b', e.endpoint_b)])
            if e.endpoint_a == e.endpoint_b:
                raise ValidationError(f'{_where(sketch, e)} endpoints must be distinct')
        elif isinstance(e, SketchArc):
            _require_points(
                sketch, e, [('endpoint_a', e.endpoint_a), ('endpoint_b', e.endpoint_b), ('center', e.center)]
            )
        elif isinstance(e, ConstraintFixed):
            _require_points(sketch, e, [('point', e.point)])
            _require_finite(sketch, e, 'position', *e.position)
        elif isinstance(e, ConstraintAxisAligned):
            _require_points(sketch, e, [('point_a', e.point_a), ('point_b', e.point_b)])
        elif isinstance(e, ConstraintPointPointDistance):
            _require_points(sketch, e, [('point_a', e.point_a), ('point_b', e.point_b)])
            _require_finite(sketch, e, 'distance', e.distance)
            if e.distance < 0:
                raise ValidationError(f'{_where(sketch, e)} distance must be non-negative, got {e.distance}')
        elif isinstance(e, ConstraintPointLineDistance):
            _require_points(sketch, e, [('point', e.point)])
            _require(sketch, e, e.line, SketchLine, 'line')
            _require_finite(sketch, e, 'distance', e.distance)
        elif isinstance(e, ConstraintPointOnLine):
            _require_points(sketch, e, [('point', e.point)])
            _require(sketch, e, e.line, SketchLine, 'line')
        elif isinstance(e, ConstraintPointOnArc):
            _require_points(sketch, e, [('point', e.point)])
            _require(sketch, e, e.arc, SketchArc, 'arc')
        else:
            raise ValidationError(f'unsupported sketch element {type(e).__name__}')
