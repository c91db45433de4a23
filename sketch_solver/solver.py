"""Forward-chaining constraint propagation over a sketch snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from .facts import (
    CircleFact,
    CollinearFact,
    DistanceFact,
    EquidistantFact,
    Fact,
    FactStore,
    FixedFact,
    HorizontalFact,
    LineFact,
    PointLineDistanceFact,
    VerticalFact,
)
from .geometry import (
    EPSILON,
    XY,
    CircleSpec,
    LineSpec,
    circle_circle_intersection,
    distance,
    line_circle_intersection,
    line_line_intersection,
    midpoint,
    point_add,
    point_normalize,
    point_scale,
    point_subtract,
    rotate90,
)
from .logging_utils import apply_debug_logging
from .sketch import (
    Axis,
    ConstraintAxisAligned,
    ConstraintFixed,
    ConstraintPointLineDistance,
    ConstraintPointOnArc,
    ConstraintPointOnLine,
    ConstraintPointPointDistance,
    PointId,
    Sketch,
    SketchArc,
    SketchPoint,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveOptions:
    """Solver knobs.

    ``max_passes`` bounds the propagation loop whether or not it converges.
    ``axis_line_length`` is the length of the helper segment used to describe
    horizontal and vertical lines; any positive value gives the same lines.
    """

    max_passes: int = 50
    epsilon: float = EPSILON
    axis_line_length: float = 100.0

    def __post_init__(self) -> None:
        if self.max_passes < 1:
            raise ValueError(f"max_passes must be positive, got {self.max_passes}")
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.axis_line_length <= 0.0:
            raise ValueError(f"axis_line_length must be positive, got {self.axis_line_length}")


@dataclass
class Solution:
    resolved_positions: Dict[PointId, XY]
    updated_sketch: Sketch
    passes: int
    converged: bool
    facts: Tuple[Fact, ...] = field(default_factory=tuple, repr=False)

    @property
    def fact_count(self) -> int:
        return len(self.facts)

    def supporting_lines(self, point: PointId) -> List[LineFact]:
        """Lines the point was derived to lie on, whether or not it got fixed."""

        return [fact for fact in self.facts if isinstance(fact, LineFact) and fact.point == point]


@dataclass
class _Propagation:
    store: FactStore
    original_locations: Dict[PointId, XY]
    options: SolveOptions


def seed_facts(sketch: Sketch, store: FactStore) -> Dict[PointId, XY]:
    """Translate the sketch elements into initial facts.

    Returns the pre-solve position of every point, used to break ties between
    candidate solutions.
    """

    original_locations: Dict[PointId, XY] = {}

    for element in sketch.elements:
        if isinstance(element, SketchPoint):
            original_locations[element.id] = element.position
        elif isinstance(element, SketchArc):
            store.add_fact(EquidistantFact(element.center, element.endpoint_a, element.endpoint_b))
        elif isinstance(element, ConstraintFixed):
            store.add_fact(FixedFact(element.point, element.position))
        elif isinstance(element, ConstraintAxisAligned):
            fact_type = VerticalFact if element.axis is Axis.VERTICAL else HorizontalFact
            store.add_fact(fact_type(element.point_a, element.point_b))
            store.add_fact(fact_type(element.point_b, element.point_a))
        elif isinstance(element, ConstraintPointPointDistance):
            if element.measure_only:
                continue
            store.add_fact(DistanceFact(element.point_a, element.point_b, element.distance))
            store.add_fact(DistanceFact(element.point_b, element.point_a, element.distance))
        elif isinstance(element, ConstraintPointLineDistance):
            if element.measure_only:
                continue
            line_a, line_b = sketch.line_endpoints(element.line)
            store.add_fact(PointLineDistanceFact(element.point, line_a, line_b, element.distance))
            store.add_fact(PointLineDistanceFact(element.point, line_b, line_a, -element.distance))
        elif isinstance(element, ConstraintPointOnLine):
            line_a, line_b = sketch.line_endpoints(element.line)
            store.add_fact(CollinearFact(tuple(sorted((element.point, line_a, line_b)))))
        elif isinstance(element, ConstraintPointOnArc):
            arc = sketch.element(element.arc, SketchArc)
            store.add_fact(EquidistantFact(arc.center, arc.endpoint_a, element.point))

    logger.debug(
        "Seeded %d fact(s) for %d point(s)", store.count_facts(), len(original_locations)
    )
    return original_locations


def _fixed_position(store: FactStore, point: PointId) -> Optional[XY]:
    fact = store.first(FixedFact.pattern(point=point))
    return fact.position if fact is not None else None


def _known_distance(store: FactStore, a: PointId, b: PointId) -> Optional[float]:
    if a == b:
        return 0.0
    position_a = _fixed_position(store, a)
    position_b = _fixed_position(store, b)
    if position_a is not None and position_b is not None:
        return distance(position_a, position_b)
    for first, second in ((a, b), (b, a)):
        fact = store.first(DistanceFact.pattern(point1=first, point2=second))
        if fact is not None:
            return fact.distance
    return None


def _nearest_to(candidates: Sequence[XY], reference: Optional[XY]) -> Optional[XY]:
    """Pick the candidate closest to ``reference``; the first one wins ties."""

    if not candidates:
        return None
    if reference is None or len(candidates) == 1:
        return candidates[0]
    coords = np.asarray(candidates, dtype=float)
    offsets = np.hypot(coords[:, 0] - reference[0], coords[:, 1] - reference[1])
    return candidates[int(np.argmin(offsets))]


def _derive_axis_lines_and_circles(ctx: _Propagation) -> None:
    store = ctx.store
    length = ctx.options.axis_line_length
    for fixed in store.get_facts(FixedFact):
        position = fixed.position
        for fact in store.get_facts(VerticalFact.pattern(point1=fixed.point)):
            store.add_fact(LineFact(fact.point2, position, point_add(position, XY(0.0, length))))
        for fact in store.get_facts(HorizontalFact.pattern(point1=fixed.point)):
            store.add_fact(LineFact(fact.point2, position, point_add(position, XY(length, 0.0))))
        for fact in store.get_facts(DistanceFact.pattern(point1=fixed.point)):
            store.add_fact(CircleFact(fact.point2, position, fact.distance))


def _intersect_lines_with_circles(ctx: _Propagation) -> None:
    store = ctx.store
    for line in store.get_facts(LineFact):
        for circle in store.get_facts(CircleFact.pattern(point=line.point)):
            candidates = line_circle_intersection(
                LineSpec(line.a, line.b), CircleSpec(circle.center, circle.radius)
            )
            chosen = _nearest_to(candidates, ctx.original_locations.get(line.point))
            if chosen is not None:
                store.add_fact(FixedFact(line.point, chosen))


def _intersect_circles(ctx: _Propagation) -> None:
    store = ctx.store
    epsilon = ctx.options.epsilon
    for circle in store.get_facts(CircleFact):
        for other in store.get_facts(CircleFact.pattern(point=circle.point)):
            if distance(circle.center, other.center) <= epsilon:
                continue
            candidates = circle_circle_intersection(
                CircleSpec(circle.center, circle.radius), CircleSpec(other.center, other.radius)
            )
            chosen = _nearest_to(candidates, ctx.original_locations.get(circle.point))
            if chosen is not None:
                store.add_fact(FixedFact(circle.point, chosen))


def _intersect_lines(ctx: _Propagation) -> None:
    store = ctx.store
    for line in store.get_facts(LineFact):
        for other in store.get_facts(LineFact.pattern(point=line.point)):
            crossing = line_line_intersection(LineSpec(line.a, line.b), LineSpec(other.a, other.b))
            if crossing is not None:
                store.add_fact(FixedFact(line.point, crossing))


def _derive_offset_lines(ctx: _Propagation) -> None:
    store = ctx.store
    epsilon = ctx.options.epsilon
    for fact in store.get_facts(PointLineDistanceFact):
        start = _fixed_position(store, fact.line1)
        end = _fixed_position(store, fact.line2)
        if start is None or end is None or distance(start, end) <= epsilon:
            continue
        direction = point_normalize(point_subtract(end, start))
        shift = point_scale(rotate90(direction), fact.distance)
        store.add_fact(LineFact(fact.point, point_add(start, shift), point_add(end, shift)))


def _derive_collinear_lines(ctx: _Propagation) -> None:
    store = ctx.store
    epsilon = ctx.options.epsilon
    for group in store.get_facts(CollinearFact):
        anchors: List[XY] = []
        for point in group.points:
            position = _fixed_position(store, point)
            if position is None:
                continue
            if any(distance(position, anchor) < epsilon for anchor in anchors):
                continue
            anchors.append(position)
            if len(anchors) == 2:
                break
        if len(anchors) < 2:
            continue
        for point in group.points:
            store.add_fact(LineFact(point, anchors[0], anchors[1]))


def _derive_bisector_lines(ctx: _Propagation) -> None:
    store = ctx.store
    epsilon = ctx.options.epsilon
    for fact in store.get_facts(EquidistantFact):
        first = _fixed_position(store, fact.point1)
        second = _fixed_position(store, fact.point2)
        if first is None or second is None or distance(first, second) <= epsilon:
            continue
        mid = midpoint(first, second)
        across = XY(second[1] - first[1], -(second[0] - first[0]))
        store.add_fact(LineFact(fact.center, mid, point_add(mid, across)))


def _propagate_equal_radii(ctx: _Propagation) -> None:
    store = ctx.store
    for fact in store.get_facts(EquidistantFact):
        radius1 = _known_distance(store, fact.center, fact.point1)
        radius2 = _known_distance(store, fact.center, fact.point2)
        if radius1 is not None and radius2 is None:
            store.add_fact(DistanceFact(fact.center, fact.point2, radius1))
        elif radius1 is None and radius2 is not None:
            store.add_fact(DistanceFact(fact.center, fact.point1, radius2))


def propagate(
    store: FactStore,
    original_locations: Dict[PointId, XY],
    options: SolveOptions = SolveOptions(),
) -> Tuple[int, bool]:
    """Apply every rule until a pass learns nothing or ``max_passes`` is reached.

    Returns the number of passes run and whether a fixed point was reached.
    """

    ctx = _Propagation(store, original_locations, options)
    for pass_index in range(options.max_passes):
        before = store.count_facts()
        for rule in _RULES:
            rule(ctx)
        learned = store.count_facts() - before
        logger.debug("Pass %d learned %d fact(s)", pass_index + 1, learned)
        if learned == 0:
            return pass_index + 1, True
    logger.info("Propagation stopped at the pass cap (%d) with facts still growing", options.max_passes)
    return options.max_passes, False


def solve(sketch: Sketch, options: SolveOptions = SolveOptions()) -> Solution:
    """Resolve as many point positions of ``sketch`` as the constraints determine.

    Points that end up without a fixed position keep their current position in
    :attr:`Solution.updated_sketch`. ``sketch`` itself is not modified.
    """

    store = FactStore(epsilon=options.epsilon)
    original_locations = seed_facts(sketch, store)
    passes, converged = propagate(store, original_locations, options)

    resolved: Dict[PointId, XY] = {
        fact.point: fact.position for fact in store.get_facts(FixedFact)
    }
    logger.info(
        "Solved sketch: %d/%d point(s) resolved, %d fact(s), %d pass(es), converged=%s",
        len(resolved),
        len(original_locations),
        store.count_facts(),
        passes,
        converged,
    )
    return Solution(
        resolved_positions=resolved,
        updated_sketch=sketch.with_point_positions(resolved),
        passes=passes,
        converged=converged,
        facts=tuple(store.all_facts()),
    )


def fully_constrained_points(
    sketch: Sketch, solution: Solution, *, epsilon: float = EPSILON
) -> Set[PointId]:
    """Points whose resolved position matches their stored position in ``sketch``."""

    result: Set[PointId] = set()
    for point in sketch.points():
        resolved = solution.resolved_positions.get(point.id)
        if resolved is not None and distance(resolved, point.position) < epsilon:
            result.add(point.id)
    return result


apply_debug_logging(
    globals(),
    logger=logger,
    skip={"_fixed_position", "_known_distance", "_nearest_to"},
)

# Built after the wrap so propagation runs the traced rule functions.
_RULES: Tuple[Callable[[_Propagation], None], ...] = (
    _derive_axis_lines_and_circles,
    _intersect_lines_with_circles,
    _intersect_circles,
    _intersect_lines,
    _derive_offset_lines,
    _derive_collinear_lines,
    _derive_bisector_lines,
    _propagate_equal_radii,
)


__all__ = [
    "Solution",
    "SolveOptions",
    "fully_constrained_points",
    "propagate",
    "seed_facts",
    "solve",
]
