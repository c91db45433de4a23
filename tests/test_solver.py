import dataclasses
import logging
import math

import pytest

from sketch_solver.facts import CollinearFact, DistanceFact, EquidistantFact, FactStore, PointLineDistanceFact
from sketch_solver.geometry import XY
from sketch_solver.sketch import Cosmetic, SketchArena
from sketch_solver.solver import SolveOptions, fully_constrained_points, propagate, seed_facts, solve


HEIGHT = math.sqrt(60.0**2 - 50.0**2)


def _assert_at(solution, point, x, y):
    resolved = solution.resolved_positions[point]
    assert resolved[0] == pytest.approx(x, abs=1e-6)
    assert resolved[1] == pytest.approx(y, abs=1e-6)


def _vertical_distance(b_start, *, measure_only=False):
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(*b_start, label="B")
    arena.fix(a, (0.0, 0.0))
    arena.vertical(a, b)
    arena.distance(a, b, 50.0, measure_only=measure_only)
    return arena, a, b


def _two_circles(c_start):
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(100.0, 0.0, label="B")
    c = arena.add_point(*c_start, label="C")
    arena.fix(a)
    arena.fix(b)
    arena.distance(a, c, 60.0)
    arena.distance(b, c, 60.0)
    return arena, a, b, c


@pytest.mark.parametrize("b_start, expected_y", [((0.0, 40.0), 50.0), ((0.0, -10.0), -50.0)])
def test_fixed_point_propagates_along_vertical_distance(b_start, expected_y):
    arena, a, b = _vertical_distance(b_start)

    solution = solve(arena.build())

    _assert_at(solution, a, 0.0, 0.0)
    _assert_at(solution, b, 0.0, expected_y)
    assert solution.converged


@pytest.mark.parametrize("c_start, expected_y", [((50.0, 30.0), HEIGHT), ((50.0, -5.0), -HEIGHT)])
def test_circle_intersection_prefers_candidate_near_current_position(c_start, expected_y):
    arena, _, _, c = _two_circles(c_start)

    solution = solve(arena.build())

    _assert_at(solution, c, 50.0, expected_y)


def test_dragging_across_the_axis_flips_the_solution():
    arena, _, _, c = _two_circles((50.0, 30.0))
    above = solve(arena.build())

    arena.move_point(c, 50.0, -30.0)
    below = solve(arena.build())

    assert above.resolved_positions[c][1] == pytest.approx(HEIGHT)
    assert below.resolved_positions[c][1] == pytest.approx(-HEIGHT)


def test_solving_the_solved_sketch_is_idempotent():
    arena, _, _, _ = _two_circles((40.0, 20.0))
    first = solve(arena.build())

    second = solve(first.updated_sketch)

    assert second.resolved_positions.keys() == first.resolved_positions.keys()
    for point, position in first.resolved_positions.items():
        assert second.resolved_positions[point][0] == pytest.approx(position[0], abs=1e-5)
        assert second.resolved_positions[point][1] == pytest.approx(position[1], abs=1e-5)


def test_solve_does_not_modify_input_sketch():
    arena, _, b = _vertical_distance((0.0, 40.0))
    sketch = arena.build()

    solution = solve(sketch)

    assert sketch.point_position(b) == XY(0.0, 40.0)
    assert solution.updated_sketch.point_position(b) == (pytest.approx(0.0), pytest.approx(50.0))


def test_point_on_line_gets_supporting_line_but_keeps_position():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(10.0, 0.0)
    p = arena.add_point(3.0, 1.0)
    line = arena.add_line(a, b)
    arena.fix(a)
    arena.fix(b)
    arena.point_on_line(p, line)

    solution = solve(arena.build())

    assert p not in solution.resolved_positions
    assert solution.updated_sketch.point_position(p) == XY(3.0, 1.0)
    supporting = solution.supporting_lines(p)
    assert len(supporting) == 1
    assert supporting[0].a == XY(0.0, 0.0)
    assert supporting[0].b == XY(10.0, 0.0)


def test_point_on_line_resolved_by_second_line():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(10.0, 0.0)
    q = arena.add_point(3.0, 5.0)
    p = arena.add_point(2.5, 1.0)
    line = arena.add_line(a, b)
    for point in (a, b, q):
        arena.fix(point)
    arena.point_on_line(p, line)
    arena.vertical(q, p)

    solution = solve(arena.build())

    _assert_at(solution, p, 3.0, 0.0)


def test_rectangle_chain_resolves_every_corner():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(75.0, 3.0, label="B")
    c = arena.add_point(78.0, 38.0, label="C")
    d = arena.add_point(2.0, 41.0, label="D")
    arena.fix(a)
    arena.horizontal(a, b)
    arena.distance(a, b, 80.0)
    arena.vertical(b, c)
    arena.distance(b, c, 40.0)
    arena.horizontal(c, d)
    arena.vertical(d, a)

    solution = solve(arena.build())

    _assert_at(solution, b, 80.0, 0.0)
    _assert_at(solution, c, 80.0, 40.0)
    _assert_at(solution, d, 0.0, 40.0)
    assert solution.converged


def test_arc_endpoints_share_radius():
    arena = SketchArena()
    o = arena.add_point(0.0, 0.0, label="O")
    a = arena.add_point(10.0, 0.0, label="A")
    b = arena.add_point(1.0, 8.0, label="B")
    arena.add_arc(a, b, o)
    arena.fix(o)
    arena.fix(a)
    arena.vertical(o, b)

    solution = solve(arena.build())

    _assert_at(solution, b, 0.0, 10.0)


def test_point_on_arc_uses_arc_radius():
    arena = SketchArena()
    o = arena.add_point(0.0, 0.0)
    a = arena.add_point(10.0, 0.0)
    b = arena.add_point(0.0, 10.0)
    p = arena.add_point(-8.0, 1.0)
    arc = arena.add_arc(a, b, o)
    arena.fix(o)
    arena.fix(a)
    arena.horizontal(o, p)
    arena.point_on_arc(p, arc)

    solution = solve(arena.build())

    _assert_at(solution, p, -10.0, 0.0)


@pytest.mark.parametrize("signed_distance, expected_y", [(5.0, 5.0), (-5.0, -5.0)])
def test_point_line_distance_offsets_to_the_left_of_the_line(signed_distance, expected_y):
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(10.0, 0.0)
    q = arena.add_point(4.0, 20.0)
    p = arena.add_point(4.0, 1.0)
    line = arena.add_line(a, b)
    for point in (a, b, q):
        arena.fix(point)
    arena.vertical(q, p)
    arena.point_line_distance(p, line, signed_distance)

    solution = solve(arena.build())

    _assert_at(solution, p, 4.0, expected_y)


def test_measure_only_dimension_does_not_constrain():
    arena, _, b = _vertical_distance((3.0, 40.0), measure_only=True)

    solution = solve(arena.build())

    assert b not in solution.resolved_positions
    assert solution.updated_sketch.point_position(b) == XY(3.0, 40.0)


def test_contradictory_constraints_leave_points_in_place():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(100.0, 0.0)
    c = arena.add_point(50.0, 10.0)
    arena.fix(a)
    arena.fix(b)
    arena.distance(a, b, 5.0)
    arena.distance(a, c, 1.0)
    arena.distance(b, c, 1.0)

    solution = solve(arena.build())

    assert solution.converged
    assert solution.resolved_positions[b] == XY(100.0, 0.0)
    assert c not in solution.resolved_positions
    assert solution.updated_sketch.point_position(c) == XY(50.0, 10.0)


def test_unconstrained_sketch_converges_in_one_pass():
    arena = SketchArena()
    arena.add_point(1.0, 2.0)

    solution = solve(arena.build())

    assert solution.passes == 1
    assert solution.converged
    assert solution.resolved_positions == {}


def test_pass_cap_stops_propagation():
    arena, _, b = _vertical_distance((0.0, 40.0))

    solution = solve(arena.build(), SolveOptions(max_passes=1))

    assert solution.passes == 1
    assert not solution.converged
    _assert_at(solution, b, 0.0, 50.0)


def test_solve_options_reject_non_positive_pass_cap():
    with pytest.raises(ValueError):
        SolveOptions(max_passes=0)


def test_solve_options_are_immutable():
    options = SolveOptions()

    with pytest.raises(dataclasses.FrozenInstanceError):
        options.max_passes = 1

    assert SolveOptions().max_passes == 50


def test_seed_facts_translates_constraints():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(10.0, 0.0)
    o = arena.add_point(5.0, 5.0)
    p = arena.add_point(3.0, 1.0)
    line = arena.add_line(b, a)
    arena.add_arc(a, b, o)
    arena.point_on_line(p, line)
    arena.distance(a, b, 10.0, cosmetic=Cosmetic(t=0.3, offset=4.0))
    arena.distance(a, p, 3.0, measure_only=True)
    arena.point_line_distance(o, line, 5.0)
    store = FactStore()

    original = seed_facts(arena.build(), store)

    assert original == {a: XY(0.0, 0.0), b: XY(10.0, 0.0), o: XY(5.0, 5.0), p: XY(3.0, 1.0)}
    assert store.get_facts(CollinearFact) == [CollinearFact((a, b, p))]
    assert store.get_facts(EquidistantFact) == [EquidistantFact(o, a, b)]
    assert store.get_facts(DistanceFact) == [DistanceFact(a, b, 10.0), DistanceFact(b, a, 10.0)]
    assert store.get_facts(PointLineDistanceFact) == [
        PointLineDistanceFact(o, b, a, 5.0),
        PointLineDistanceFact(o, a, b, -5.0),
    ]


def test_propagate_reports_fixed_point():
    arena, _, _ = _vertical_distance((0.0, 40.0))
    store = FactStore()
    original = seed_facts(arena.build(), store)

    passes, converged = propagate(store, original)

    assert converged
    assert 1 < passes < SolveOptions().max_passes


def test_fully_constrained_points_compares_with_stored_positions():
    arena, a, b = _vertical_distance((0.0, 40.0))
    sketch = arena.build()
    solution = solve(sketch)

    assert fully_constrained_points(sketch, solution) == {a}
    assert fully_constrained_points(solution.updated_sketch, solution) == {a, b}


def test_solve_logs_summary(caplog):
    arena, _, _ = _vertical_distance((0.0, 40.0))

    with caplog.at_level(logging.INFO, logger="sketch_solver.solver"):
        solve(arena.build())

    assert any("2/2 point(s) resolved" in message for message in caplog.messages)


def test_solve_traces_each_rule_at_debug_level(caplog):
    arena, _, _ = _vertical_distance((0.0, 40.0))

    with caplog.at_level(logging.DEBUG, logger="sketch_solver.solver"):
        solve(arena.build())

    for rule in ("_derive_axis_lines_and_circles", "_intersect_lines_with_circles", "_propagate_equal_radii"):
        assert any(message.startswith(f"Entering {rule} ") for message in caplog.messages)
