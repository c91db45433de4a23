import pytest

from sketch_solver.geometry import XY
from sketch_solver.picking import (
    dimension_handle_position,
    find_all_geometry_fully_within_box,
    find_all_geometry_partially_within_box,
    find_closest_geometry_near,
    find_point_near,
)
from sketch_solver.sketch import Cosmetic, SketchArena


@pytest.fixture
def segment_scene():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(10.0, 0.0, label="B")
    line = arena.add_line(a, b, label="AB")
    dimension = arena.distance(a, b, 10.0, cosmetic=Cosmetic(t=0.5, offset=2.0), label="len")
    return arena.build(), a, b, line, dimension


def test_dimension_handle_sits_at_cosmetic_offset(segment_scene):
    sketch, _, _, _, dimension = segment_scene

    assert dimension_handle_position(sketch, dimension) == (pytest.approx(5.0), pytest.approx(2.0))


def test_point_line_dimension_handle_uses_projection():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(10.0, 0.0)
    p = arena.add_point(5.0, 5.0)
    line = arena.add_line(a, b)
    dimension = arena.point_line_distance(p, line, 5.0)

    handle = dimension_handle_position(arena.build(), dimension)

    assert handle == (pytest.approx(5.0), pytest.approx(2.5))


def test_dimension_handle_rejects_other_elements(segment_scene):
    sketch, _, _, line, _ = segment_scene

    with pytest.raises(TypeError):
        dimension_handle_position(sketch, line)


def test_closest_geometry_priorities(segment_scene):
    sketch, a, _, line, dimension = segment_scene

    assert find_closest_geometry_near(sketch, XY(5.0, 2.5), view_size=100.0) == dimension
    assert find_closest_geometry_near(sketch, XY(0.5, 0.5), view_size=100.0) == a
    assert find_closest_geometry_near(sketch, XY(5.0, -0.5), view_size=100.0) == line
    assert find_closest_geometry_near(sketch, XY(50.0, 50.0), view_size=100.0) is None


def test_closest_geometry_includes_arcs():
    arena = SketchArena()
    a = arena.add_point(10.0, 0.0)
    b = arena.add_point(0.0, 10.0)
    o = arena.add_point(0.0, 0.0)
    arc = arena.add_arc(a, b, o)

    assert find_closest_geometry_near(arena.build(), XY(7.4, 7.4), view_size=100.0) == arc


def test_find_point_near_picks_the_closest(segment_scene):
    sketch, a, b, _, _ = segment_scene

    assert find_point_near(sketch, XY(9.0, 0.0), max_distance=2.0) == b
    assert find_point_near(sketch, XY(5.0, 0.0), max_distance=2.0) is None
    assert find_point_near(sketch, XY(5.0, 0.0), max_distance=6.0) == a


def test_box_selection(segment_scene):
    sketch, a, b, line, _ = segment_scene

    assert find_all_geometry_fully_within_box(sketch, XY(-1.0, -1.0), XY(11.0, 1.0)) == [a, b, line]
    assert find_all_geometry_fully_within_box(sketch, XY(-1.0, -1.0), XY(5.0, 1.0)) == [a]
    assert find_all_geometry_partially_within_box(sketch, XY(-1.0, -1.0), XY(5.0, 1.0)) == [a, line]
    assert find_all_geometry_partially_within_box(sketch, XY(4.0, -1.0), XY(6.0, 1.0)) == [line]
    assert find_all_geometry_partially_within_box(sketch, XY(4.0, 1.0), XY(6.0, 3.0)) == []
