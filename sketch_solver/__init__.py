from .geometry import XY, LineSpec, CircleSpec, ArcSpec, EPSILON
from .sketch import (
    Axis,
    Cosmetic,
    Sketch,
    SketchArena,
    SketchPoint,
    SketchLine,
    SketchArc,
    ConstraintFixed,
    ConstraintAxisAligned,
    ConstraintPointPointDistance,
    ConstraintPointLineDistance,
    ConstraintPointOnLine,
    ConstraintPointOnArc,
)
from .facts import ANY, Fact, FactPattern, FactStore
from .validate import validate, ValidationError
from .solver import solve, propagate, seed_facts, fully_constrained_points, SolveOptions, Solution
from .io import load_sketch, dump_sketch, read_sketch, write_sketch, SketchFormatError
from .printer import print_sketch, format_element, format_fact
from .picking import (
    find_point_near,
    find_closest_geometry_near,
    find_all_geometry_fully_within_box,
    find_all_geometry_partially_within_box,
)

__all__ = [
    'XY',
    'LineSpec',
    'CircleSpec',
    'ArcSpec',
    'EPSILON',
    'Axis',
    'Cosmetic',
    'Sketch',
    'SketchArena',
    'SketchPoint',
    'SketchLine',
    'SketchArc',
    'ConstraintFixed',
    'ConstraintAxisAligned',
    'ConstraintPointPointDistance',
    'ConstraintPointLineDistance',
    'ConstraintPointOnLine',
    'ConstraintPointOnArc',
    'ANY',
    'Fact',
    'FactPattern',
    'FactStore',
    'validate',
    'ValidationError',
    'solve',
    'propagate',
    'seed_facts',
    'fully_constrained_points',
    'SolveOptions',
    'Solution',
    'load_sketch',
    'dump_sketch',
    'read_sketch',
    'write_sketch',
    'SketchFormatError',
    'print_sketch',
    'format_element',
    'format_fact',
    'find_point_near',
    'find_closest_geometry_near',
    'find_all_geometry_fully_within_box',
    'find_all_geometry_partially_within_box',
]
