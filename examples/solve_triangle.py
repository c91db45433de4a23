"""Example pipeline: build a sketch in code and propagate its constraints."""

from sketch_solver import SketchArena, SolveOptions, print_sketch, solve, validate


def main() -> None:
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(90.0, 5.0, label="B")
    c = arena.add_point(40.0, 30.0, label="C")
    arena.add_line(a, b, label="AB")
    arena.add_line(b, c, label="BC")
    arena.add_line(c, a, label="CA")

    arena.fix(a, (0.0, 0.0))
    arena.horizontal(a, b)
    arena.distance(a, b, 100.0)
    arena.distance(a, c, 60.0)
    arena.distance(b, c, 60.0)

    sketch = arena.build()
    validate(sketch)
    print(f"Sketch:\n{print_sketch(sketch)}")

    solution = solve(sketch, SolveOptions())
    print(f"Passes: {solution.passes} (converged: {solution.converged})")
    for point in solution.updated_sketch.points():
        x, y = point.position
        print(f"{sketch.label(point.id)}: ({x:.6f}, {y:.6f})")


if __name__ == "__main__":
    main()
