"""Example: dragging a point across the axis flips which intersection is chosen."""

from sketch_solver import SketchArena, solve


def main() -> None:
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0, label="A")
    b = arena.add_point(100.0, 0.0, label="B")
    c = arena.add_point(50.0, 40.0, label="C")
    arena.fix(a)
    arena.fix(b)
    arena.distance(a, c, 60.0)
    arena.distance(b, c, 60.0)

    for y in (40.0, 20.0, 5.0, -5.0, -20.0):
        arena.move_point(c, 50.0, y)
        solution = solve(arena.build())
        x_solved, y_solved = solution.resolved_positions[c]
        print(f"drag C to y={y:6.1f} -> C: ({x_solved:.6f}, {y_solved:.6f})")


if __name__ == "__main__":
    main()
