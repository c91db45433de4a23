import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from sketch_solver import (
    SketchFormatError,
    SolveOptions,
    ValidationError,
    format_fact,
    fully_constrained_points,
    print_sketch,
    read_sketch,
    solve,
    validate,
    write_sketch,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Solve 2D sketch constraints")
    parser.add_argument("path", help="Path to the JSON sketch document")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--max-passes",
        type=int,
        default=SolveOptions.max_passes,
        help=f"Propagation pass cap (default: {SolveOptions.max_passes})",
    )
    parser.add_argument(
        "--show-facts",
        action="store_true",
        help="Print every fact derived during the solve",
    )
    parser.add_argument(
        "--output-path",
        help="Write the solved sketch document to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Reading sketch from %s", args.path)
    try:
        sketch = read_sketch(args.path)
        validate(sketch)
        options = SolveOptions(max_passes=args.max_passes)
    except (OSError, SketchFormatError, ValidationError, ValueError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    logger.info("Validation succeeded")

    solution = solve(sketch, options)
    constrained = fully_constrained_points(sketch, solution)

    print(f"Sketch:\n{print_sketch(sketch)}")
    print(f"Passes: {solution.passes} (converged: {solution.converged})")
    print(f"Facts: {solution.fact_count}")
    if args.show_facts:
        for fact in solution.facts:
            print(f"  {format_fact(sketch, fact)}")

    print("Coordinates:")
    for point in solution.updated_sketch.points():
        x, y = point.position
        marker = "" if point.id in solution.resolved_positions else " (unresolved)"
        print(f"  {sketch.label(point.id)}: ({x:.6f}, {y:.6f}){marker}")

    print("Fully constrained:")
    if constrained:
        for point in sketch.points():
            if point.id in constrained:
                print(f"  {sketch.label(point.id)}")
    else:
        print("  (none)")

    if args.output_path:
        output_path = Path(args.output_path)
        logger.info("Writing solved sketch to %s", output_path)
        write_sketch(solution.updated_sketch, output_path)
        print(f"Solved sketch written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
