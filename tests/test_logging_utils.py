import logging

from sketch_solver.facts import FactStore, FixedFact
from sketch_solver.geometry import XY
from sketch_solver.logging_utils import _safe_repr, apply_debug_logging, debug_log_call
from sketch_solver.sketch import SketchArena


def test_safe_repr_summarizes_domain_objects():
    arena = SketchArena()
    a = arena.add_point(0.0, 0.0)
    b = arena.add_point(1.0, 0.0)
    arena.add_line(a, b)
    arena.fix(a)
    store = FactStore()
    store.add_fact(FixedFact(a, XY(0.0, 0.0)))

    assert _safe_repr(arena.build()) == "Sketch(points=2, lines=1, arcs=0, constraints=1)"
    assert _safe_repr(store) == "FactStore(facts=1)"
    assert _safe_repr(list(range(10))) == "[0, 1, 2, 3, 4, ...]"


def test_debug_log_call_traces_entry_and_exit(caplog):
    logger = logging.getLogger("sketch_solver.tests.trace")

    @debug_log_call(logger)
    def double(value):
        return value * 2

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        assert double(21) == 42

    assert any(message.startswith("Entering") and "args=[21]" in message for message in caplog.messages)
    assert any(message.endswith("-> 42") for message in caplog.messages)
    assert debug_log_call(logger)(double) is double


def test_apply_debug_logging_wraps_only_local_functions():
    def local():
        return 1

    local.__module__ = "fake_module"
    namespace = {"__name__": "fake_module", "local": local, "skipped": local, "imported": len}

    apply_debug_logging(namespace, skip={"skipped"})

    assert getattr(namespace["local"], "_debug_logging_wrapped", False)
    assert namespace["skipped"] is local
    assert namespace["imported"] is len
