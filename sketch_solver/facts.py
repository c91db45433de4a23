"""Typed geometric facts and the deduplicating store the solver derives them into."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Iterator, List, Tuple, Type, TypeVar, Union

from .geometry import EPSILON, XY, distance
from .sketch import PointId

logger = logging.getLogger(__name__)

# Field comparison kinds.
EXACT = "exact"
SCALAR = "scalar"
POSITION = "position"


class _AnyValue:
    """Wildcard for fact patterns; matches every value of a field."""

    _instance: ClassVar["_AnyValue | None"] = None

    def __new__(cls) -> "_AnyValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY"


ANY = _AnyValue()


def _field_equal(kind: str, left: Any, right: Any, epsilon: float) -> bool:
    if kind == SCALAR:
        return left == right or abs(left - right) < epsilon
    if kind == POSITION:
        return distance(left, right) < epsilon
    return left == right


F = TypeVar("F", bound="Fact")


@dataclass(frozen=True)
class FactPattern:
    """Partial description of facts of one kind; omitted fields are unconstrained."""

    kind: Type["Fact"]
    constraints: Tuple[Tuple[str, Any], ...] = ()

    def matches(self, fact: "Fact", epsilon: float = EPSILON) -> bool:
        if not isinstance(fact, self.kind):
            return False
        for name, expected in self.constraints:
            if expected is ANY:
                continue
            if not _field_equal(self.kind.FIELD_KINDS[name], getattr(fact, name), expected, epsilon):
                return False
        return True


@dataclass(frozen=True)
class Fact:
    """Base class for derived facts.

    ``FIELD_KINDS`` declares how each field is compared. Fields listed in
    ``IDENTITY_IGNORE`` take no part in deduplication, so a second derivation
    that only differs in those fields is dropped.
    """

    FIELD_KINDS: ClassVar[Dict[str, str]] = {}
    IDENTITY_IGNORE: ClassVar[Tuple[str, ...]] = ()

    def same_as(self, other: "Fact", epsilon: float = EPSILON) -> bool:
        if type(self) is not type(other):
            return False
        for name, kind in self.FIELD_KINDS.items():
            if name in self.IDENTITY_IGNORE:
                continue
            if not _field_equal(kind, getattr(self, name), getattr(other, name), epsilon):
                return False
        return True

    @classmethod
    def pattern(cls: Type[F], **constraints: Any) -> FactPattern:
        unknown = set(constraints) - set(cls.FIELD_KINDS)
        if unknown:
            raise TypeError(f"{cls.__name__} has no field(s) {', '.join(sorted(unknown))}")
        return FactPattern(cls, tuple(constraints.items()))


def _declare(cls: Type[F]) -> Type[F]:
    declared = {f.name for f in fields(cls)}
    missing = declared - set(cls.FIELD_KINDS)
    if missing:
        raise TypeError(f"{cls.__name__} does not declare comparison for {sorted(missing)}")
    return cls


@_declare
@dataclass(frozen=True)
class FixedFact(Fact):
    point: PointId
    position: XY

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"point": EXACT, "position": POSITION}
    IDENTITY_IGNORE: ClassVar[Tuple[str, ...]] = ("position",)


@_declare
@dataclass(frozen=True)
class LineFact(Fact):
    """``point`` lies on the infinite line through ``a`` and ``b``."""

    point: PointId
    a: XY
    b: XY

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"point": EXACT, "a": POSITION, "b": POSITION}


@_declare
@dataclass(frozen=True)
class CircleFact(Fact):
    point: PointId
    center: XY
    radius: float

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"point": EXACT, "center": POSITION, "radius": SCALAR}


@_declare
@dataclass(frozen=True)
class VerticalFact(Fact):
    point1: PointId
    point2: PointId

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"point1": EXACT, "point2": EXACT}


@_declare
@dataclass(frozen=True)
class HorizontalFact(Fact):
    point1: PointId
    point2: PointId

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"point1": EXACT, "point2": EXACT}


@_declare
@dataclass(frozen=True)
class DistanceFact(Fact):
    point1: PointId
    point2: PointId
    distance: float

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"point1": EXACT, "point2": EXACT, "distance": SCALAR}
    IDENTITY_IGNORE: ClassVar[Tuple[str, ...]] = ("distance",)


@_declare
@dataclass(frozen=True)
class PointLineDistanceFact(Fact):
    """Signed distance from ``point`` to the line ``line1`` -> ``line2``."""

    point: PointId
    line1: PointId
    line2: PointId
    distance: float

    FIELD_KINDS: ClassVar[Dict[str, str]] = {
        "point": EXACT,
        "line1": EXACT,
        "line2": EXACT,
        "distance": SCALAR,
    }
    IDENTITY_IGNORE: ClassVar[Tuple[str, ...]] = ("distance",)


@_declare
@dataclass(frozen=True)
class CollinearFact(Fact):
    points: Tuple[PointId, ...]

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"points": EXACT}


@_declare
@dataclass(frozen=True)
class EquidistantFact(Fact):
    center: PointId
    point1: PointId
    point2: PointId

    FIELD_KINDS: ClassVar[Dict[str, str]] = {"center": EXACT, "point1": EXACT, "point2": EXACT}


GeomFact = Union[
    FixedFact,
    LineFact,
    CircleFact,
    VerticalFact,
    HorizontalFact,
    DistanceFact,
    PointLineDistanceFact,
    CollinearFact,
    EquidistantFact,
]

FACT_KINDS: Tuple[Type[Fact], ...] = (
    FixedFact,
    LineFact,
    CircleFact,
    VerticalFact,
    HorizontalFact,
    DistanceFact,
    PointLineDistanceFact,
    CollinearFact,
    EquidistantFact,
)

Query = Union[FactPattern, Type[Fact]]


class FactStore:
    """Append-only collection of facts with approximate deduplication.

    Facts are bucketed by kind; lookups inside a bucket are linear scans, which
    is fast enough for sketches of a few hundred elements.
    """

    def __init__(self, epsilon: float = EPSILON) -> None:
        self.epsilon = epsilon
        self._facts: List[Fact] = []
        self._by_kind: Dict[Type[Fact], List[Fact]] = {kind: [] for kind in FACT_KINDS}

    def add_fact(self, fact: Fact) -> bool:
        """Store ``fact`` unless an equal one is present. Returns ``True`` if stored."""

        bucket = self._by_kind.setdefault(type(fact), [])
        for existing in bucket:
            if existing.same_as(fact, self.epsilon):
                return False
        bucket.append(fact)
        self._facts.append(fact)
        logger.debug("Learned fact %r", fact)
        return True

    def get_facts(self, query: Query) -> List[Any]:
        if isinstance(query, type):
            return list(self._by_kind.get(query, ()))
        bucket = self._by_kind.get(query.kind, ())
        return [fact for fact in bucket if query.matches(fact, self.epsilon)]

    def first(self, query: Query) -> Any:
        """Return the first fact matching ``query`` or ``None``."""

        matches = self.get_facts(query)
        return matches[0] if matches else None

    def count_facts(self) -> int:
        return len(self._facts)

    def all_facts(self) -> List[Fact]:
        return list(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    def __iter__(self) -> Iterator[Fact]:
        return iter(list(self._facts))


__all__ = [
    "ANY",
    "CircleFact",
    "CollinearFact",
    "DistanceFact",
    "EXACT",
    "EquidistantFact",
    "FACT_KINDS",
    "Fact",
    "FactPattern",
    "FactStore",
    "FixedFact",
    "GeomFact",
    "HorizontalFact",
    "LineFact",
    "POSITION",
    "PointLineDistanceFact",
    "Query",
    "SCALAR",
    "VerticalFact",
]
