"""Shape algebra: immutable constraint values and their factory functions.

Shapes are frozen dataclasses compared structurally. Each variant dispatches
to the matching ``probe_*`` method of a :class:`~shapeql.probe.traverser.Probe`
through ``accept``.

``And()`` is the identity shape (always passes) and ``Or()`` the empty
disjunction (always fails).
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field as _field
from typing import TYPE_CHECKING, Iterable, TypeVar

from rdflib import URIRef

from shapeql.schema.common import (
    CONVEY,
    CREATE,
    DELETE,
    DETAIL,
    DIGEST,
    FILTER,
    MODE,
    RELATE,
    ROLE,
    TASK,
    UPDATE,
    VIEW,
    Step,
    Term,
    to_iri,
    to_step,
    to_term,
)

if TYPE_CHECKING:
    from shapeql.probe.traverser import Probe

V = TypeVar("V")

REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


def _shape(value, name: str = "shape") -> "Shape":
    if not isinstance(value, Shape):
        raise TypeError(f"{name} must be a Shape, got {type(value).__name__}")
    return value


def _shapes(values: Iterable) -> tuple:
    if values is None:
        raise TypeError("null shapes")
    return tuple(_shape(value) for value in values)


def _terms(values: Iterable) -> tuple:
    if values is None or isinstance(values, (str, bytes)):
        raise TypeError("values must be a collection of terms")
    return tuple(to_term(value) for value in values)


def _limit(value, minimum: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} limit must be an int")
    if value < minimum:
        raise ValueError(f"{name} limit {value} is less than {minimum}")
    return value


class Shape(ABC):
    """Base class of all shape variants."""

    __slots__ = ()

    @abstractmethod
    def accept(self, probe: Probe[V]) -> V: ...

    def then(self, *shapes: Shape) -> Shape:
        """Conditional shape applying ``shapes`` when this shape holds."""
        return when(self, and_(*shapes))


# ── Logical ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class And(Shape):
    shapes: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "shapes", _shapes(self.shapes))

    def accept(self, probe):
        return probe.probe_and(self)


@dataclass(frozen=True)
class Or(Shape):
    shapes: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "shapes", _shapes(self.shapes))

    def accept(self, probe):
        return probe.probe_or(self)


@dataclass(frozen=True)
class When(Shape):
    test: Shape
    pass_shape: Shape
    fail_shape: Shape = And()

    def __post_init__(self):
        _shape(self.test, "test")
        _shape(self.pass_shape, "pass shape")
        _shape(self.fail_shape, "fail shape")

    def accept(self, probe):
        return probe.probe_when(self)


# ── Structural ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Field(Shape):
    step: Step
    shape: Shape = And()

    def __post_init__(self):
        object.__setattr__(self, "step", to_step(self.step))
        _shape(self.shape)

    @property
    def iri(self) -> URIRef:
        return self.step.iri

    @property
    def inverse(self) -> bool:
        return self.step.inverse

    def accept(self, probe):
        return probe.probe_field(self)


# ── Annotations ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Meta(Shape):
    key: str
    value: Term

    def __post_init__(self):
        if not isinstance(self.key, str):
            raise TypeError("meta key must be a string")
        if not self.key:
            raise ValueError("empty meta key")
        object.__setattr__(self, "value", to_term(self.value))

    def accept(self, probe):
        return probe.probe_meta(self)


@dataclass(frozen=True)
class Guard(Shape):
    """Parametric shape resolved against an axis assignment by redaction."""

    axis: str
    values: frozenset
    shape: Shape = And()

    def __post_init__(self):
        if not isinstance(self.axis, str):
            raise TypeError("guard axis must be a string")
        if not self.axis:
            raise ValueError("empty guard axis")
        if self.values is None or isinstance(self.values, (str, bytes)):
            raise TypeError("guard values must be a collection")
        values = frozenset(self.values)
        if None in values:
            raise TypeError("null guard value")
        object.__setattr__(self, "values", values)
        _shape(self.shape)

    def then(self, *shapes: Shape) -> Shape:
        return Guard(self.axis, self.values, and_(*shapes))

    def accept(self, probe):
        return probe.probe_guard(self)


# ── Term constraints ──────────────────────────────────────────────


@dataclass(frozen=True)
class Datatype(Shape):
    iri: URIRef

    def __post_init__(self):
        object.__setattr__(self, "iri", to_iri(self.iri))

    def accept(self, probe):
        return probe.probe_datatype(self)


@dataclass(frozen=True)
class Clazz(Shape):
    iri: URIRef

    def __post_init__(self):
        object.__setattr__(self, "iri", to_iri(self.iri))

    def accept(self, probe):
        return probe.probe_clazz(self)


@dataclass(frozen=True)
class MinExclusive(Shape):
    value: Term

    def __post_init__(self):
        object.__setattr__(self, "value", to_term(self.value))

    def accept(self, probe):
        return probe.probe_min_exclusive(self)


@dataclass(frozen=True)
class MaxExclusive(Shape):
    value: Term

    def __post_init__(self):
        object.__setattr__(self, "value", to_term(self.value))

    def accept(self, probe):
        return probe.probe_max_exclusive(self)


@dataclass(frozen=True)
class MinInclusive(Shape):
    value: Term

    def __post_init__(self):
        object.__setattr__(self, "value", to_term(self.value))

    def accept(self, probe):
        return probe.probe_min_inclusive(self)


@dataclass(frozen=True)
class MaxInclusive(Shape):
    value: Term

    def __post_init__(self):
        object.__setattr__(self, "value", to_term(self.value))

    def accept(self, probe):
        return probe.probe_max_inclusive(self)


@dataclass(frozen=True)
class MinLength(Shape):
    limit: int

    def __post_init__(self):
        _limit(self.limit, 0, "min length")

    def accept(self, probe):
        return probe.probe_min_length(self)


@dataclass(frozen=True)
class MaxLength(Shape):
    limit: int

    def __post_init__(self):
        _limit(self.limit, 0, "max length")

    def accept(self, probe):
        return probe.probe_max_length(self)


@dataclass(frozen=True)
class Pattern(Shape):
    """Regular expression matched against the whole lexical form of values."""

    expression: str
    flags: str = ""

    def __post_init__(self):
        if not isinstance(self.expression, str):
            raise TypeError("pattern expression must be a string")
        if not isinstance(self.flags, str):
            raise TypeError("pattern flags must be a string")
        unknown = set(self.flags) - set(REGEX_FLAGS)
        if unknown:
            raise ValueError(f"unknown pattern flags {''.join(sorted(unknown))!r}")
        try:
            self.compile()
        except re.error as e:
            raise ValueError(f"invalid pattern {self.expression!r}: {e}") from e

    def compile(self) -> re.Pattern:
        flags = 0
        for flag in self.flags:
            flags |= REGEX_FLAGS[flag]
        return re.compile(self.expression, flags)

    def accept(self, probe):
        return probe.probe_pattern(self)


@dataclass(frozen=True)
class Like(Shape):
    """Keyword constraint: every word must start a word in the lexical form.

    Without stemming, keywords must also match whole words.
    """

    keywords: str
    stemming: bool = True

    def __post_init__(self):
        if not isinstance(self.keywords, str):
            raise TypeError("like keywords must be a string")
        if not isinstance(self.stemming, bool):
            raise TypeError("like stemming flag must be a bool")
        if not self.tokens():
            raise ValueError(f"no keywords in {self.keywords!r}")

    def tokens(self) -> list[str]:
        return re.findall(r"\w+", self.keywords)

    def expression(self) -> str:
        tail = "" if self.stemming else r"(\W|$)"
        return ".*".join(rf"(^|\W){token}{tail}" for token in self.tokens())

    def compile(self) -> re.Pattern:
        return re.compile(self.expression(), re.IGNORECASE)

    def accept(self, probe):
        return probe.probe_like(self)


# ── Set constraints ───────────────────────────────────────────────


@dataclass(frozen=True)
class MinCount(Shape):
    limit: int

    def __post_init__(self):
        _limit(self.limit, 1, "min count")

    def accept(self, probe):
        return probe.probe_min_count(self)


@dataclass(frozen=True)
class MaxCount(Shape):
    limit: int

    def __post_init__(self):
        _limit(self.limit, 0, "max count")

    def accept(self, probe):
        return probe.probe_max_count(self)


@dataclass(frozen=True)
class In(Shape):
    """Every value must be one of ``values``."""

    values: tuple = _field(default=())

    def __post_init__(self):
        object.__setattr__(self, "values", _terms(self.values))

    def accept(self, probe):
        return probe.probe_in(self)


@dataclass(frozen=True)
class All(Shape):
    """Every one of ``values`` must be present."""

    values: tuple = _field(default=())

    def __post_init__(self):
        object.__setattr__(self, "values", _terms(self.values))

    def accept(self, probe):
        return probe.probe_all(self)


@dataclass(frozen=True)
class Any(Shape):
    """At least one of ``values`` must be present."""

    values: tuple = _field(default=())

    def __post_init__(self):
        object.__setattr__(self, "values", _terms(self.values))

    def accept(self, probe):
        return probe.probe_any(self)


PASS = And()
FAIL = Or()


def is_pass(shape: Shape) -> bool:
    return shape == PASS


def is_fail(shape: Shape) -> bool:
    return shape == FAIL


# ── Factories ─────────────────────────────────────────────────────


def and_(*shapes: Shape) -> Shape:
    """Conjunction of ``shapes``; a single shape is returned unchanged."""
    if len(shapes) == 1:
        return _shape(shapes[0])
    return And(shapes)


def or_(*shapes: Shape) -> Shape:
    """Disjunction of ``shapes``; a single shape is returned unchanged."""
    if len(shapes) == 1:
        return _shape(shapes[0])
    return Or(shapes)


def when(test: Shape, pass_shape: Shape, fail_shape: Shape = PASS) -> Shape:
    return When(test, pass_shape, fail_shape)


def field(step, *shapes: Shape) -> Field:
    """Field traversing ``step`` (an IRI, ``^iri`` text or Step)."""
    return Field(to_step(step), and_(*shapes))


def inverse(iri, *shapes: Shape) -> Field:
    return Field(Step(to_iri(iri), True), and_(*shapes))


def meta(key: str, value) -> Meta:
    return Meta(key, value)


def label(value) -> Meta:
    return Meta("label", value)


def notes(value) -> Meta:
    return Meta("notes", value)


def datatype(iri) -> Datatype:
    return Datatype(iri)


def clazz(iri) -> Clazz:
    return Clazz(iri)


def min_exclusive(value) -> MinExclusive:
    return MinExclusive(value)


def max_exclusive(value) -> MaxExclusive:
    return MaxExclusive(value)


def min_inclusive(value) -> MinInclusive:
    return MinInclusive(value)


def max_inclusive(value) -> MaxInclusive:
    return MaxInclusive(value)


def min_length(limit: int) -> MinLength:
    return MinLength(limit)


def max_length(limit: int) -> MaxLength:
    return MaxLength(limit)


def pattern(expression: str, flags: str = "") -> Pattern:
    return Pattern(expression, flags)


def like(keywords: str, stemming: bool = True) -> Like:
    return Like(keywords, stemming)


def min_count(limit: int) -> Shape:
    """Lower cardinality bound; a zero bound is no constraint at all."""
    if limit == 0 and not isinstance(limit, bool):
        return PASS
    return MinCount(limit)


def max_count(limit: int) -> MaxCount:
    return MaxCount(limit)


def in_(*values) -> In:
    return In(values)


def all_(*values) -> Shape:
    return All(values) if values else PASS


def any_(*values) -> Shape:
    return Any(values) if values else FAIL


def only(*values) -> Shape:
    return and_(all_(*values), in_(*values))


def required() -> Shape:
    return and_(min_count(1), max_count(1))


def optional() -> Shape:
    return max_count(1)


def repeatable() -> Shape:
    return min_count(1)


def multiple() -> Shape:
    return and_()


# ── Guards ────────────────────────────────────────────────────────


def guard(axis: str, *values) -> Guard:
    return Guard(axis, frozenset(values))


def role(*values) -> Guard:
    return guard(ROLE, *values)


def task(*values) -> Guard:
    return guard(TASK, *values)


def view(*values) -> Guard:
    return guard(VIEW, *values)


def mode(*values) -> Guard:
    return guard(MODE, *values)


def create(*shapes: Shape) -> Guard:
    return task(CREATE).then(*shapes)


def relate(*shapes: Shape) -> Guard:
    return task(RELATE).then(*shapes)


def update(*shapes: Shape) -> Guard:
    return task(UPDATE).then(*shapes)


def delete(*shapes: Shape) -> Guard:
    return task(DELETE).then(*shapes)


def server(*shapes: Shape) -> Guard:
    """Shapes enforced on server-managed properties (read and delete only)."""
    return task(RELATE, DELETE).then(*shapes)


def client(*shapes: Shape) -> Guard:
    """Shapes for client-managed properties (never updated)."""
    return task(CREATE, RELATE, DELETE).then(*shapes)


def digest(*shapes: Shape) -> Guard:
    return view(DIGEST).then(*shapes)


def detail(*shapes: Shape) -> Guard:
    return view(DETAIL).then(*shapes)


def convey(*shapes: Shape) -> Guard:
    return mode(CONVEY).then(*shapes)


def filter_(*shapes: Shape) -> Guard:
    return mode(FILTER).then(*shapes)
