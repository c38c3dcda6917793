"""Probe contract for shape variants, plus the two base probes.

``Probe`` declares one method per variant; ``shape.accept(probe)`` calls the
method matching the shape's own variant. ``Traverser`` routes every
annotation, term and set constraint through ``probe_shape`` so concrete
probes only handle the variants they care about. ``Transformer`` rebuilds
shapes from transformed children.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from shapeql.schema.shape import (
    All,
    And,
    Any,
    Clazz,
    Datatype,
    Field,
    Guard,
    In,
    Like,
    MaxCount,
    MaxExclusive,
    MaxInclusive,
    MaxLength,
    Meta,
    MinCount,
    MinExclusive,
    MinInclusive,
    MinLength,
    Or,
    Pattern,
    Shape,
    When,
)

V = TypeVar("V")


class Probe(ABC, Generic[V]):

    @abstractmethod
    def probe_meta(self, meta: Meta) -> V: ...

    @abstractmethod
    def probe_guard(self, guard: Guard) -> V: ...

    @abstractmethod
    def probe_datatype(self, datatype: Datatype) -> V: ...

    @abstractmethod
    def probe_clazz(self, clazz: Clazz) -> V: ...

    @abstractmethod
    def probe_min_exclusive(self, min_exclusive: MinExclusive) -> V: ...

    @abstractmethod
    def probe_max_exclusive(self, max_exclusive: MaxExclusive) -> V: ...

    @abstractmethod
    def probe_min_inclusive(self, min_inclusive: MinInclusive) -> V: ...

    @abstractmethod
    def probe_max_inclusive(self, max_inclusive: MaxInclusive) -> V: ...

    @abstractmethod
    def probe_min_length(self, min_length: MinLength) -> V: ...

    @abstractmethod
    def probe_max_length(self, max_length: MaxLength) -> V: ...

    @abstractmethod
    def probe_pattern(self, pattern: Pattern) -> V: ...

    @abstractmethod
    def probe_like(self, like: Like) -> V: ...

    @abstractmethod
    def probe_min_count(self, min_count: MinCount) -> V: ...

    @abstractmethod
    def probe_max_count(self, max_count: MaxCount) -> V: ...

    @abstractmethod
    def probe_in(self, in_: In) -> V: ...

    @abstractmethod
    def probe_all(self, all_: All) -> V: ...

    @abstractmethod
    def probe_any(self, any_: Any) -> V: ...

    @abstractmethod
    def probe_field(self, field: Field) -> V: ...

    @abstractmethod
    def probe_and(self, and_: And) -> V: ...

    @abstractmethod
    def probe_or(self, or_: Or) -> V: ...

    @abstractmethod
    def probe_when(self, when: When) -> V: ...


class Traverser(Probe[V]):
    """Probe with a single fallback for non-structural variants."""

    def probe_shape(self, shape: Shape) -> Optional[V]:
        return None

    def probe_meta(self, meta):
        return self.probe_shape(meta)

    def probe_guard(self, guard):
        return self.probe_shape(guard)

    def probe_datatype(self, datatype):
        return self.probe_shape(datatype)

    def probe_clazz(self, clazz):
        return self.probe_shape(clazz)

    def probe_min_exclusive(self, min_exclusive):
        return self.probe_shape(min_exclusive)

    def probe_max_exclusive(self, max_exclusive):
        return self.probe_shape(max_exclusive)

    def probe_min_inclusive(self, min_inclusive):
        return self.probe_shape(min_inclusive)

    def probe_max_inclusive(self, max_inclusive):
        return self.probe_shape(max_inclusive)

    def probe_min_length(self, min_length):
        return self.probe_shape(min_length)

    def probe_max_length(self, max_length):
        return self.probe_shape(max_length)

    def probe_pattern(self, pattern):
        return self.probe_shape(pattern)

    def probe_like(self, like):
        return self.probe_shape(like)

    def probe_min_count(self, min_count):
        return self.probe_shape(min_count)

    def probe_max_count(self, max_count):
        return self.probe_shape(max_count)

    def probe_in(self, in_):
        return self.probe_shape(in_)

    def probe_all(self, all_):
        return self.probe_shape(all_)

    def probe_any(self, any_):
        return self.probe_shape(any_)


class Transformer(Traverser[Shape]):
    """Structure-preserving rewrite; leaves are returned unchanged."""

    def probe_shape(self, shape: Shape) -> Shape:
        return shape

    def probe_guard(self, guard: Guard) -> Shape:
        return Guard(guard.axis, guard.values, guard.shape.accept(self))

    def probe_field(self, field: Field) -> Shape:
        return Field(field.step, field.shape.accept(self))

    def probe_and(self, and_: And) -> Shape:
        return And(tuple(shape.accept(self) for shape in and_.shapes))

    def probe_or(self, or_: Or) -> Shape:
        return Or(tuple(shape.accept(self) for shape in or_.shapes))

    def probe_when(self, when: When) -> Shape:
        return When(
            when.test.accept(self),
            when.pass_shape.accept(self),
            when.fail_shape.accept(self),
        )
