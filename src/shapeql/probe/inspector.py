"""Read-only queries over shapes: universal/existential values and cardinality."""
from __future__ import annotations

from typing import Optional

from shapeql.probe.traverser import Traverser
from shapeql.schema.shape import Shape


def _union(groups) -> Optional[tuple]:
    defined = [group for group in groups if group is not None]
    if not defined:
        return None
    return tuple(dict.fromkeys(value for group in defined for value in group))


class _AllValues(Traverser[Optional[tuple]]):

    def probe_all(self, all_):
        return all_.values

    def probe_field(self, field):
        return None

    def probe_and(self, and_):
        return _union(shape.accept(self) for shape in and_.shapes)

    def probe_or(self, or_):
        return None

    def probe_when(self, when):
        return None


class _AnyValues(Traverser[Optional[tuple]]):

    def probe_any(self, any_):
        return any_.values

    def probe_field(self, field):
        return None

    def probe_and(self, and_):
        return _union(shape.accept(self) for shape in and_.shapes)

    def probe_or(self, or_):
        return _union(shape.accept(self) for shape in or_.shapes)

    def probe_when(self, when):
        return None


class _MinCount(Traverser[int]):

    def probe_shape(self, shape):
        return 0

    def probe_min_count(self, min_count):
        return min_count.limit

    def probe_all(self, all_):
        return len(all_.values)

    def probe_any(self, any_):
        return 1 if any_.values else 0

    def probe_field(self, field):
        return 0

    def probe_and(self, and_):
        return max((shape.accept(self) for shape in and_.shapes), default=0)

    def probe_or(self, or_):
        return min((shape.accept(self) for shape in or_.shapes), default=0)

    def probe_when(self, when):
        return min(when.pass_shape.accept(self), when.fail_shape.accept(self))


def all_of(shape: Shape) -> Optional[tuple]:
    """Values every focus set must include, or None if unconstrained."""
    return shape.accept(_AllValues())


def any_of(shape: Shape) -> Optional[tuple]:
    """Values of which focus sets must include at least one, or None."""
    return shape.accept(_AnyValues())


def min_count_of(shape: Shape) -> int:
    """Effective lower bound on the size of focus sets."""
    return shape.accept(_MinCount())
