"""Guard resolution against an axis assignment (role, task, view, mode, ...)."""
from __future__ import annotations

import functools
from typing import Iterable, Mapping, Optional

from shapeql.probe.traverser import Transformer
from shapeql.schema.common import MODE
from shapeql.schema.shape import FAIL, PASS, Guard, Shape

Context = Mapping[str, Iterable]


class Redactor(Transformer):
    """Collapses guards on axes assigned by ``context``.

    Guards on unassigned axes are kept, with their branches redacted.
    """

    def __init__(self, context: Mapping[str, frozenset]):
        self.context = context

    def probe_guard(self, guard: Guard) -> Shape:
        values = self.context.get(guard.axis)

        if values is None:
            return Guard(guard.axis, guard.values, guard.shape.accept(self))
        if values & guard.values:
            return guard.shape.accept(self)
        return FAIL


def _freeze(context: Optional[Context], axes: Context) -> frozenset:
    merged: dict[str, frozenset] = {}

    for source in (context or {}, axes):
        for axis, values in source.items():
            if not isinstance(axis, str):
                raise TypeError(f"axis name must be a string, got {type(axis).__name__}")
            if values is None or isinstance(values, (str, bytes)):
                values = (values,)
            if None in values:
                raise TypeError(f"null value for axis {axis!r}")
            merged[axis] = frozenset(values)

    return frozenset(merged.items())


@functools.lru_cache(maxsize=1024)
def _redact(shape: Shape, context: frozenset) -> Shape:
    return shape.accept(Redactor(dict(context)))


def redact(shape: Shape, context: Optional[Context] = None, **axes) -> Shape:
    """Redact ``shape`` for an axis assignment.

    The assignment is given as a mapping and/or keyword arguments; a single
    string value stands for a one-element set::

        redact(shape, {"role": {"admin"}}, task="relate")
    """
    if not isinstance(shape, Shape):
        raise TypeError(f"expected Shape, got {type(shape).__name__}")
    return _redact(shape, _freeze(context, axes))


class ModeRedactor(Redactor):
    """Derives the filtering or conveyed view of a shape.

    Mode guards not matching the view are dropped instead of failing, so
    filter-only and convey-only members leave the rest of a shape in place;
    guards on other axes are kept.
    """

    def __init__(self, mode: str):
        super().__init__({MODE: frozenset({mode})})

    def probe_guard(self, guard: Guard) -> Shape:
        if guard.axis == MODE and not self.context[MODE] & guard.values:
            return PASS
        return super().probe_guard(guard)


@functools.lru_cache(maxsize=1024)
def redact_mode(shape: Shape, mode: str) -> Shape:
    """Resolve ``mode`` guards of ``shape`` for the ``filter`` or ``convey`` view."""
    if not isinstance(shape, Shape):
        raise TypeError(f"expected Shape, got {type(shape).__name__}")
    return shape.accept(ModeRedactor(mode))
