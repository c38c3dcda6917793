"""Algebraic simplification of shapes."""
from __future__ import annotations

from shapeql.probe.traverser import Transformer
from shapeql.schema.shape import (
    FAIL,
    PASS,
    All,
    And,
    Any,
    Field,
    Guard,
    In,
    Or,
    Shape,
    When,
)


def _dedupe(items) -> tuple:
    return tuple(dict.fromkeys(items))


class Optimizer(Transformer):
    """Rewrites a shape into an equivalent normalized form.

    - nested conjunctions and disjunctions are flattened
    - identity members are dropped, absorbing members collapse the whole
    - duplicate members and values are dropped
    - single-member conjunctions and disjunctions are unwrapped
    - conditionals with a constant test or equal branches are collapsed
    """

    def probe_in(self, in_: In) -> Shape:
        return In(_dedupe(in_.values))

    def probe_all(self, all_: All) -> Shape:
        return All(_dedupe(all_.values))

    def probe_any(self, any_: Any) -> Shape:
        return Any(_dedupe(any_.values))

    def probe_field(self, field: Field) -> Shape:
        return Field(field.step, field.shape.accept(self))

    def probe_guard(self, guard: Guard) -> Shape:
        return Guard(guard.axis, guard.values, guard.shape.accept(self))

    def probe_and(self, and_: And) -> Shape:
        members = []

        for shape in and_.shapes:
            shape = shape.accept(self)
            members.extend(shape.shapes if isinstance(shape, And) else (shape,))

        if FAIL in members:
            return FAIL

        members = _dedupe(members)

        return members[0] if len(members) == 1 else And(members)

    def probe_or(self, or_: Or) -> Shape:
        members = []

        for shape in or_.shapes:
            shape = shape.accept(self)
            members.extend(shape.shapes if isinstance(shape, Or) else (shape,))

        if PASS in members:
            return PASS

        members = _dedupe(members)

        return members[0] if len(members) == 1 else Or(members)

    def probe_when(self, when: When) -> Shape:
        test = when.test.accept(self)
        pass_shape = when.pass_shape.accept(self)
        fail_shape = when.fail_shape.accept(self)

        if test == PASS:
            return pass_shape
        if test == FAIL:
            return fail_shape
        if pass_shape == fail_shape:
            return pass_shape
        return When(test, pass_shape, fail_shape)


def optimize(shape: Shape) -> Shape:
    return shape.accept(Optimizer())
