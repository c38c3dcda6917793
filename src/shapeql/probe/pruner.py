"""Removal of non-filtering annotations from shapes."""
from __future__ import annotations

from shapeql.probe.traverser import Transformer
from shapeql.schema.shape import PASS, And, Field, Meta, Or, Shape, When


class Pruner(Transformer):
    """Keeps only the constraints that restrict matching resources.

    Annotations and conditionals are dropped; fields left without
    constraints are dropped as well.
    """

    def probe_meta(self, meta: Meta) -> Shape:
        return PASS

    def probe_when(self, when: When) -> Shape:
        return PASS

    def probe_field(self, field: Field) -> Shape:
        shape = field.shape.accept(self)
        return PASS if shape == PASS else Field(field.step, shape)

    def probe_and(self, and_: And) -> Shape:
        shapes = tuple(
            shape for shape in (member.accept(self) for member in and_.shapes)
            if shape != PASS
        )
        return And(shapes)

    def probe_or(self, or_: Or) -> Shape:
        shapes = tuple(member.accept(self) for member in or_.shapes)
        return PASS if PASS in shapes else Or(shapes)


def prune(shape: Shape) -> Shape:
    return shape.accept(Pruner())
