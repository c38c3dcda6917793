"""Statements implied by universal constraints, anchored at source nodes."""
from __future__ import annotations

from typing import Iterator

from rdflib import RDF, Graph, Literal

from shapeql.probe.inspector import all_of
from shapeql.probe.traverser import Traverser
from shapeql.schema.shape import And, Clazz, Field, Shape


class Outliner(Traverser[Iterator[tuple]]):

    def __init__(self, sources: tuple = ()):
        self.sources = sources

    def probe_shape(self, shape: Shape) -> Iterator[tuple]:
        return iter(())

    def probe_clazz(self, clazz: Clazz) -> Iterator[tuple]:
        for source in self.sources:
            if not isinstance(source, Literal):
                yield source, RDF.type, clazz.iri

    def probe_field(self, field: Field) -> Iterator[tuple]:
        for value in all_of(field.shape) or ():
            for source in self.sources:
                subject, obj = (value, source) if field.inverse else (source, value)
                if not isinstance(subject, Literal):
                    yield subject, field.iri, obj

        yield from field.shape.accept(Outliner())

    def probe_and(self, and_: And) -> Iterator[tuple]:
        for shape in and_.shapes:
            yield from shape.accept(self)

        values = all_of(and_)

        if values:
            nested = Outliner(values)
            for shape in and_.shapes:
                yield from shape.accept(nested)

    def probe_or(self, or_):
        return iter(())

    def probe_when(self, when):
        return iter(())


def outline(shape: Shape, *sources) -> Graph:
    """Build the graph of statements implied by ``shape`` for ``sources``."""
    graph = Graph()
    for triple in shape.accept(Outliner(sources)):
        graph.add(triple)
    return graph
