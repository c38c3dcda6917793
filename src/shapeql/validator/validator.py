"""Validation of RDF descriptions against shapes.

Each probe checks the current focus set: the values reached from the
validated resource along the fields traversed so far. Violations are
collected into a :class:`~shapeql.schema.trace.Trace`, never raised.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional, Union

from rdflib import RDF, RDFS, XSD, BNode, Graph, Literal, URIRef

from shapeql.errors import UnredactedGuardError
from shapeql.probe.traverser import Traverser
from shapeql.schema.common import (
    BNODE_TYPE,
    IRI_TYPE,
    LITERAL_TYPE,
    RESOURCE_TYPE,
    VALUE_TYPE,
    text,
    to_term,
)
from shapeql.schema.shape import Shape
from shapeql.schema.trace import EMPTY, Trace

logger = logging.getLogger(__name__)

NO_ALTERNATIVE = "values don't match any alternative"


def _values(values) -> str:
    return ", ".join(text(value) for value in values)


def _has_datatype(value, iri: URIRef) -> bool:
    if iri == VALUE_TYPE:
        return True
    if iri == RESOURCE_TYPE:
        return isinstance(value, (URIRef, BNode))
    if iri == BNODE_TYPE:
        return isinstance(value, BNode)
    if iri == IRI_TYPE:
        return isinstance(value, URIRef)
    if iri == LITERAL_TYPE:
        return isinstance(value, Literal)
    if not isinstance(value, Literal):
        return False
    if value.language:
        return iri == RDF.langString
    return (value.datatype or XSD.string) == iri


def _numeric(value) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _native(value: Literal):
    native = value.toPython()
    if isinstance(native, Literal):
        # plain strings convert to themselves, ill-typed values have no native form
        return str(value) if value.datatype in (None, XSD.string) else None
    return native


def _compare(value, limit: Literal) -> Optional[int]:
    """Order ``value`` against ``limit``; None if they are not comparable."""
    if not isinstance(value, Literal) or not isinstance(limit, Literal):
        return None

    x = _native(value)
    y = _native(limit)

    if x is None or y is None:
        return None

    if not (_numeric(x) and _numeric(y)):
        if (value.datatype or XSD.string) != (limit.datatype or XSD.string):
            return None
        if value.language != limit.language:
            return None

    try:
        return (x > y) - (x < y)
    except TypeError:
        return None


class Validator(Traverser[Trace]):

    def __init__(self, graph: Graph, focus: Iterable):
        self.graph = graph
        self.focus = tuple(dict.fromkeys(focus))

    def _check(self, accept, message) -> Trace:
        return Trace(tuple(message(value) for value in self.focus if not accept(value)))

    def probe_shape(self, shape):
        return EMPTY

    def probe_guard(self, guard):
        raise UnredactedGuardError(guard)

    def probe_datatype(self, datatype):
        return self._check(
            lambda value: _has_datatype(value, datatype.iri),
            lambda value: f"{text(value)} is not of datatype {text(datatype.iri)}"
        )

    def probe_clazz(self, clazz):

        def instance(value) -> bool:
            if isinstance(value, Literal):
                return False
            return any(
                clazz.iri in self.graph.transitive_objects(kind, RDFS.subClassOf)
                for kind in self.graph.objects(value, RDF.type)
            )

        return self._check(
            instance,
            lambda value: f"{text(value)} is not an instance of {text(clazz.iri)}"
        )

    def probe_min_exclusive(self, min_exclusive):
        limit = min_exclusive.value
        return self._check(
            lambda value: (_compare(value, limit) or 0) > 0,
            lambda value: f"{text(value)} is not strictly greater than {text(limit)}"
        )

    def probe_max_exclusive(self, max_exclusive):
        limit = max_exclusive.value
        return self._check(
            lambda value: (_compare(value, limit) or 0) < 0,
            lambda value: f"{text(value)} is not strictly less than {text(limit)}"
        )

    def probe_min_inclusive(self, min_inclusive):
        limit = min_inclusive.value
        return self._check(
            lambda value: _compare(value, limit) in (0, 1),
            lambda value: f"{text(value)} is not greater than or equal to {text(limit)}"
        )

    def probe_max_inclusive(self, max_inclusive):
        limit = max_inclusive.value
        return self._check(
            lambda value: _compare(value, limit) in (-1, 0),
            lambda value: f"{text(value)} is not less than or equal to {text(limit)}"
        )

    def probe_min_length(self, min_length):
        limit = min_length.limit
        return self._check(
            lambda value: len(str(value)) >= limit,
            lambda value: f"{text(value)} length is not greater than or equal to {limit}"
        )

    def probe_max_length(self, max_length):
        limit = max_length.limit
        return self._check(
            lambda value: len(str(value)) <= limit,
            lambda value: f"{text(value)} length is not less than or equal to {limit}"
        )

    def probe_pattern(self, pattern):
        compiled = pattern.compile()
        return self._check(
            lambda value: compiled.fullmatch(str(value)) is not None,
            lambda value: f"{text(value)} textual value doesn't match <{pattern.expression}> pattern"
        )

    def probe_like(self, like):
        compiled = like.compile()
        return self._check(
            lambda value: compiled.search(str(value)) is not None,
            lambda value: f"{text(value)} textual value doesn't match <{like.keywords}> keywords"
        )

    def probe_min_count(self, min_count):
        if len(self.focus) >= min_count.limit:
            return EMPTY
        return Trace.of(f"value count is not greater than or equal to {min_count.limit}")

    def probe_max_count(self, max_count):
        if len(self.focus) <= max_count.limit:
            return EMPTY
        return Trace.of(f"value count is not less than or equal to {max_count.limit}")

    def probe_in(self, in_):
        accepted = set(in_.values)
        return self._check(
            lambda value: value in accepted,
            lambda value: f"{text(value)} is not in the expected value range {{{_values(in_.values)}}}"
        )

    def probe_all(self, all_):
        if set(all_.values) <= set(self.focus):
            return EMPTY
        return Trace.of(f"values don't include all the expected set {{{_values(all_.values)}}}")

    def probe_any(self, any_):
        if set(any_.values) & set(self.focus):
            return EMPTY
        return Trace.of(f"values don't include at least one of the expected set {{{_values(any_.values)}}}")

    def probe_field(self, field):
        traces = []

        for value in self.focus:
            if field.inverse:
                reached = self.graph.subjects(field.iri, value)
            else:
                reached = self.graph.objects(value, field.iri)
            traces.append(field.shape.accept(Validator(self.graph, reached)))

        return Trace.field(field.step, Trace.merge(traces))

    def probe_and(self, and_):
        return Trace.merge(shape.accept(self) for shape in and_.shapes)

    def probe_or(self, or_):
        traces = [shape.accept(self) for shape in or_.shapes]

        if any(trace.is_empty() for trace in traces):
            return EMPTY

        return Trace((NO_ALTERNATIVE,), {f"#{index}": trace for index, trace in enumerate(traces)})

    def probe_when(self, when):
        branch = when.pass_shape if when.test.accept(self).is_empty() else when.fail_shape
        return branch.accept(self)


def _graph(data: Union[Graph, Iterable[tuple]]) -> Graph:
    if isinstance(data, Graph):
        return data
    graph = Graph()
    for triple in data:
        graph.add(triple)
    return graph


def validate(shape: Shape, focus, data: Union[Graph, Iterable[tuple]]) -> Trace:
    """Validate the description of ``focus`` in ``data`` against ``shape``.

    Args:
        shape: A shape without unresolved guards.
        focus: The resource (or value) being validated.
        data: An rdflib Graph or an iterable of triples.

    Returns:
        The validation trace; an empty trace means the description is valid.
    """
    if not isinstance(shape, Shape):
        raise TypeError(f"expected Shape, got {type(shape).__name__}")

    focus = to_term(focus)
    trace = shape.accept(Validator(_graph(data), (focus,)))

    if trace.is_empty():
        logger.debug("%s is valid", text(focus))
    else:
        logger.debug("%s is not valid:\n%s", text(focus), trace)

    return trace
