"""Compilation of shapes into SPARQL graph patterns.

A shape compiles to a list of lines holding triple patterns, filters, value
bindings and optional/union groups, all anchored at a focus variable (``?this``
at the root, ``?v1``, ``?v2`` ... for nested fields).

In filtering mode every constraint restricts the anchor; in projection mode
only field edges are emitted, all of them optional, and the edges are also
collected into a CONSTRUCT template.
"""
from __future__ import annotations

from typing import Optional

from rdflib import RDF, RDFS, BNode

from shapeql.compiler import scribe
from shapeql.compiler.scribe import PrefixMap, var
from shapeql.errors import UnredactedGuardError
from shapeql.probe.inspector import all_of, min_count_of
from shapeql.probe.traverser import Traverser
from shapeql.schema.common import (
    BNODE_TYPE,
    IRI_TYPE,
    LITERAL_TYPE,
    RESOURCE_TYPE,
    VALUE_TYPE,
)
from shapeql.schema.shape import And, Field, Or, Shape

ROOT = "this"

_KINDS = {
    RESOURCE_TYPE: "!isLiteral({})",
    BNODE_TYPE: "isBlank({})",
    IRI_TYPE: "isIRI({})",
    LITERAL_TYPE: "isLiteral({})",
    RDF.langString: 'lang({}) != ""',
}


class _Restricting(Traverser[bool]):
    """Tells whether a shape excludes the absence of values."""

    def probe_shape(self, shape):
        return True

    def probe_meta(self, meta):
        return False

    def probe_guard(self, guard):
        return guard.shape.accept(self)

    def probe_max_count(self, max_count):
        return False

    def probe_datatype(self, datatype):
        return datatype.iri != VALUE_TYPE

    def probe_field(self, field):
        return field.shape.accept(self)

    def probe_and(self, and_):
        return any(shape.accept(self) for shape in and_.shapes)

    def probe_or(self, or_):
        return all(shape.accept(self) for shape in or_.shapes)

    def probe_when(self, when):
        return False


def is_required(shape: Shape) -> bool:
    """Tells whether the values of a field constrained by ``shape`` must exist."""
    return min_count_of(shape) > 0 or shape.accept(_Restricting())


class Scope:
    """State shared by the compilers of a single query."""

    def __init__(self, prefixes: Optional[PrefixMap] = None):
        self.prefixes = prefixes if prefixes is not None else PrefixMap()
        self.template: list[str] = []
        self.counter = 0

    def label(self) -> str:
        self.counter += 1
        return f"v{self.counter}"


class PatternCompiler(Traverser[list]):

    def __init__(self, anchor: str, scope: Scope, filtering: bool = True, root: bool = True):
        self.anchor = anchor
        self.scope = scope
        self.filtering = filtering
        self.root = root

    def _nested(self, anchor: str) -> PatternCompiler:
        return PatternCompiler(anchor, self.scope, self.filtering, root=False)

    def _term(self, value) -> str:
        return self.scope.prefixes.term(value)

    def _constants(self, constraint: str, values) -> list:
        for value in values:
            if isinstance(value, BNode):
                raise ValueError(f"blank node {value.n3()} can't be matched by the {constraint!r} constraint")
        return [self._term(value) for value in values]

    def _filter(self, template: str, value) -> list:
        if not self.filtering:
            return []
        return [scribe.filter_(template.format(var(self.anchor), self._term(value)))]

    # leaves without pattern counterpart: cardinality and annotations

    def probe_shape(self, shape):
        return []

    def probe_guard(self, guard):
        raise UnredactedGuardError(guard)

    def probe_datatype(self, datatype):
        if not self.filtering or datatype.iri == VALUE_TYPE:
            return []
        kind = _KINDS.get(datatype.iri)
        if kind is not None:
            return [scribe.filter_(kind.format(var(self.anchor)))]
        return self._filter("datatype({}) = {}", datatype.iri)

    def probe_clazz(self, clazz):
        if not self.filtering:
            return []
        prefixes = self.scope.prefixes
        return [scribe.edge(
            var(self.anchor),
            f"a/{prefixes.compact(str(RDFS.subClassOf))}*",
            prefixes.term(clazz.iri)
        )]

    def probe_min_exclusive(self, min_exclusive):
        return self._filter("{} > {}", min_exclusive.value)

    def probe_max_exclusive(self, max_exclusive):
        return self._filter("{} < {}", max_exclusive.value)

    def probe_min_inclusive(self, min_inclusive):
        return self._filter("{} >= {}", min_inclusive.value)

    def probe_max_inclusive(self, max_inclusive):
        return self._filter("{} <= {}", max_inclusive.value)

    def probe_min_length(self, min_length):
        if not self.filtering:
            return []
        return [scribe.filter_(f"strlen(str({var(self.anchor)})) >= {min_length.limit}")]

    def probe_max_length(self, max_length):
        if not self.filtering:
            return []
        return [scribe.filter_(f"strlen(str({var(self.anchor)})) <= {max_length.limit}")]

    def probe_pattern(self, pattern):
        if not self.filtering:
            return []
        arguments = [f"str({var(self.anchor)})", scribe.string(f"^({pattern.expression})$")]
        if pattern.flags:
            arguments.append(scribe.string(pattern.flags))
        return [scribe.filter_(f"regex({', '.join(arguments)})")]

    def probe_like(self, like):
        if not self.filtering:
            return []
        expression = scribe.string(like.expression())
        return [scribe.filter_(f'regex(str({var(self.anchor)}), {expression}, "i")')]

    def probe_in(self, in_):
        if not self.filtering:
            return []
        if not in_.values:
            return [scribe.filter_("false")]
        terms = ", ".join(self._constants("in", in_.values))
        return [scribe.filter_(f"{var(self.anchor)} in ({terms})")]

    def probe_all(self, all_):
        # nested universal values are bound as constant field edges
        if not self.filtering or not self.root:
            return []
        return scribe.values(var(self.anchor), self._constants("all", all_.values))

    def probe_any(self, any_):
        if not self.filtering:
            return []
        if not any_.values:
            return [scribe.filter_("false")]
        if self.root:
            return scribe.values(var(self.anchor), self._constants("any", any_.values))
        terms = ", ".join(self._constants("any", any_.values))
        return [scribe.filter_(f"{var(self.anchor)} in ({terms})")]

    def probe_field(self, field: Field):
        shape = field.shape

        if self.filtering and isinstance(shape, Or) and shape.shapes:
            # push the field inside the union
            return scribe.union([
                Field(field.step, arm).accept(self) for arm in shape.shapes
            ])

        label = self.scope.label()
        predicate = self.scope.prefixes.compact(str(field.iri))

        def link(other: str) -> str:
            if field.inverse:
                return scribe.edge(other, predicate, var(self.anchor))
            return scribe.edge(var(self.anchor), predicate, other)

        edges = [link(var(label))]

        if not self.filtering:
            self.scope.template.append(edges[0])
        else:
            edges.extend(link(term) for term in self._constants("all", all_of(shape) or ()))

        lines = edges + shape.accept(self._nested(label))

        if self.filtering and is_required(shape):
            return lines
        return scribe.optional(lines)

    def probe_and(self, and_: And):
        return [line for shape in and_.shapes for line in shape.accept(self)]

    def probe_or(self, or_: Or):
        if not self.filtering:
            return [line for shape in or_.shapes for line in shape.accept(self)]
        if not or_.shapes:
            return [scribe.filter_("false")]
        return scribe.union([shape.accept(self) for shape in or_.shapes])

    def probe_when(self, when):
        if not self.filtering:
            return (
                when.test.accept(self)
                + when.pass_shape.accept(self)
                + when.fail_shape.accept(self)
            )
        return scribe.union([
            when.test.accept(self) + when.pass_shape.accept(self),
            scribe.block(when.test.accept(self), "filter not exists") + when.fail_shape.accept(self),
        ])


def compile_pattern(shape: Shape, anchor: str = ROOT, prefixes: Optional[PrefixMap] = None) -> list:
    """Compile the filtering pattern of ``shape`` anchored at ``?anchor``.

    Returns the pattern lines; an empty shape yields no lines, a failing
    shape yields ``filter (false)``.
    """
    return shape.accept(PatternCompiler(anchor, Scope(prefixes)))
