"""SPARQL query generation for edges, stats and items queries.

The focus is the container whose members are queried: candidates are bound
to ``?this`` through the configured container predicate, restricted by the
filtering view of the query shape (redacted for ``mode=filter``, pruned and
optimized) and described through its conveyed view (redacted for
``mode=convey`` and optimized).
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from rdflib import URIRef

from shapeql.compiler import scribe
from shapeql.compiler.pattern import ROOT, PatternCompiler, Scope
from shapeql.compiler.scribe import PrefixMap, var
from shapeql.config import CompilerConfig
from shapeql.probe.optimizer import optimize
from shapeql.probe.pruner import prune
from shapeql.probe.redactor import redact_mode
from shapeql.schema.common import BNODE_TYPE, CONVEY, FILTER, IRI_TYPE, to_iri
from shapeql.schema.query import Edges, Items, Query, Stats
from shapeql.schema.shape import Shape

logger = logging.getLogger(__name__)

V = TypeVar("V")


class QueryProbe(ABC, Generic[V]):

    @abstractmethod
    def probe_edges(self, edges: Edges) -> V: ...

    @abstractmethod
    def probe_stats(self, stats: Stats) -> V: ...

    @abstractmethod
    def probe_items(self, items: Items) -> V: ...


def filter_shape(shape: Shape) -> Shape:
    """The view of ``shape`` restricting the selected resources."""
    return optimize(prune(redact_mode(shape, FILTER)))


def convey_shape(shape: Shape) -> Shape:
    """The view of ``shape`` describing the selected resources."""
    return optimize(redact_mode(shape, CONVEY))


class SPARQLCompiler(QueryProbe[str]):
    """Compiles queries on the members of a ``focus`` container."""

    def __init__(self, focus, config: Optional[CompilerConfig] = None):
        self.focus: URIRef = to_iri(focus)
        self.config = config if config is not None else CompilerConfig()

    def _scope(self) -> Scope:
        return Scope(PrefixMap(self.config.prefixes))

    def _members(self, scope: Scope, shape: Shape) -> list:
        """Candidate resources bound to ``?this``."""
        prefixes = scope.prefixes
        container = scribe.edge(
            prefixes.term(self.focus), prefixes.term(self.config.container), var(ROOT)
        )
        return [container] + shape.accept(PatternCompiler(ROOT, scope))

    def _sampled(self, scope: Scope, shape: Shape) -> list:
        """Candidate resources, capped to the configured sample size."""
        members = self._members(scope, shape)
        if self.config.sampling <= 0:
            return members
        return scribe.block([
            f"select distinct {var(ROOT)} where {{",
            *scribe.indent(members),
            "}",
            *scribe.limit(0, self.config.sampling),
        ])

    def _path(self, scope: Scope, path: tuple) -> list:
        if not path:
            return [f"bind ({var(ROOT)} as ?value)"]
        return [scribe.edge(var(ROOT), scope.prefixes.path(path), "?value")]

    def _emit(self, kind: str, scope: Scope, lines: list) -> str:
        prologue = scope.prefixes.prologue()
        query = scribe.text(prologue + ([""] if prologue else []) + lines)
        logger.debug("compiled %s query on <%s>:\n%s", kind, self.focus, query)
        return query

    def probe_edges(self, edges: Edges) -> str:
        scope = self._scope()

        filtering = filter_shape(edges.shape)
        projection = convey_shape(edges.shape).accept(
            PatternCompiler(ROOT, scope, filtering=False)
        )

        hooks: list[str] = []
        keys: list[str] = []

        for index, order in enumerate(edges.orders, 1):
            if order.path:
                hook = f"?o{index}"
                hooks.extend(scribe.optional([
                    scribe.edge(var(ROOT), scope.prefixes.path(order.path), hook)
                ]))
                keys.append(scribe.sort(order.inverse, hook))
            else:
                keys.append(scribe.sort(order.inverse, var(ROOT)))

        if not any(not order.path for order in edges.orders):
            keys.append(var(ROOT))

        selection = [
            f"select distinct {var(ROOT)} where {{",
            *scribe.indent(self._members(scope, filtering) + hooks),
            "}",
            f"order by {' '.join(keys)}",
            *scribe.offset(edges.offset),
            *scribe.limit(edges.limit, self.config.sampling),
        ]

        template = [
            scribe.edge(scope.prefixes.term(self.focus), scope.prefixes.term(self.config.container), var(ROOT)),
            *scope.template,
        ]

        return self._emit("edges", scope, [
            *scribe.block(template, "construct"),
            *scribe.block([*scribe.block(selection), *projection], "where"),
        ])

    def probe_stats(self, stats: Stats) -> str:
        scope = self._scope()

        where = [
            *self._sampled(scope, filter_shape(stats.shape)),
            *self._path(scope, stats.path),
            "bind (if(isBlank(?value), {}, if(isIRI(?value), {}, datatype(?value))) as ?type)".format(
                scope.prefixes.term(BNODE_TYPE), scope.prefixes.term(IRI_TYPE)
            ),
        ]

        return self._emit("stats", scope, [
            *scribe.block(where, "select ?type"
                                 " (count(distinct ?value) as ?count)"
                                 " (min(?value) as ?min)"
                                 " (max(?value) as ?max) where"),
            "group by ?type",
            "order by desc(?count) ?type",
        ])

    def probe_items(self, items: Items) -> str:
        scope = self._scope()

        where = [
            *self._sampled(scope, filter_shape(items.shape)),
            *self._path(scope, items.path),
            *scribe.optional([scribe.edge("?value", scope.prefixes.term(self.config.label), "?l")]),
        ]

        return self._emit("items", scope, [
            *scribe.block(where, "select ?value"
                                 " (sample(?l) as ?label)"
                                 " (count(distinct ?this) as ?count) where"),
            "group by ?value",
            "order by desc(?count) ?value",
        ])


def compile_query(focus, query: Query, config: Optional[CompilerConfig] = None) -> str:
    """Compile ``query`` on the members of the ``focus`` container into SPARQL text.

    Guards on axes other than ``mode`` must be redacted beforehand.
    """
    return query.accept(SPARQLCompiler(focus, config))
