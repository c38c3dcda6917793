"""Shared vocabulary, term coercion and path steps."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

from rdflib import BNode, Literal, Namespace, URIRef
from rdflib.term import Node

LDP = Namespace("http://www.w3.org/ns/ldp#")
TERMS = Namespace("https://w3id.org/shapeql/terms#")

# Pseudo-datatypes matching whole term categories
VALUE_TYPE = TERMS.ValueType
RESOURCE_TYPE = TERMS.ResourceType
BNODE_TYPE = TERMS.BNodeType
IRI_TYPE = TERMS.IRIType
LITERAL_TYPE = TERMS.LiteralType

# Guard axes
ROLE = "role"
TASK = "task"
VIEW = "view"
MODE = "mode"

# Task values
CREATE = "create"
RELATE = "relate"
UPDATE = "update"
DELETE = "delete"

# View values
DIGEST = "digest"
DETAIL = "detail"

# Mode values
CONVEY = "convey"
FILTER = "filter"

Term = Union[URIRef, BNode, Literal]


def to_term(value: Any) -> Term:
    """Coerce a Python value to an rdflib term.

    rdflib nodes are returned unchanged; any other value is wrapped into a
    typed literal.
    """
    if value is None:
        raise TypeError("null term")
    if isinstance(value, Node):
        return value
    return Literal(value)


def to_iri(value: Any) -> URIRef:
    """Coerce a string or URIRef to a URIRef."""
    if value is None:
        raise TypeError("null IRI")
    if isinstance(value, URIRef):
        return value
    if isinstance(value, str):
        if not value or any(c.isspace() or c in "<>" for c in value):
            raise ValueError(f"malformed IRI {value!r}")
        return URIRef(value)
    raise TypeError(f"expected IRI, got {type(value).__name__}")


def text(value: Term) -> str:
    """Render a term in N-Triples-like notation for messages."""
    return value.n3()


_STEP_RE = re.compile(r"(\^?)(?:<([^<>]*)>|([^/<>^\s]+))")


@dataclass(frozen=True)
class Step:
    """A predicate traversal, direct or inverse."""

    iri: URIRef
    inverse: bool = False

    def __post_init__(self):
        object.__setattr__(self, "iri", to_iri(self.iri))
        if not isinstance(self.inverse, bool):
            raise TypeError("inverse flag must be a bool")

    def invert(self) -> Step:
        return Step(self.iri, not self.inverse)

    def format(self) -> str:
        iri = str(self.iri)
        if not iri or any(c in "/^" or c.isspace() for c in iri):
            iri = f"<{iri}>"
        return f"^{iri}" if self.inverse else iri

    @classmethod
    def parse(cls, source: str) -> Step:
        match = _STEP_RE.fullmatch(source.strip()) if isinstance(source, str) else None
        if match is None:
            raise ValueError(f"malformed path step {source!r}")
        inverse, quoted, plain = match.groups()
        return cls(URIRef(quoted if quoted is not None else plain), bool(inverse))

    def __str__(self) -> str:
        return self.format()


def to_step(value: Any) -> Step:
    """Coerce a Step, IRI or step text (``^iri`` for inverse) to a Step."""
    if isinstance(value, Step):
        return value
    if isinstance(value, URIRef):
        return Step(value)
    if isinstance(value, str):
        return Step.parse(value)
    raise TypeError(f"expected path step, got {type(value).__name__}")


def format_path(path: tuple[Step, ...]) -> str:
    return "/".join(step.format() for step in path)


def parse_path(source: str) -> tuple[Step, ...]:
    """Parse a ``/``-separated sequence of steps; the empty string is the empty path."""
    if not source:
        return ()

    steps = []
    position = 0

    while True:
        match = _STEP_RE.match(source, position)
        if match is None:
            raise ValueError(f"malformed path {source!r} at offset {position}")
        steps.append(Step.parse(match.group(0)))
        position = match.end()
        if position == len(source):
            return tuple(steps)
        if source[position] != "/":
            raise ValueError(f"malformed path {source!r} at offset {position}")
        position += 1
