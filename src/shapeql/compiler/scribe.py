"""SPARQL text fragments: term rendering and line-based block helpers.

Fragments are lists of lines; nesting is expressed by indenting the lines of
inner blocks, so a query is assembled once and joined with newlines.
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Sequence

from rdflib import BNode, Literal, URIRef

from shapeql.schema.common import Step

INDENT = "    "

_LOCAL_NAME = re.compile(r"[A-Za-z_][\w\-]*")


class PrefixMap:
    """Manages IRI-to-prefixed-name resolution and records used prefixes."""

    def __init__(self, prefixes: Mapping[str, str] = None):
        # Sort by longest IRI first to get most specific match
        self.entries = sorted(
            (prefixes or {}).items(),
            key=lambda item: -len(item[1]),
        )
        self.used: dict[str, str] = {}

    def compact(self, iri: str) -> str:
        """Compact a full IRI to a prefixed name, or quote it in angle brackets."""
        for name, namespace in self.entries:
            if iri.startswith(namespace):
                local = iri[len(namespace):]
                if local and _LOCAL_NAME.fullmatch(local):
                    self.used[name] = namespace
                    return f"{name}:{local}"
        return f"<{iri}>"

    def term(self, value) -> str:
        if isinstance(value, URIRef):
            return self.compact(str(value))
        if isinstance(value, Literal) and value.datatype is not None:
            return f"{Literal(str(value)).n3()}^^{self.compact(str(value.datatype))}"
        if isinstance(value, (Literal, BNode)):
            return value.n3()
        raise TypeError(f"unsupported term {value!r}")

    def step(self, step: Step) -> str:
        iri = self.compact(str(step.iri))
        return f"^{iri}" if step.inverse else iri

    def path(self, steps: Sequence[Step]) -> str:
        return "/".join(self.step(step) for step in steps)

    def prologue(self) -> list[str]:
        return [f"prefix {name}: <{namespace}>" for name, namespace in sorted(self.used.items())]


def string(value: str) -> str:
    """Quote a string as a SPARQL literal."""
    return Literal(value).n3()


def var(name: str) -> str:
    return f"?{name}"


def indent(lines: Iterable[str], depth: int = 1) -> list[str]:
    prefix = INDENT * depth
    return [prefix + line if line else line for line in lines]


def block(lines: Sequence[str], head: str = "") -> list[str]:
    opening = f"{head} {{" if head else "{"
    return [opening, *indent(lines), "}"]


def optional(lines: Sequence[str]) -> list[str]:
    return block(lines, "optional")


def union(arms: Sequence[Sequence[str]]) -> list[str]:
    """``{ a } union { b } ...``; a single arm is still wrapped in a group."""
    lines = ["{"]
    for index, arm in enumerate(arms):
        if index:
            lines.append("} union {")
        lines.extend(indent(arm))
    lines.append("}")
    return lines


def filter_(expression: str) -> str:
    return f"filter ({expression})"


def values(variable: str, terms: Iterable[str]) -> list[str]:
    return [f"values {variable} {{", *indent(terms), "}"]


def edge(subject: str, predicate: str, obj: str) -> str:
    return f"{subject} {predicate} {obj} ."


def offset(value: int) -> list[str]:
    return [f"offset {value}"] if value > 0 else []


def limit(value: int, sampling: int = 0) -> list[str]:
    """Limit clause; a positive ``sampling`` caps the limit (0 means none)."""
    if value > 0:
        return [f"limit {min(value, sampling) if sampling > 0 else value}"]
    if sampling > 0:
        return [f"limit {sampling}"]
    return []


def sort(inverse: bool, expression: str) -> str:
    return f"desc({expression})" if inverse else f"asc({expression})"


def text(lines: Iterable[str]) -> str:
    return "\n".join(lines) + "\n"
