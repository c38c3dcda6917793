"""Validation trace: issues at a node plus nested traces keyed by field label."""
from __future__ import annotations

from dataclasses import dataclass, field as _field
from typing import Iterable, Mapping

from shapeql.schema.common import Step


def _dedupe(issues: Iterable[str]) -> tuple:
    seen = dict.fromkeys(issue for issue in issues if issue)
    return tuple(seen)


@dataclass(frozen=True)
class Trace:
    """Immutable tree of validation issues.

    Empty traces are never stored as field entries, so ``is_empty()`` on the
    root tells whether validation succeeded.
    """

    issues: tuple = ()
    fields: Mapping[str, "Trace"] = _field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "issues", _dedupe(self.issues))
        object.__setattr__(self, "fields", {
            str(label): trace for label, trace in self.fields.items()
            if not trace.is_empty()
        })

    def __hash__(self):
        return hash((self.issues, tuple(sorted(self.fields.items(), key=lambda item: item[0]))))

    @classmethod
    def of(cls, *issues: str) -> Trace:
        return cls(issues)

    @classmethod
    def field(cls, label, trace: Trace) -> Trace:
        """Trace holding ``trace`` under ``label`` (a string or a Step)."""
        if isinstance(label, Step):
            label = label.format()
        return cls((), {label: trace})

    @classmethod
    def merge(cls, traces: Iterable[Trace]) -> Trace:
        issues: list[str] = []
        fields: dict[str, Trace] = {}

        for trace in traces:
            issues.extend(trace.issues)
            for label, nested in trace.fields.items():
                fields[label] = fields[label] + nested if label in fields else nested

        return cls(tuple(issues), fields)

    def __add__(self, other: Trace) -> Trace:
        if not isinstance(other, Trace):
            return NotImplemented
        return Trace.merge((self, other))

    def is_empty(self) -> bool:
        return not self.issues and not self.fields

    def to_dict(self) -> dict:
        """JSON projection: ``@errors`` for issues, one nested object per field."""
        d: dict = {}
        if self.issues:
            d["@errors"] = list(self.issues)
        for label, trace in self.fields.items():
            d[label] = trace.to_dict()
        return d

    def __str__(self) -> str:
        lines = [f"- {issue}" for issue in self.issues]
        for label, trace in self.fields.items():
            lines.append(f"{label}:")
            lines.extend(f"  {line}" for line in str(trace).splitlines())
        return "\n".join(lines)


EMPTY = Trace()
