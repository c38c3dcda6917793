"""Serialize shapes and validation traces to JSON."""
from __future__ import annotations

import json

from rdflib import XSD, BNode, Literal, URIRef

from shapeql.probe.traverser import Probe
from shapeql.schema.shape import PASS, Shape
from shapeql.schema.trace import Trace

# Datatypes whose canonical literals map to bare JSON scalars
_NATIVE = {
    XSD.boolean: bool,
    XSD.integer: int,
    XSD.double: float,
}


def term_to_json(value):
    """Encode a term as a bare JSON scalar or a JSON-LD value object."""
    if isinstance(value, URIRef):
        return {"@id": str(value)}
    if isinstance(value, BNode):
        return {"@id": f"_:{value}"}
    if value.language:
        return {"@value": str(value), "@language": value.language}
    if value.datatype is None or value.datatype == XSD.string:
        return str(value)

    kind = _NATIVE.get(value.datatype)
    native = value.toPython()

    if kind is not None and type(native) is kind and str(Literal(native)) == str(value):
        return native

    return {"@value": str(value), "@type": str(value.datatype)}


def _guard_value(value):
    if not isinstance(value, (URIRef, BNode, Literal)):
        return value
    # RDF terms are always objects, so plain strings keep reading back as strings
    encoded = term_to_json(value)
    return encoded if isinstance(encoded, dict) else {"@value": encoded}


def _nested(d: dict, key: str, shape: Shape, probe: Probe) -> dict:
    if shape != PASS:
        d[key] = shape.accept(probe)
    return d


class ShapeSerializer(Probe[dict]):
    """Converts shapes to their declarative JSON form."""

    def probe_meta(self, meta):
        return {"meta": meta.key, "value": term_to_json(meta.value)}

    def probe_guard(self, guard):
        values = sorted(guard.values, key=lambda value: (type(value).__name__, str(value)))
        d = {"guard": guard.axis, "values": [_guard_value(value) for value in values]}
        return _nested(d, "shape", guard.shape, self)

    def probe_datatype(self, datatype):
        return {"datatype": str(datatype.iri)}

    def probe_clazz(self, clazz):
        return {"class": str(clazz.iri)}

    def probe_min_exclusive(self, min_exclusive):
        return {"minExclusive": term_to_json(min_exclusive.value)}

    def probe_max_exclusive(self, max_exclusive):
        return {"maxExclusive": term_to_json(max_exclusive.value)}

    def probe_min_inclusive(self, min_inclusive):
        return {"minInclusive": term_to_json(min_inclusive.value)}

    def probe_max_inclusive(self, max_inclusive):
        return {"maxInclusive": term_to_json(max_inclusive.value)}

    def probe_min_length(self, min_length):
        return {"minLength": min_length.limit}

    def probe_max_length(self, max_length):
        return {"maxLength": max_length.limit}

    def probe_pattern(self, pattern):
        d = {"pattern": pattern.expression}
        if pattern.flags:
            d["flags"] = pattern.flags
        return d

    def probe_like(self, like):
        d = {"like": like.keywords}
        if not like.stemming:
            d["stemming"] = False
        return d

    def probe_min_count(self, min_count):
        return {"minCount": min_count.limit}

    def probe_max_count(self, max_count):
        return {"maxCount": max_count.limit}

    def probe_in(self, in_):
        return {"in": [term_to_json(value) for value in in_.values]}

    def probe_all(self, all_):
        return {"all": [term_to_json(value) for value in all_.values]}

    def probe_any(self, any_):
        return {"any": [term_to_json(value) for value in any_.values]}

    def probe_field(self, field):
        return _nested({"field": field.step.format()}, "shape", field.shape, self)

    def probe_and(self, and_):
        return {"and": [shape.accept(self) for shape in and_.shapes]}

    def probe_or(self, or_):
        return {"or": [shape.accept(self) for shape in or_.shapes]}

    def probe_when(self, when):
        d = {"when": when.test.accept(self)}
        _nested(d, "pass", when.pass_shape, self)
        _nested(d, "fail", when.fail_shape, self)
        return d


def shape_to_dict(shape: Shape) -> dict:
    return shape.accept(ShapeSerializer())


def serialize_json(shape: Shape) -> str:
    """Serialize a shape to a JSON string.

    Args:
        shape: The shape to serialize.

    Returns:
        Pretty-printed JSON string.
    """
    return json.dumps(shape_to_dict(shape), indent=2, ensure_ascii=False)


def serialize_trace(trace: Trace) -> str:
    """Serialize a validation trace to its JSON projection."""
    return json.dumps(trace.to_dict(), indent=2, ensure_ascii=False)
