"""Parse declarative JSON shape definitions into shapes.

Each shape is a JSON object whose naming key selects the variant, e.g.::

    {"field": "<http://schema.org/name>", "shape": {"and": [
        {"minCount": 1},
        {"datatype": "http://www.w3.org/2001/XMLSchema#string"}
    ]}}

Terms are JSON-LD value objects (``{"@id": ...}``, ``{"@value": ...,
"@type": ...}``, ``{"@value": ..., "@language": ...}``) or bare JSON scalars,
read as literals.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Union

from rdflib import BNode, Literal, URIRef

from shapeql.schema.common import Term
from shapeql.schema.shape import (
    PASS,
    All,
    And,
    Any,
    Clazz,
    Datatype,
    Field,
    Guard,
    In,
    Like,
    MaxCount,
    MaxExclusive,
    MaxInclusive,
    MaxLength,
    Meta,
    MinCount,
    MinExclusive,
    MinInclusive,
    MinLength,
    Or,
    Pattern,
    Shape,
    When,
)

logger = logging.getLogger(__name__)


class ShapeParseError(ValueError):
    pass


def _parse_term(value) -> Term:
    if isinstance(value, dict):
        if "@id" in value:
            iri = value["@id"]
            return BNode(iri[2:]) if iri.startswith("_:") else URIRef(iri)
        if "@value" in value:
            lexical = value["@value"]
            if "@language" in value:
                return Literal(lexical, lang=value["@language"])
            if "@type" in value:
                return Literal(str(lexical), datatype=URIRef(value["@type"]))
            return Literal(lexical)
        raise ShapeParseError(f"malformed term {value!r}")
    if isinstance(value, (str, bool, int, float)):
        return Literal(value)
    raise ShapeParseError(f"malformed term {value!r}")


def _parse_terms(d: dict, key: str) -> tuple:
    values = d[key]
    if not isinstance(values, list):
        raise ShapeParseError(f"'{key}' requires a list of terms")
    return tuple(_parse_term(value) for value in values)


def _parse_shapes(d: dict, key: str) -> tuple:
    shapes = d[key]
    if not isinstance(shapes, list):
        raise ShapeParseError(f"'{key}' requires a list of shapes")
    return tuple(parse_shape_dict(shape) for shape in shapes)


def _parse_nested(d: dict, key: str) -> Shape:
    return parse_shape_dict(d[key]) if key in d else PASS


# naming keys and the further keys each variant accepts
_KEYS = {
    "and": (), "or": (),
    "when": ("pass", "fail"),
    "field": ("shape",),
    "meta": ("value",),
    "guard": ("values", "shape"),
    "datatype": (), "class": (),
    "minExclusive": (), "maxExclusive": (), "minInclusive": (), "maxInclusive": (),
    "minLength": (), "maxLength": (),
    "pattern": ("flags",),
    "like": ("stemming",),
    "minCount": (), "maxCount": (),
    "in": (), "all": (), "any": (),
}


def _check_keys(d: dict):
    names = [key for key in d if key in _KEYS]
    if not names:
        raise ShapeParseError(f"unknown shape {d!r}")
    if len(names) > 1:
        raise ShapeParseError(f"ambiguous shape {d!r}: conflicting keys {names}")
    extra = set(d) - {names[0], *_KEYS[names[0]]}
    if extra:
        raise ShapeParseError(f"unexpected keys {sorted(extra)} in '{names[0]}' shape {d!r}")


def _parse_guard_values(d: dict) -> list:
    values = d.get("values", [])
    if not isinstance(values, list):
        raise ShapeParseError("'values' requires a list")
    # RDF terms are JSON-LD objects, plain values are kept as they are
    return [_parse_term(value) if isinstance(value, dict) else value for value in values]


def parse_shape_dict(d: dict) -> Shape:
    """Parse a single shape object."""
    if not isinstance(d, dict):
        raise ShapeParseError(f"expected shape object, got {type(d).__name__}")

    _check_keys(d)

    try:

        if "and" in d:
            return And(_parse_shapes(d, "and"))
        elif "or" in d:
            return Or(_parse_shapes(d, "or"))
        elif "when" in d:
            return When(parse_shape_dict(d["when"]), _parse_nested(d, "pass"), _parse_nested(d, "fail"))
        elif "field" in d:
            return Field(d["field"], _parse_nested(d, "shape"))
        elif "meta" in d:
            return Meta(d["meta"], _parse_term(d["value"]))
        elif "guard" in d:
            return Guard(d["guard"], _parse_guard_values(d), _parse_nested(d, "shape"))
        elif "datatype" in d:
            return Datatype(d["datatype"])
        elif "class" in d:
            return Clazz(d["class"])
        elif "minExclusive" in d:
            return MinExclusive(_parse_term(d["minExclusive"]))
        elif "maxExclusive" in d:
            return MaxExclusive(_parse_term(d["maxExclusive"]))
        elif "minInclusive" in d:
            return MinInclusive(_parse_term(d["minInclusive"]))
        elif "maxInclusive" in d:
            return MaxInclusive(_parse_term(d["maxInclusive"]))
        elif "minLength" in d:
            return MinLength(d["minLength"])
        elif "maxLength" in d:
            return MaxLength(d["maxLength"])
        elif "pattern" in d:
            return Pattern(d["pattern"], d.get("flags", ""))
        elif "like" in d:
            return Like(d["like"], d.get("stemming", True))
        elif "minCount" in d:
            return MinCount(d["minCount"])
        elif "maxCount" in d:
            return MaxCount(d["maxCount"])
        elif "in" in d:
            return In(_parse_terms(d, "in"))
        elif "all" in d:
            return All(_parse_terms(d, "all"))
        elif "any" in d:
            return Any(_parse_terms(d, "any"))

    except KeyError as e:
        raise ShapeParseError(f"missing {e} in shape {d!r}") from e
    except TypeError as e:
        raise ShapeParseError(f"malformed shape {d!r}: {e}") from e

    raise ShapeParseError(f"unknown shape {d!r}")


def parse_shape(source: Union[str, dict]) -> Shape:
    """Parse a JSON shape string, file path or decoded object into a Shape.

    Args:
        source: JSON string, file path or already decoded JSON object.

    Returns:
        The parsed shape.
    """
    if isinstance(source, dict):
        data = source
    elif os.path.isfile(source):
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        data = json.loads(source)

    shape = parse_shape_dict(data)
    logger.debug("parsed shape %r", shape)
    return shape


def parse_shape_file(filepath: str) -> Shape:
    """Parse a JSON shape file from a file path."""
    with open(filepath, "r", encoding="utf-8") as f:
        return parse_shape_dict(json.load(f))
