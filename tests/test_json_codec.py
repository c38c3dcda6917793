"""Tests for the declarative JSON form of shapes."""
import json

import pytest
from rdflib import XSD, BNode, Literal, Namespace

from shapeql.parser.json_parser import ShapeParseError, parse_shape, parse_shape_file
from shapeql.schema.common import Step
from shapeql.schema.shape import (
    FAIL,
    PASS,
    all_,
    and_,
    any_,
    clazz,
    datatype,
    field,
    guard,
    in_,
    inverse,
    label,
    like,
    max_exclusive,
    max_inclusive,
    max_count,
    max_length,
    min_exclusive,
    min_inclusive,
    min_count,
    min_length,
    optional,
    or_,
    pattern,
    relate,
    required,
    role,
    when,
)
from shapeql.schema.trace import Trace
from shapeql.serializer.json_serializer import serialize_json, serialize_trace, shape_to_dict, term_to_json

EX = Namespace("http://example.org/")

SAMPLE = {
    "and": [
        {"class": "http://example.org/Person"},
        {"field": "<http://example.org/name>", "shape": {"and": [
            {"minCount": 1},
            {"maxCount": 1},
            {"datatype": "http://www.w3.org/2001/XMLSchema#string"},
        ]}},
        {"field": "^<http://example.org/member>", "shape": {"any": [{"@id": "http://example.org/team"}]}},
    ]
}


def _sample():
    return and_(
        clazz(EX.Person),
        field(EX.name, min_count(1), max_count(1), datatype(XSD.string)),
        inverse(EX.member, any_(EX.team)),
    )


# ── Parsing ───────────────────────────────────────────────────────


def test_parse_decoded_object():
    assert parse_shape(SAMPLE) == _sample()


def test_parse_json_text():
    assert parse_shape(json.dumps(SAMPLE)) == _sample()


def test_parse_file(tmp_path):
    path = tmp_path / "shape.json"
    path.write_text(json.dumps(SAMPLE), encoding="utf-8")

    assert parse_shape(str(path)) == _sample()
    assert parse_shape_file(str(path)) == _sample()


def test_parse_field_without_shape():
    assert parse_shape({"field": "ex:name"}) == field("ex:name")


def test_parse_guard():
    shape = parse_shape({"guard": "role", "values": ["admin"], "shape": {"minCount": 1}})
    assert shape == role("admin").then(min_count(1))


def test_parse_guard_terms():
    shape = parse_shape({"guard": "role", "values": [{"@id": "http://example.org/admin"}, "guest"]})
    assert shape == role(EX.admin, "guest")


def test_parse_conditional_with_defaults():
    assert parse_shape({"when": {"minCount": 1}}) == when(min_count(1), PASS, PASS)


@pytest.mark.parametrize("value, term", [
    ({"@id": "http://example.org/x"}, EX.x),
    ({"@id": "_:b0"}, BNode("b0")),
    ({"@value": "chat", "@language": "fr"}, Literal("chat", lang="fr")),
    ({"@value": "2020-01-01", "@type": str(XSD.date)}, Literal("2020-01-01", datatype=XSD.date)),
    ({"@value": "x"}, Literal("x")),
    ("x", Literal("x")),
    (1, Literal(1)),
    (True, Literal(True)),
    (1.5, Literal(1.5)),
])
def test_parse_terms(value, term):
    assert parse_shape({"in": [value]}).values == (term,)


@pytest.mark.parametrize("source", [
    {"unknown": 1},
    {"meta": "label"},
    {"in": "x"},
    {"and": {"minCount": 1}},
    {"in": [None]},
    {"in": [{"@type": "x"}]},
    ["minCount", 1],
    {"minCount": 1, "maxCount": 1},
    {"field": "ex:p", "shape": {"minCount": 1}, "extra": 1},
    {"pattern": "a+", "stemming": False},
    {"minCount": 1, "flags": "i"},
    {"guard": "role", "values": "admin"},
])
def test_malformed_shapes_are_rejected(source):
    with pytest.raises(ShapeParseError):
        parse_shape(json.dumps(source))


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError):
        parse_shape({"minCount": 0})
    with pytest.raises(ValueError):
        parse_shape({"pattern": "(", "flags": ""})


# ── Serialization ─────────────────────────────────────────────────


def test_serialize_sample():
    assert shape_to_dict(_sample()) == SAMPLE


def test_serialize_terms():
    assert term_to_json(EX.x) == {"@id": "http://example.org/x"}
    assert term_to_json(BNode("b0")) == {"@id": "_:b0"}
    assert term_to_json(Literal("chat", lang="fr")) == {"@value": "chat", "@language": "fr"}
    assert term_to_json(Literal("x")) == "x"
    assert term_to_json(Literal(1)) == 1
    assert term_to_json(Literal(False)) is False
    assert term_to_json(Literal("01", datatype=XSD.integer)) == {"@value": "01", "@type": str(XSD.integer)}
    assert term_to_json(Literal("2020-01-01", datatype=XSD.date)) == {
        "@value": "2020-01-01", "@type": str(XSD.date)
    }


def test_serialize_defaults_are_omitted():
    assert shape_to_dict(field(EX.name)) == {"field": "<http://example.org/name>"}
    assert shape_to_dict(pattern("a+")) == {"pattern": "a+"}
    assert shape_to_dict(like("ger")) == {"like": "ger"}
    assert shape_to_dict(like("ger", stemming=False)) == {"like": "ger", "stemming": False}
    assert shape_to_dict(when(optional(), min_length(1))) == {"when": {"maxCount": 1}, "pass": {"minLength": 1}}


def test_serialize_guard_values_are_sorted():
    assert shape_to_dict(role("b", "a").then(optional())) == {
        "guard": "role", "values": ["a", "b"], "shape": {"maxCount": 1}
    }


def test_serialize_guard_terms():
    assert shape_to_dict(role(EX.admin, "guest", Literal(1))) == {
        "guard": "role", "values": [{"@value": 1}, {"@id": "http://example.org/admin"}, "guest"]
    }


def test_serialize_identities():
    assert shape_to_dict(PASS) == {"and": []}
    assert shape_to_dict(FAIL) == {"or": []}


def test_serialize_json_text():
    text = serialize_json(label("Größe"))
    assert json.loads(text) == {"meta": "label", "value": "Größe"}
    assert "Größe" in text


def test_serialize_trace():
    trace = Trace.field(Step(EX.name), Trace.of("value count is not greater than or equal to 1"))
    assert json.loads(serialize_trace(trace)) == {
        "<http://example.org/name>": {"@errors": ["value count is not greater than or equal to 1"]}
    }


# ── Round trips ───────────────────────────────────────────────────


@pytest.mark.parametrize("shape", [
    _sample(),
    or_(datatype(XSD.integer), and_(min_inclusive(0), max_inclusive(10))),
    and_(min_exclusive(Literal("2020-01-01", datatype=XSD.date)), max_exclusive(1.5)),
    and_(min_length(1), max_length(10), pattern("[a-z]+", "i"), like("new york", stemming=False)),
    and_(in_(EX.a, Literal("a", lang="en"), BNode("b")), all_(EX.a), any_(Literal(1), Literal(True))),
    relate(field(Step(EX.knows, True), label("Known by"))),
    when(clazz(EX.Person), required(), FAIL),
    role(EX.admin, "admin").then(required()),
    guard("view", Literal("x"), BNode("b"), 1),
])
def test_round_trip(shape):
    assert parse_shape(serialize_json(shape)) == shape
