"""Tests for outlining statements implied by universal constraints."""
from rdflib import RDF, Graph, Literal, Namespace

from shapeql.probe.outliner import outline
from shapeql.schema.shape import (
    PASS,
    all_,
    and_,
    any_,
    clazz,
    field,
    inverse,
    or_,
    required,
)

EX = Namespace("http://example.org/")


def _triples(graph: Graph) -> set:
    return set(graph)


def test_class_is_outlined_for_sources():
    assert _triples(outline(clazz(EX.Person), EX.x)) == {(EX.x, RDF.type, EX.Person)}


def test_class_is_not_outlined_for_literals():
    assert _triples(outline(clazz(EX.Person), Literal("x"))) == set()


def test_field_values_are_outlined():
    shape = field(EX.knows, all_(EX.y, EX.z))
    assert _triples(outline(shape, EX.x)) == {
        (EX.x, EX.knows, EX.y),
        (EX.x, EX.knows, EX.z),
    }


def test_inverse_field_values_are_outlined():
    shape = inverse(EX.knows, all_(EX.y))
    assert _triples(outline(shape, EX.x)) == {(EX.y, EX.knows, EX.x)}


def test_nested_fields_are_anchored_at_universal_values():
    shape = field(EX.knows, and_(
        all_(EX.y),
        clazz(EX.Person),
        field(EX.name, all_(Literal("Y"))),
    ))

    assert _triples(outline(shape, EX.x)) == {
        (EX.x, EX.knows, EX.y),
        (EX.y, RDF.type, EX.Person),
        (EX.y, EX.name, Literal("Y")),
    }


def test_conjunction_values_become_sources():
    shape = and_(all_(EX.x), clazz(EX.Person))
    assert _triples(outline(shape)) == {(EX.x, RDF.type, EX.Person)}


def test_non_universal_constraints_are_not_outlined():
    assert _triples(outline(field(EX.knows, any_(EX.y)), EX.x)) == set()
    assert _triples(outline(or_(clazz(EX.A), clazz(EX.B)), EX.x)) == set()
    assert _triples(outline(field(EX.name, required()), EX.x)) == set()
    assert _triples(outline(PASS, EX.x)) == set()
