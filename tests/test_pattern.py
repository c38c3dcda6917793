"""Tests for compiling shapes into SPARQL graph patterns."""
import pytest
from rdflib import XSD, BNode, Namespace

from shapeql.compiler.pattern import compile_pattern, is_required
from shapeql.compiler.scribe import PrefixMap
from shapeql.errors import UnredactedGuardError
from shapeql.schema.common import IRI_TYPE, VALUE_TYPE
from shapeql.schema.shape import (
    FAIL,
    PASS,
    all_,
    and_,
    any_,
    clazz,
    datatype,
    field,
    in_,
    inverse,
    label,
    like,
    max_count,
    max_length,
    min_count,
    min_inclusive,
    min_length,
    or_,
    pattern,
    required,
    role,
    when,
)

EX = Namespace("http://example.org/")

NAME = "<http://example.org/name>"
STRING = "<http://www.w3.org/2001/XMLSchema#string>"


# ── Identities ────────────────────────────────────────────────────


def test_pass_compiles_to_empty_pattern():
    assert compile_pattern(PASS) == []


def test_fail_compiles_to_unsatisfiable_filter():
    assert compile_pattern(FAIL) == ["filter (false)"]


def test_fail_inside_fields_is_kept():
    assert compile_pattern(field(EX.name, FAIL)) == [f"?this {NAME} ?v1 .", "filter (false)"]


# ── Cardinality ───────────────────────────────────────────────────


class TestCardinality:

    def test_required_field_is_not_optional(self):
        assert compile_pattern(field(EX.name, required())) == [f"?this {NAME} ?v1 ."]

    def test_min_count_field_is_not_optional(self):
        lines = compile_pattern(field(EX.name, min_count(1)))
        assert not any("optional" in line for line in lines)

    def test_unbounded_field_is_optional(self):
        assert compile_pattern(field(EX.name, and_(max_count(1), min_count(0)))) == [
            "optional {",
            f"    ?this {NAME} ?v1 .",
            "}",
        ]

    def test_constrained_field_is_not_optional(self):
        assert compile_pattern(field(EX.name, datatype(XSD.string))) == [
            f"?this {NAME} ?v1 .",
            f"filter (datatype(?v1) = {STRING})",
        ]

    def test_requirement(self):
        assert is_required(required())
        assert is_required(FAIL)
        assert is_required(field(EX.name, min_count(1)))
        assert not is_required(max_count(1))
        assert not is_required(label("x"))
        assert not is_required(datatype(VALUE_TYPE))
        assert not is_required(or_(datatype(XSD.string), max_count(1)))


# ── Logical ───────────────────────────────────────────────────────


def test_conjunction_concatenates_patterns():
    assert compile_pattern(and_(field(EX.name, required()), field(EX.age, required()))) == [
        f"?this {NAME} ?v1 .",
        "?this <http://example.org/age> ?v2 .",
    ]


def test_disjunction_compiles_to_union_in_declaration_order():
    lines = compile_pattern(or_(field(EX.a, required()), field(EX.b, required())))

    assert lines == [
        "{",
        "    ?this <http://example.org/a> ?v1 .",
        "} union {",
        "    ?this <http://example.org/b> ?v2 .",
        "}",
    ]
    assert sum(line == "} union {" for line in lines) == 1


def test_union_keeps_arms_without_variables():
    lines = compile_pattern(or_(datatype(XSD.string), PASS, field(EX.b, required())))
    assert lines == [
        "{",
        f"    filter (datatype(?this) = {STRING})",
        "} union {",
        "} union {",
        "    ?this <http://example.org/b> ?v1 .",
        "}",
    ]


def test_field_is_pushed_inside_union():
    lines = compile_pattern(field(EX.name, or_(datatype(XSD.string), datatype(XSD.integer))))
    assert lines == [
        "{",
        f"    ?this {NAME} ?v1 .",
        f"    filter (datatype(?v1) = {STRING})",
        "} union {",
        f"    ?this {NAME} ?v2 .",
        "    filter (datatype(?v2) = <http://www.w3.org/2001/XMLSchema#integer>)",
        "}",
    ]


def test_conditional_compiles_to_union_with_negated_test():
    lines = compile_pattern(when(datatype(XSD.string), max_length(10), min_length(1)))
    assert lines == [
        "{",
        f"    filter (datatype(?this) = {STRING})",
        "    filter (strlen(str(?this)) <= 10)",
        "} union {",
        "    filter not exists {",
        f"        filter (datatype(?this) = {STRING})",
        "    }",
        "    filter (strlen(str(?this)) >= 1)",
        "}",
    ]


# ── Term constraints ──────────────────────────────────────────────


@pytest.mark.parametrize("shape, expected", [
    (datatype(IRI_TYPE), "filter (isIRI(?this))"),
    (min_inclusive(1), 'filter (?this >= "1"^^<http://www.w3.org/2001/XMLSchema#integer>)'),
    (min_length(3), "filter (strlen(str(?this)) >= 3)"),
    (max_length(5), "filter (strlen(str(?this)) <= 5)"),
    (pattern("a+", "i"), 'filter (regex(str(?this), "^(a+)$", "i"))'),
    (pattern("a+"), 'filter (regex(str(?this), "^(a+)$"))'),
    (in_(EX.a, EX.b), "filter (?this in (<http://example.org/a>, <http://example.org/b>))"),
    (in_(), "filter (false)"),
])
def test_term_constraints_compile_to_filters(shape, expected):
    assert compile_pattern(shape) == [expected]


def test_value_type_is_unconstrained():
    assert compile_pattern(datatype(VALUE_TYPE)) == []


def test_like_compiles_to_case_insensitive_regex():
    [line] = compile_pattern(like("ger"))
    assert line.startswith("filter (regex(str(?this), ")
    assert line.endswith(', "i"))')


def test_class_compiles_to_hierarchy_traversal():
    assert compile_pattern(clazz(EX.Person)) == [
        "?this a/<http://www.w3.org/2000/01/rdf-schema#subClassOf>* <http://example.org/Person> ."
    ]


def test_cardinality_and_annotations_emit_nothing():
    assert compile_pattern(and_(min_count(1), max_count(3), label("x"))) == []


# ── Set constraints ───────────────────────────────────────────────


def test_root_universal_values_are_bound():
    assert compile_pattern(all_(EX.a, EX.b)) == [
        "values ?this {",
        "    <http://example.org/a>",
        "    <http://example.org/b>",
        "}",
    ]


def test_root_existential_values_are_bound():
    assert compile_pattern(any_(EX.a)) == ["values ?this {", "    <http://example.org/a>", "}"]


def test_nested_universal_values_are_constant_edges():
    assert compile_pattern(field(EX.knows, all_(EX.a))) == [
        "?this <http://example.org/knows> ?v1 .",
        "?this <http://example.org/knows> <http://example.org/a> .",
    ]


def test_nested_existential_values_are_filtered():
    assert compile_pattern(field(EX.knows, any_(EX.a, EX.b))) == [
        "?this <http://example.org/knows> ?v1 .",
        "filter (?v1 in (<http://example.org/a>, <http://example.org/b>))",
    ]


def test_inverse_fields_swap_roles():
    assert compile_pattern(inverse(EX.knows, required())) == ["?v1 <http://example.org/knows> ?this ."]


def test_nested_fields_chain_variables():
    assert compile_pattern(field(EX.address, required(), field(EX.city, required()))) == [
        "?this <http://example.org/address> ?v1 .",
        "?v1 <http://example.org/city> ?v2 .",
    ]


# ── Prefixes ──────────────────────────────────────────────────────


def test_prefixed_names():
    prefixes = PrefixMap({"ex": str(EX), "xsd": str(XSD)})

    assert compile_pattern(field(EX.name, datatype(XSD.string)), prefixes=prefixes) == [
        "?this ex:name ?v1 .",
        "filter (datatype(?v1) = xsd:string)",
    ]
    assert prefixes.prologue() == [
        "prefix ex: <http://example.org/>",
        "prefix xsd: <http://www.w3.org/2001/XMLSchema#>",
    ]


# ── Errors ────────────────────────────────────────────────────────


def test_unredacted_guards_are_rejected():
    with pytest.raises(UnredactedGuardError):
        compile_pattern(field(EX.name, role("admin").then(required())))


@pytest.mark.parametrize("shape", [
    field(EX.p, in_(EX.a, BNode("b1"))),
    any_(BNode("b1")),
    field(EX.p, any_(BNode("b1"))),
    all_(BNode("b1")),
    field(EX.p, all_(BNode("b1"))),
])
def test_blank_node_values_are_rejected(shape):
    with pytest.raises(ValueError, match="_:b1"):
        compile_pattern(shape)
