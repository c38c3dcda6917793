"""Tests for algebraic shape simplification."""
from hypothesis import given, strategies as st
from rdflib import XSD, Literal, Namespace

from shapeql.probe.optimizer import optimize
from shapeql.schema.shape import (
    FAIL,
    PASS,
    All,
    And,
    Any,
    Field,
    Guard,
    In,
    Or,
    When,
    clazz,
    datatype,
    field,
    max_count,
    min_count,
    role,
)

EX = Namespace("http://example.org/")

x = datatype(XSD.string)
y = clazz(EX.Person)
z = min_count(1)


class TestConjunctions:

    def test_identity_members_are_dropped(self):
        assert optimize(And((x, PASS))) == optimize(x) == x

    def test_nested_conjunctions_are_flattened(self):
        assert optimize(And((x, And((y, And((z,))))))) == And((x, y, z))

    def test_duplicates_are_dropped(self):
        assert optimize(And((x, y, x))) == And((x, y))

    def test_fail_member_absorbs(self):
        assert optimize(And((x, FAIL, y))) == FAIL

    def test_empty_stays_pass(self):
        assert optimize(And(())) == PASS


class TestDisjunctions:

    def test_fail_members_are_dropped(self):
        assert optimize(Or((x, FAIL))) == x

    def test_nested_disjunctions_are_flattened(self):
        assert optimize(Or((x, Or((y, z))))) == Or((x, y, z))

    def test_duplicates_are_dropped(self):
        assert optimize(Or((x, y, y))) == Or((x, y))

    def test_pass_member_absorbs(self):
        assert optimize(Or((x, PASS))) == PASS

    def test_empty_stays_fail(self):
        assert optimize(Or(())) == FAIL


class TestConditionals:

    def test_constant_pass_test(self):
        assert optimize(When(PASS, x, y)) == x

    def test_constant_fail_test(self):
        assert optimize(When(FAIL, x, y)) == y

    def test_test_simplifying_to_constant(self):
        assert optimize(When(And((PASS, PASS)), x, y)) == x

    def test_equal_branches(self):
        assert optimize(When(z, x, x)) == x

    def test_regular_conditional_is_kept(self):
        assert optimize(When(z, x, y)) == When(z, x, y)


def test_duplicate_values_are_dropped():
    assert optimize(In((Literal(1), Literal(2), Literal(1)))) == In((Literal(1), Literal(2)))
    assert optimize(All((EX.a, EX.a))) == All((EX.a,))
    assert optimize(Any((EX.b, EX.a, EX.b))) == Any((EX.b, EX.a))


def test_fields_and_guards_are_optimized_recursively():
    assert optimize(field(EX.name, And((x, PASS)))) == Field(EX.name, x)
    assert optimize(role("admin").then(And((x, x)))) == Guard("role", frozenset({"admin"}), x)


def test_leaves_are_unchanged():
    assert optimize(max_count(1)) == max_count(1)


# ── Laws ──────────────────────────────────────────────────────────

_leaves = st.sampled_from([PASS, FAIL, x, y, z, In((Literal(1), Literal(1)))])


def _extend(children):
    return st.one_of(
        st.builds(lambda shapes: And(tuple(shapes)), st.lists(children, max_size=4)),
        st.builds(lambda shapes: Or(tuple(shapes)), st.lists(children, max_size=4)),
        st.builds(lambda s: field(EX.p, s), children),
        st.builds(When, children, children, children),
    )


shapes = st.recursive(_leaves, _extend, max_leaves=16)


@given(shapes)
def test_optimization_is_idempotent(shape):
    once = optimize(shape)
    assert optimize(once) == once


@given(shapes)
def test_pass_is_conjunction_identity(shape):
    assert optimize(And((shape, PASS))) == optimize(shape)


@given(shapes)
def test_fail_is_disjunction_identity(shape):
    assert optimize(Or((shape, FAIL))) == optimize(shape)
