"""Property-Based Tests for simpl Type Inference.

Laws checked over generated, well-scoped terms:

  1. Literal soundness: every literal types as its base type.
  2. Determinism: two runs over the same term give identical outcomes.
  3. Solution soundness: the solved substitution equates both sides of
     every generated constraint.
  4. Resolution: the principal type mentions no solved variable, and the
     typed tree agrees with ``typecheck`` at the root.

References:
  Robinson (1965) JACM: A Machine-Oriented Logic Based on the Resolution Principle
  Pottier & Remy (2005): The Essence of ML Type Inference
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from simpl.ast_nodes import (
    BinaryOp, BinaryOperator, Binding, Conditional, Lambda, Let, Letrec, Param, Variable,
    Application, bool_lit, float_lit, int_lit,
)
from simpl.errors import InferenceError
from simpl.infer import infer_types, typecheck
from simpl.types import BOOL, FLOAT, INT, free_type_variables


NAMES = ["a", "b", "c", "f", "g"]


# ---------------------------------------------------------------------------
# Hypothesis strategies
# ---------------------------------------------------------------------------

literals = st.one_of(
    st.integers().map(int_lit),
    st.floats(allow_nan=False).map(float_lit),
    st.booleans().map(bool_lit),
)


@st.composite
def terms(draw, scope: tuple[str, ...] = (), depth: int = 3):
    if depth == 0 or draw(st.integers(min_value=0, max_value=3)) == 0:
        if scope and draw(st.booleans()):
            return Variable(draw(st.sampled_from(scope)))
        return draw(literals)

    kind = draw(st.sampled_from(["if", "binop", "lambda", "app", "let", "letrec"]))
    sub = depth - 1

    if kind == "if":
        return Conditional(draw(terms(scope, sub)), draw(terms(scope, sub)),
                           draw(terms(scope, sub)))
    if kind == "binop":
        op = draw(st.sampled_from(list(BinaryOperator)))
        return BinaryOp(op, draw(terms(scope, sub)), draw(terms(scope, sub)))
    if kind == "lambda":
        return draw(lambdas(scope, sub))
    if kind == "app":
        args = draw(st.lists(terms(scope, sub), max_size=2))
        return Application(draw(terms(scope, sub)), tuple(args))

    names = draw(st.lists(st.sampled_from(NAMES), min_size=1, max_size=2, unique=True))
    if kind == "let":
        bindings = tuple(Binding(n, draw(terms(scope, sub))) for n in names)
        return Let(bindings, draw(terms(scope + tuple(names), sub)))
    inner = scope + tuple(names)
    bindings = tuple(Binding(n, draw(lambdas(inner, sub))) for n in names)
    return Letrec(bindings, draw(terms(inner, sub)))


@st.composite
def lambdas(draw, scope: tuple[str, ...], depth: int):
    params = draw(st.lists(st.sampled_from(NAMES), max_size=2, unique=True))
    body = draw(terms(scope + tuple(params), depth))
    return Lambda(tuple(Param(p) for p in params), body)


def outcome(term):
    try:
        return "ok", typecheck(term)
    except InferenceError as e:
        return "error", e.kind


# ---------------------------------------------------------------------------
# Laws
# ---------------------------------------------------------------------------

class TestLiteralSoundness:

    @given(st.integers())
    def test_int(self, n):
        assert typecheck(int_lit(n)) == INT

    @given(st.floats(allow_nan=False))
    def test_float(self, x):
        assert typecheck(float_lit(x)) == FLOAT

    @given(st.booleans())
    def test_bool(self, b):
        assert typecheck(bool_lit(b)) == BOOL


class TestDeterminism:

    @settings(max_examples=200)
    @given(terms())
    def test_same_outcome_twice(self, term):
        assert outcome(term) == outcome(term)


class TestSolutionSoundness:

    @settings(max_examples=200)
    @given(terms())
    def test_substitution_satisfies_constraints(self, term):
        try:
            result = infer_types(term)
        except InferenceError:
            return
        subst = result.substitution
        for constraint in result.constraints:
            assert subst.apply(constraint.left) == subst.apply(constraint.right)

    @settings(max_examples=200)
    @given(terms())
    def test_principal_type_is_resolved(self, term):
        try:
            result = infer_types(term)
        except InferenceError:
            return
        assert not any(v in result.substitution for v in free_type_variables(result.type))
        assert result.typed_term.type == result.type == typecheck(term)
