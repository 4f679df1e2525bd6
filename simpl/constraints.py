"""simpl Constraint Generation.

Walks a term once, gives every sub-expression a type (a known one or a fresh
type variable) and records the type equalities the term requires. Nothing is
solved here: mismatches only show up when the unifier runs over the list.

Typing rules (Pottier & Remy 2005, "The Essence of ML Type Inference"):

    literal        : its base type
    x              : env(x), or UnboundVariable
    if c then a else b : c = Bool, a = b; type of a
    a op b         : operand/result types fixed by the operator class
    \\(x1..xn) -> e : (t1..tn) -> type(e), ti from annotation or fresh
    f(a1..an)      : type(f) = (type(a1)..type(an)) -> r, r fresh
    let            : values typed in the outer scope, monomorphic in body
    letrec         : one placeholder per name, visible everywhere in the node
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from simpl.ast_nodes import (
    Term, Literal, Variable, Conditional, BinaryOp, Lambda, Application, Let, Letrec,
)
from simpl.errors import MalformedTerm, UnboundVariable
from simpl.typed_ast import TypedTerm
from simpl.types import (
    Type, FunctionType, TypeEnvironment, TypeVarSupply, BOOL,
)


@dataclass(frozen=True)
class Constraint:
    """Two types asserted equal, and the term whose rule asked for it."""
    left: Type
    right: Type
    origin: Optional[Term] = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"{self.left} = {self.right}"


class ConstraintGenerator:
    """Generates constraints for one inference run."""

    def __init__(self, supply: Optional[TypeVarSupply] = None) -> None:
        self.supply = supply if supply is not None else TypeVarSupply()

    def infer(self, env: TypeEnvironment, term: Term) -> tuple[Type, list[Constraint]]:
        typed, constraints = self.annotate(env, term)
        return typed.type, constraints

    def annotate(self, env: TypeEnvironment, term: Term) -> tuple[TypedTerm, list[Constraint]]:
        """Like ``infer`` but keeps the (unsolved) type of every sub-expression."""
        constraints: list[Constraint] = []
        typed = self._visit(env, term, constraints)
        return typed, constraints

    def _visit(self, env: TypeEnvironment, term: Term, out: list[Constraint]) -> TypedTerm:
        if isinstance(term, Literal):
            return TypedTerm(term, term.kind.type)

        if isinstance(term, Variable):
            t = env.lookup(term.name)
            if t is None:
                raise UnboundVariable(term.name)
            return TypedTerm(term, t)

        if isinstance(term, Conditional):
            test = self._visit(env, term.test, out)
            then = self._visit(env, term.then, out)
            else_ = self._visit(env, term.else_, out)
            out.append(Constraint(test.type, BOOL, term))
            out.append(Constraint(then.type, else_.type, term))
            return TypedTerm(term, then.type, (test, then, else_))

        if isinstance(term, BinaryOp):
            return self._visit_binary_op(env, term, out)

        if isinstance(term, Lambda):
            param_types: list[Type] = []
            for param in term.params:
                param_types.append(param.annotation if param.annotation is not None
                                   else self.supply.next())
            bound = tuple((p.name, t) for p, t in zip(term.params, param_types))
            body = self._visit(env.extend(dict(bound)), term.body, out)
            return TypedTerm(term, FunctionType(tuple(param_types), body.type), (body,), bound)

        if isinstance(term, Application):
            function = self._visit(env, term.function, out)
            args = [self._visit(env, arg, out) for arg in term.arguments]
            result = self.supply.next()
            expected = FunctionType(tuple(a.type for a in args), result)
            out.append(Constraint(function.type, expected, term))
            return TypedTerm(term, result, (function, *args))

        if isinstance(term, Let):
            values: list[TypedTerm] = []
            for binding in term.bindings:
                value = self._visit(env, binding.value, out)
                if binding.annotation is not None:
                    out.append(Constraint(value.type, binding.annotation, term))
                values.append(value)
            bound = tuple((b.name, v.type) for b, v in zip(term.bindings, values))
            body = self._visit(env.extend(dict(bound)), term.body, out)
            return TypedTerm(term, body.type, (*values, body), bound)

        if isinstance(term, Letrec):
            bound = tuple((b.name, self.supply.next()) for b in term.bindings)
            inner = env.extend(dict(bound))
            values = []
            for binding, (_, placeholder) in zip(term.bindings, bound):
                value = self._visit(inner, binding.value, out)
                out.append(Constraint(placeholder, value.type, term))
                if binding.annotation is not None:
                    out.append(Constraint(placeholder, binding.annotation, term))
                values.append(value)
            body = self._visit(inner, term.body, out)
            return TypedTerm(term, body.type, (*values, body), bound)

        raise MalformedTerm(f"Unknown term {type(term).__name__}")

    def _visit_binary_op(self, env: TypeEnvironment, term: BinaryOp,
                         out: list[Constraint]) -> TypedTerm:
        lhs = self._visit(env, term.lhs, out)
        rhs = self._visit(env, term.rhs, out)
        signature = term.op.signature()
        if signature is None:
            out.append(Constraint(lhs.type, rhs.type, term))
            result: Type = BOOL
        else:
            operand, result = signature
            out.append(Constraint(lhs.type, operand, term))
            out.append(Constraint(rhs.type, operand, term))
        return TypedTerm(term, result, (lhs, rhs))
