"""simpl Unification: Robinson (1965) with occurs check.

Constraints are solved strictly in the order they were generated, threading
one substitution through the whole list. There is no backtracking, so the
first conflicting constraint is the one reported.

    unify(t, t)                 = S
    unify(a, tau)               = S . [a := tau]   if a not in FV(tau)
    unify(C, C)                 = S
    unify((p1..pn) -> r, (q1..qn) -> s) = unify(p1, q1) ... unify(r, s)
    unify(_, _)                 = FAIL
"""

from __future__ import annotations

import logging
from typing import Iterable

from simpl.constraints import Constraint
from simpl.errors import ArityMismatch, InferenceError, InfiniteType, TypeMismatch
from simpl.subst import Substitution
from simpl.types import Type, TypeVariable, TypeConstant, FunctionType, occurs

logger = logging.getLogger(__name__)


class Unifier:
    """Solves a constraint list into a most general substitution."""

    def __init__(self) -> None:
        self.steps = 0

    def solve(self, constraints: Iterable[Constraint]) -> Substitution:
        subst = Substitution.empty()
        for constraint in constraints:
            try:
                subst = self.unify(constraint.left, constraint.right, subst)
            except InferenceError as e:
                raise e.with_constraint(constraint)
        return subst

    def unify(self, a: Type, b: Type, subst: Substitution) -> Substitution:
        self.steps += 1
        a = subst.apply(a)
        b = subst.apply(b)

        if isinstance(a, TypeVariable):
            return self._bind(a, b, subst)
        if isinstance(b, TypeVariable):
            return self._bind(b, a, subst)

        if isinstance(a, TypeConstant) and isinstance(b, TypeConstant):
            if a.name == b.name:
                return subst
            raise TypeMismatch(a, b)

        if isinstance(a, FunctionType) and isinstance(b, FunctionType):
            if len(a.params) != len(b.params):
                raise ArityMismatch(len(a.params), len(b.params))
            for p1, p2 in zip(a.params, b.params):
                subst = self.unify(p1, p2, subst)
            return self.unify(a.result, b.result, subst)

        raise TypeMismatch(a, b)

    def _bind(self, var: TypeVariable, t: Type, subst: Substitution) -> Substitution:
        if t == var:
            return subst
        if occurs(var, t):
            raise InfiniteType(var, t)
        logger.debug("bind %s := %s", var, t)
        return subst.extend(var, t)


def solve(constraints: Iterable[Constraint]) -> Substitution:
    return Unifier().solve(constraints)
