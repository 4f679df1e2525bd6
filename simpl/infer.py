"""simpl type inference driver.

    term -> constraints (+ root type) -> substitution -> principal type

Each call owns a fresh TypeVarSupply, so results are reproducible for a
fixed term and independent calls share no state. Let-bound names are
monomorphic: a binding's type is fixed once and reused at every use site.

Every pass is a recursive walk, so a term nested past the interpreter's
recursion limit is reported as TermTooDeep.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Optional

from simpl.ast_nodes import Term
from simpl.constraints import Constraint, ConstraintGenerator
from simpl.errors import TermTooDeep
from simpl.subst import Substitution
from simpl.typed_ast import TypedTerm
from simpl.types import Type, TypeEnvironment, TypeVarSupply
from simpl.unify import Unifier

logger = logging.getLogger(__name__)


@dataclass
class InferenceResult:
    type: Type
    substitution: Substitution
    typed_term: TypedTerm
    constraints: list[Constraint] = field(default_factory=list)
    unification_steps: int = 0

    @property
    def summary(self) -> str:
        return (f"{self.type} ({len(self.constraints)} constraints, "
                f"{self.unification_steps} unification steps)")


def _root_env(env: Optional[TypeEnvironment]) -> TypeEnvironment:
    return env if env is not None else TypeEnvironment.empty()


def typecheck(term: Term, env: Optional[TypeEnvironment] = None) -> Type:
    """Principal type of ``term``; raises an InferenceError subclass on failure."""
    try:
        root_type, constraints = ConstraintGenerator(TypeVarSupply()).infer(_root_env(env), term)
        return Unifier().solve(constraints).apply(root_type)
    except RecursionError:
        raise TermTooDeep(sys.getrecursionlimit()) from None


def infer_types(term: Term, env: Optional[TypeEnvironment] = None) -> InferenceResult:
    """Run inference and keep everything a downstream consumer may want."""
    try:
        return _infer_types(term, _root_env(env))
    except RecursionError:
        raise TermTooDeep(sys.getrecursionlimit()) from None


def _infer_types(term: Term, env: TypeEnvironment) -> InferenceResult:
    generator = ConstraintGenerator(TypeVarSupply())
    typed, constraints = generator.annotate(env, term)
    logger.debug("generated %d constraints, %d type variables",
                 len(constraints), generator.supply.peek())

    unifier = Unifier()
    subst = unifier.solve(constraints)
    logger.debug("solved in %d unification steps", unifier.steps)

    resolved = subst.apply_typed(typed)
    return InferenceResult(
        type=resolved.type,
        substitution=subst,
        typed_term=resolved,
        constraints=constraints,
        unification_steps=unifier.steps,
    )


def annotate(term: Term, env: Optional[TypeEnvironment] = None) -> TypedTerm:
    """Typed copy of ``term`` with every sub-expression's resolved type."""
    return infer_types(term, env).typed_term
