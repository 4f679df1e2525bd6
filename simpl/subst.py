"""Substitutions: finite maps from type variables to types."""

from __future__ import annotations

from typing import Iterator, Mapping, Optional

from simpl.constraints import Constraint
from simpl.typed_ast import TypedTerm
from simpl.types import Type, TypeVariable, FunctionType


class Substitution:
    """Mapping from type-variable id to Type.

    Values never mention their own key; the unifier's occurs check keeps it
    that way. Instances are not modified after construction: ``extend`` and
    ``compose`` return new substitutions.
    """

    def __init__(self, mapping: Optional[Mapping[int, Type]] = None) -> None:
        self._mapping: dict[int, Type] = dict(mapping or {})

    @classmethod
    def empty(cls) -> Substitution:
        return cls()

    @classmethod
    def single(cls, var: TypeVariable, t: Type) -> Substitution:
        return cls({var.id: t})

    # -- application --------------------------------------------------------

    def apply(self, t: Type) -> Type:
        """Rewrite every mapped variable in ``t``, to a fixed point."""
        if isinstance(t, TypeVariable):
            if t.id in self._mapping:
                return self.apply(self._mapping[t.id])
            return t
        if isinstance(t, FunctionType):
            return FunctionType(tuple(self.apply(p) for p in t.params), self.apply(t.result))
        return t

    def apply_constraint(self, constraint: Constraint) -> Constraint:
        return Constraint(self.apply(constraint.left), self.apply(constraint.right),
                          constraint.origin)

    def apply_constraints(self, constraints: list[Constraint]) -> list[Constraint]:
        return [self.apply_constraint(c) for c in constraints]

    def apply_typed(self, typed: TypedTerm) -> TypedTerm:
        return typed.map_types(self.apply)

    # -- construction -------------------------------------------------------

    def extend(self, var: TypeVariable, t: Type) -> Substitution:
        """Add ``var := t`` and rewrite existing values so the result stays idempotent."""
        binding = Substitution.single(var, t)
        mapping = {k: binding.apply(v) for k, v in self._mapping.items()}
        mapping[var.id] = t
        return Substitution(mapping)

    def compose(self, other: Substitution) -> Substitution:
        """Apply ``self`` first, then ``other``; ``other`` wins on shared keys."""
        mapping = {k: other.apply(v) for k, v in self._mapping.items()}
        mapping.update(other._mapping)
        return Substitution(mapping)

    # -- mapping protocol ---------------------------------------------------

    def get(self, var: TypeVariable) -> Optional[Type]:
        return self._mapping.get(var.id)

    def items(self) -> list[tuple[TypeVariable, Type]]:
        return [(TypeVariable(k), v) for k, v in sorted(self._mapping.items())]

    def __contains__(self, var: object) -> bool:
        return isinstance(var, TypeVariable) and var.id in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __iter__(self) -> Iterator[TypeVariable]:
        return (TypeVariable(k) for k in sorted(self._mapping))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Substitution):
            return NotImplemented
        return self._mapping == other._mapping

    def __repr__(self) -> str:
        return f"Substitution({self._mapping!r})"

    def __str__(self) -> str:
        pairs = ", ".join(f"{var} := {t}" for var, t in self.items())
        return "{" + pairs + "}"
