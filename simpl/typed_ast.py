"""Typed tree: a term with every sub-expression annotated by its type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from simpl.ast_nodes import Term
from simpl.types import Type


@dataclass(frozen=True)
class TypedTerm:
    """One node of the typed tree.

    ``children`` follow source order (for let and letrec: the binding values,
    then the body). ``bound`` lists the names this node introduces into scope
    together with their types.
    """
    term: Term
    type: Type
    children: tuple[TypedTerm, ...] = ()
    bound: tuple[tuple[str, Type], ...] = ()

    def map_types(self, f: Callable[[Type], Type]) -> TypedTerm:
        return TypedTerm(
            term=self.term,
            type=f(self.type),
            children=tuple(c.map_types(f) for c in self.children),
            bound=tuple((name, f(t)) for name, t in self.bound),
        )

    def walk(self) -> Iterator[TypedTerm]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, term: Term) -> Optional[TypedTerm]:
        """The node built for exactly this term object (identity, not equality)."""
        for node in self.walk():
            if node.term is term:
                return node
        return None

    def binding_type(self, name: str) -> Optional[Type]:
        for bound_name, t in self.bound:
            if bound_name == name:
                return t
        return None
