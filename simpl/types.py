"""simpl Type System.

Base types: Int, Float, Bool
Type variables: t0, t1, ... minted by a per-run TypeVarSupply
Function types: uncurried, parameter count is part of the type
Type environment with copy-on-extend scoping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Optional


# ---------------------------------------------------------------------------
# Type Representations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Type:
    """Base type."""
    def __str__(self) -> str:
        return "Unknown"


@dataclass(frozen=True)
class TypeVariable(Type):
    id: int = 0

    def __str__(self) -> str:
        return f"t{self.id}"


@dataclass(frozen=True)
class TypeConstant(Type):
    name: str = ""

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FunctionType(Type):
    params: tuple[Type, ...] = ()
    result: Type = TypeConstant("Unknown")

    def __str__(self) -> str:
        if len(self.params) == 1:
            param = self.params[0]
            params = f"({param})" if isinstance(param, FunctionType) else str(param)
        else:
            params = "(" + ", ".join(str(p) for p in self.params) + ")"
        return f"{params} -> {self.result}"


# ---------------------------------------------------------------------------
# Built-in Types
# ---------------------------------------------------------------------------

INT = TypeConstant("Int")
FLOAT = TypeConstant("Float")
BOOL = TypeConstant("Bool")

BUILTIN_TYPES: dict[str, TypeConstant] = {
    "Int": INT,
    "Float": FLOAT,
    "Bool": BOOL,
}


def fn(*types: Type) -> FunctionType:
    """Build a function type; the last argument is the result type."""
    *params, result = types
    return FunctionType(tuple(params), result)


def free_type_variables(t: Type) -> set[TypeVariable]:
    if isinstance(t, TypeVariable):
        return {t}
    if isinstance(t, FunctionType):
        found: set[TypeVariable] = set()
        for p in t.params:
            found |= free_type_variables(p)
        return found | free_type_variables(t.result)
    return set()


def occurs(var: TypeVariable, t: Type) -> bool:
    """Check if ``var`` appears anywhere inside ``t``."""
    if isinstance(t, TypeVariable):
        return t == var
    if isinstance(t, FunctionType):
        return any(occurs(var, p) for p in t.params) or occurs(var, t.result)
    return False


def normalize(t: Type) -> Type:
    """Rename type variables to t0, t1, ... in order of first occurrence."""
    renaming: dict[TypeVariable, TypeVariable] = {}

    def walk(t: Type) -> Type:
        if isinstance(t, TypeVariable):
            if t not in renaming:
                renaming[t] = TypeVariable(len(renaming))
            return renaming[t]
        if isinstance(t, FunctionType):
            params = tuple(walk(p) for p in t.params)
            return FunctionType(params, walk(t.result))
        return t

    return walk(t)


# ---------------------------------------------------------------------------
# Fresh-variable supply
# ---------------------------------------------------------------------------

class TypeVarSupply:
    """Hands out type variables never returned before by this supply.

    One supply belongs to one inference run; nothing is shared across runs.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start

    def next(self) -> TypeVariable:
        var = TypeVariable(self._next)
        self._next += 1
        return var

    def peek(self) -> int:
        return self._next


# ---------------------------------------------------------------------------
# Type Environment
# ---------------------------------------------------------------------------

class TypeEnvironment:
    """Scoped mapping from names to types.

    A scope is never modified once built: ``extend`` returns a child scope
    that shadows the parent's entries.
    """

    def __init__(self, bindings: Optional[Mapping[str, Type]] = None,
                 parent: Optional[TypeEnvironment] = None):
        self.parent = parent
        self._variables: dict[str, Type] = dict(bindings or {})

    @classmethod
    def empty(cls) -> TypeEnvironment:
        return cls()

    def extend(self, bindings: Mapping[str, Type]) -> TypeEnvironment:
        return TypeEnvironment(bindings, parent=self)

    def lookup(self, name: str) -> Optional[Type]:
        if name in self._variables:
            return self._variables[name]
        if self.parent:
            return self.parent.lookup(name)
        return None

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def names(self) -> Iterator[str]:
        seen: set[str] = set()
        env: Optional[TypeEnvironment] = self
        while env is not None:
            for name in env._variables:
                if name not in seen:
                    seen.add(name)
                    yield name
            env = env.parent


def prelude() -> TypeEnvironment:
    """Environment holding the built-in functions."""
    return TypeEnvironment({
        "add": fn(INT, INT, INT),
        "sub": fn(INT, INT, INT),
        "mul": fn(INT, INT, INT),
        "is_zero": fn(INT, BOOL),
        "not": fn(BOOL, BOOL),
    })
