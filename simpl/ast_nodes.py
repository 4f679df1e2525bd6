"""simpl AST Node definitions.

Expressions: literals, variables, conditionals, binary operators, lambdas,
applications, let and letrec. Nodes are immutable and own their children;
the tree handed to the inference engine is never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from simpl.errors import MalformedTerm
from simpl.types import Type, INT, FLOAT, BOOL


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

class LiteralKind(Enum):
    INT = "Int"
    FLOAT = "Float"
    BOOL = "Bool"

    @property
    def type(self) -> Type:
        return _LITERAL_TYPES[self]


_LITERAL_TYPES: dict[LiteralKind, Type] = {
    LiteralKind.INT: INT,
    LiteralKind.FLOAT: FLOAT,
    LiteralKind.BOOL: BOOL,
}


# ---------------------------------------------------------------------------
# Binary operators
# ---------------------------------------------------------------------------

class OperandClass(Enum):
    INT = "int"
    FLOAT = "float"
    EQUALITY = "equality"


class BinaryOperator(Enum):
    INT_ADD = "+"
    INT_SUB = "-"
    INT_MUL = "*"
    INT_DIV = "/"
    INT_LT = "<"
    INT_LEQ = "<="
    INT_GT = ">"
    INT_GEQ = ">="
    FLOAT_ADD = "+."
    FLOAT_SUB = "-."
    FLOAT_MUL = "*."
    FLOAT_DIV = "/."
    FLOAT_LT = "<."
    FLOAT_LEQ = "<=."
    FLOAT_GT = ">."
    FLOAT_GEQ = ">=."
    EQ = "=="
    NEQ = "!="

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def operand_class(self) -> OperandClass:
        if self in (BinaryOperator.EQ, BinaryOperator.NEQ):
            return OperandClass.EQUALITY
        if self.name.startswith("FLOAT_"):
            return OperandClass.FLOAT
        return OperandClass.INT

    @property
    def is_comparison(self) -> bool:
        return self.name.endswith(("_LT", "_LEQ", "_GT", "_GEQ")) or \
            self.operand_class is OperandClass.EQUALITY

    def signature(self) -> Optional[tuple[Type, Type]]:
        """Required (operand type, result type), or None for equality.

        Equality operands only have to agree with each other.
        """
        operand_class = self.operand_class
        if operand_class is OperandClass.EQUALITY:
            return None
        operand = INT if operand_class is OperandClass.INT else FLOAT
        return operand, (BOOL if self.is_comparison else operand)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Term:
    """Base class for expressions."""
    pass


@dataclass(frozen=True)
class Literal(Term):
    kind: LiteralKind = LiteralKind.INT
    value: Union[int, float, bool] = 0

    def __post_init__(self) -> None:
        if self.kind is LiteralKind.BOOL:
            ok = isinstance(self.value, bool)
        elif self.kind is LiteralKind.INT:
            ok = isinstance(self.value, int) and not isinstance(self.value, bool)
        else:
            ok = isinstance(self.value, float)
        if not ok:
            raise MalformedTerm(
                f"{self.kind.value} literal cannot hold {self.value!r}", field="value")


@dataclass(frozen=True)
class Variable(Term):
    name: str = ""


@dataclass(frozen=True)
class Conditional(Term):
    test: Term = field(default_factory=Term)
    then: Term = field(default_factory=Term)
    else_: Term = field(default_factory=Term)


@dataclass(frozen=True)
class BinaryOp(Term):
    op: BinaryOperator = BinaryOperator.INT_ADD
    lhs: Term = field(default_factory=Term)
    rhs: Term = field(default_factory=Term)


@dataclass(frozen=True)
class Param:
    name: str
    annotation: Optional[Type] = None


@dataclass(frozen=True)
class Lambda(Term):
    params: tuple[Param, ...] = ()
    body: Term = field(default_factory=Term)


@dataclass(frozen=True)
class Application(Term):
    function: Term = field(default_factory=Term)
    arguments: tuple[Term, ...] = ()


@dataclass(frozen=True)
class Binding:
    name: str
    value: Term
    annotation: Optional[Type] = None


@dataclass(frozen=True)
class Let(Term):
    """Bindings are typed in the outer scope and only visible in ``body``."""
    bindings: tuple[Binding, ...] = ()
    body: Term = field(default_factory=Term)

    def __post_init__(self) -> None:
        if not self.bindings:
            raise MalformedTerm("let needs at least one binding", field="bindings")


@dataclass(frozen=True)
class Letrec(Term):
    """Every bound name is visible in every binding value and in ``body``."""
    bindings: tuple[Binding, ...] = ()
    body: Term = field(default_factory=Term)

    def __post_init__(self) -> None:
        if not self.bindings:
            raise MalformedTerm("letrec needs at least one binding", field="bindings")
        for binding in self.bindings:
            if not isinstance(binding.value, Lambda):
                raise MalformedTerm(
                    f"letrec binding '{binding.name}' must be a lambda", field="bindings")


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def int_lit(value: int) -> Literal:
    return Literal(LiteralKind.INT, value)


def float_lit(value: float) -> Literal:
    return Literal(LiteralKind.FLOAT, value)


def bool_lit(value: bool) -> Literal:
    return Literal(LiteralKind.BOOL, value)


def lam(params: list[Union[str, Param]], body: Term) -> Lambda:
    return Lambda(tuple(p if isinstance(p, Param) else Param(p) for p in params), body)


def app(function: Term, *arguments: Term) -> Application:
    return Application(function, tuple(arguments))
