"""Structured error objects for the simpl type-inference engine.

Every error is machine-readable: each one carries an ErrorKind and a
``details`` dict holding the data needed to build a diagnostic (the unbound
name, the two conflicting types, the two arities). Formatting for humans is
left to the caller.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from simpl.constraints import Constraint
    from simpl.types import Type, TypeVariable


class ErrorKind(Enum):
    UNBOUND_VARIABLE = "unbound_variable"
    TYPE_MISMATCH = "type_mismatch"
    ARITY_MISMATCH = "arity_mismatch"
    INFINITE_TYPE = "infinite_type"
    MALFORMED_TERM = "malformed_term"
    TERM_TOO_DEEP = "term_too_deep"


class InferenceError(Exception):
    """Base class for everything the engine reports."""

    kind: ErrorKind = ErrorKind.TYPE_MISMATCH

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.constraint: Optional[Constraint] = None

    def with_constraint(self, constraint: Constraint) -> InferenceError:
        """Attach the constraint whose solving raised this error."""
        self.constraint = constraint
        if constraint.origin is not None:
            self.details["origin"] = type(constraint.origin).__name__
        return self

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.details:
            d["details"] = self.details
        if self.constraint is not None:
            d["constraint"] = str(self.constraint)
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        return f"[{self.kind.value}]: {self.message}"


class UnboundVariable(InferenceError):
    kind = ErrorKind.UNBOUND_VARIABLE

    def __init__(self, name: str):
        super().__init__(f"Unbound variable '{name}'", {"name": name})
        self.name = name


class TypeMismatch(InferenceError):
    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, type_a: Type, type_b: Type):
        super().__init__(
            f"Cannot unify '{type_a}' with '{type_b}'",
            {"type_a": str(type_a), "type_b": str(type_b)},
        )
        self.type_a = type_a
        self.type_b = type_b


class ArityMismatch(InferenceError):
    kind = ErrorKind.ARITY_MISMATCH

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Function arity {expected} does not match arity {actual}",
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class InfiniteType(InferenceError):
    kind = ErrorKind.INFINITE_TYPE

    def __init__(self, variable: TypeVariable, type: Type):
        super().__init__(
            f"Infinite type: '{variable}' occurs in '{type}'",
            {"variable": str(variable), "type": str(type)},
        )
        self.variable = variable
        self.type = type


class MalformedTerm(InferenceError):
    """The term tree handed to the engine breaks its input contract."""

    kind = ErrorKind.MALFORMED_TERM

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class TermTooDeep(InferenceError):
    """The term nests deeper than the interpreter's recursion limit allows."""

    kind = ErrorKind.TERM_TOO_DEEP

    def __init__(self, limit: int):
        super().__init__(
            f"Term is nested too deeply to check (recursion limit {limit})",
            {"limit": limit},
        )
        self.limit = limit
