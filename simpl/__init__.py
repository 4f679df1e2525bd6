"""simpl: Hindley-Milner type inference for a small expression language"""

__version__ = "0.1.0"

from simpl.errors import (
    InferenceError, UnboundVariable, TypeMismatch, ArityMismatch, InfiniteType, MalformedTerm,
    TermTooDeep,
)
from simpl.infer import InferenceResult, annotate, infer_types, typecheck
from simpl.types import TypeEnvironment, prelude

__all__ = [
    "InferenceError", "UnboundVariable", "TypeMismatch", "ArityMismatch", "InfiniteType",
    "MalformedTerm", "TermTooDeep", "InferenceResult", "annotate", "infer_types", "typecheck",
    "TypeEnvironment", "prelude",
]
