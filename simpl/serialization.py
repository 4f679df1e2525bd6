"""JSON codec for term trees and types.

Term trees arrive from an external parser as JSON objects tagged by
``"node"``:

    {"node": "literal", "kind": "Int", "value": 1}
    {"node": "var", "name": "x"}
    {"node": "if", "test": T, "then": T, "else": T}
    {"node": "binop", "op": "+", "lhs": T, "rhs": T}
    {"node": "lambda", "params": [{"name": "x", "annotation": TY}], "body": T}
    {"node": "app", "function": T, "arguments": [T, ...]}
    {"node": "let" | "letrec", "bindings": [{"name", "annotation", "value"}], "body": T}

Types are ``"Int"``, ``"Float"``, ``"Bool"``, ``{"var": 3}`` or
``{"params": [TY, ...], "result": TY}``.
"""

from __future__ import annotations

import json
import sys
from typing import Any, Optional

from simpl.ast_nodes import (
    Term, Literal, LiteralKind, Variable, Conditional, BinaryOp, BinaryOperator,
    Param, Lambda, Application, Binding, Let, Letrec,
)
from simpl.errors import MalformedTerm, TermTooDeep
from simpl.types import Type, TypeVariable, TypeConstant, FunctionType, BUILTIN_TYPES


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

def decode_type(data: Any) -> Type:
    if isinstance(data, str):
        if data not in BUILTIN_TYPES:
            raise MalformedTerm(f"Unknown base type '{data}'", field="type")
        return BUILTIN_TYPES[data]
    if isinstance(data, dict):
        if "var" in data:
            var_id = data["var"]
            if not isinstance(var_id, int) or isinstance(var_id, bool):
                raise MalformedTerm(f"Type variable id must be an integer, got {var_id!r}",
                                    field="var")
            return TypeVariable(var_id)
        if "params" in data and "result" in data:
            params = _require_list(data, "params")
            return FunctionType(tuple(decode_type(p) for p in params),
                                decode_type(data["result"]))
    raise MalformedTerm(f"Cannot decode type from {data!r}", field="type")


def encode_type(t: Type) -> Any:
    if isinstance(t, TypeConstant):
        return t.name
    if isinstance(t, TypeVariable):
        return {"var": t.id}
    if isinstance(t, FunctionType):
        return {"params": [encode_type(p) for p in t.params], "result": encode_type(t.result)}
    raise MalformedTerm(f"Cannot encode type {t!r}")


# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------

def _require(data: dict, key: str) -> Any:
    if key not in data:
        node = data.get("node", "?")
        raise MalformedTerm(f"'{node}' node is missing '{key}'", field=key)
    return data[key]


def _require_list(data: dict, key: str) -> list:
    value = _require(data, key)
    if not isinstance(value, list):
        raise MalformedTerm(f"'{key}' must be a list", field=key)
    return value


def _require_str(data: dict, key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise MalformedTerm(f"'{key}' must be a string", field=key)
    return value


def _annotation(data: dict) -> Optional[Type]:
    ann = data.get("annotation")
    return decode_type(ann) if ann is not None else None


def _decode_literal(data: dict) -> Literal:
    kind_name = _require(data, "kind")
    try:
        kind = LiteralKind(kind_name)
    except ValueError:
        raise MalformedTerm(f"Unknown literal kind {kind_name!r}", field="kind") from None
    value = _require(data, "value")
    if kind is LiteralKind.FLOAT and isinstance(value, int) and not isinstance(value, bool):
        value = float(value)
    return Literal(kind, value)


def _decode_bindings(data: dict) -> tuple[Binding, ...]:
    bindings = []
    for item in _require_list(data, "bindings"):
        if not isinstance(item, dict):
            raise MalformedTerm("binding must be an object", field="bindings")
        bindings.append(Binding(
            name=_require_str(item, "name"),
            value=_decode_term(_require(item, "value")),
            annotation=_annotation(item),
        ))
    return tuple(bindings)


def _decode_term(data: Any) -> Term:
    if not isinstance(data, dict):
        raise MalformedTerm(f"Expected a term object, got {type(data).__name__}")
    node = _require(data, "node")

    if node == "literal":
        return _decode_literal(data)
    if node == "var":
        return Variable(_require_str(data, "name"))
    if node == "if":
        return Conditional(
            _decode_term(_require(data, "test")),
            _decode_term(_require(data, "then")),
            _decode_term(_require(data, "else")),
        )
    if node == "binop":
        symbol = _require(data, "op")
        try:
            op = BinaryOperator(symbol)
        except ValueError:
            raise MalformedTerm(f"Unknown operator {symbol!r}", field="op") from None
        return BinaryOp(op, _decode_term(_require(data, "lhs")),
                        _decode_term(_require(data, "rhs")))
    if node == "lambda":
        params = []
        for item in _require_list(data, "params"):
            if isinstance(item, str):
                params.append(Param(item))
            elif isinstance(item, dict):
                params.append(Param(_require_str(item, "name"), _annotation(item)))
            else:
                raise MalformedTerm("parameter must be a name or an object", field="params")
        return Lambda(tuple(params), _decode_term(_require(data, "body")))
    if node == "app":
        return Application(
            _decode_term(_require(data, "function")),
            tuple(_decode_term(a) for a in _require_list(data, "arguments")),
        )
    if node == "let":
        return Let(_decode_bindings(data), _decode_term(_require(data, "body")))
    if node == "letrec":
        return Letrec(_decode_bindings(data), _decode_term(_require(data, "body")))

    raise MalformedTerm(f"Unknown node type {node!r}", field="node")


def decode_term(data: Any) -> Term:
    try:
        return _decode_term(data)
    except RecursionError:
        raise TermTooDeep(sys.getrecursionlimit()) from None


def _encode_annotated(d: dict[str, Any], annotation: Optional[Type]) -> dict[str, Any]:
    if annotation is not None:
        d["annotation"] = encode_type(annotation)
    return d


def encode_term(term: Term) -> dict[str, Any]:
    if isinstance(term, Literal):
        return {"node": "literal", "kind": term.kind.value, "value": term.value}
    if isinstance(term, Variable):
        return {"node": "var", "name": term.name}
    if isinstance(term, Conditional):
        return {"node": "if", "test": encode_term(term.test),
                "then": encode_term(term.then), "else": encode_term(term.else_)}
    if isinstance(term, BinaryOp):
        return {"node": "binop", "op": term.op.symbol,
                "lhs": encode_term(term.lhs), "rhs": encode_term(term.rhs)}
    if isinstance(term, Lambda):
        params = [_encode_annotated({"name": p.name}, p.annotation) for p in term.params]
        return {"node": "lambda", "params": params, "body": encode_term(term.body)}
    if isinstance(term, Application):
        return {"node": "app", "function": encode_term(term.function),
                "arguments": [encode_term(a) for a in term.arguments]}
    if isinstance(term, (Let, Letrec)):
        bindings = [
            _encode_annotated({"name": b.name, "value": encode_term(b.value)}, b.annotation)
            for b in term.bindings
        ]
        node = "let" if isinstance(term, Let) else "letrec"
        return {"node": node, "bindings": bindings, "body": encode_term(term.body)}
    raise MalformedTerm(f"Cannot encode {type(term).__name__}")


def load_term(path: str) -> Term:
    """Read a JSON term file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedTerm(f"{path}: invalid JSON ({e.msg} at line {e.lineno})") from e
        except UnicodeDecodeError as e:
            raise MalformedTerm(f"{path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e
        except RecursionError:
            raise TermTooDeep(sys.getrecursionlimit()) from None
    return decode_term(data)
