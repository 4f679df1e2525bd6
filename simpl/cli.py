"""simpl CLI: Command-line interface for the simpl type checker.

Commands:
  simpl check <term.json>        : Infer the principal type of a term
  simpl constraints <term.json>  : Print the generated constraints, unsolved

Input files hold a JSON term tree (see simpl.serialization).
Exit status: 0 on success, 1 on a type error, 2 on bad input or config.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from simpl import __version__
from simpl.config import ConfigError, SimplConfig, load_config
from simpl.constraints import ConstraintGenerator
from simpl.errors import InferenceError, MalformedTerm, TermTooDeep
from simpl.infer import infer_types
from simpl.serialization import encode_type, load_term
from simpl.typed_ast import TypedTerm
from simpl.types import TypeEnvironment, prelude

logger = logging.getLogger("simpl")


def _configure(args: argparse.Namespace) -> SimplConfig:
    config = load_config(getattr(args, "config", None))
    if getattr(args, "prelude", False):
        config.prelude = True
    if getattr(args, "annotate", False):
        config.annotate = True
    if getattr(args, "output_format", None):
        config.format = args.output_format
    if getattr(args, "verbose", False):
        config.log_level = "DEBUG"
    level = logging.getLevelName(config.log_level)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return config


def _environment(config: SimplConfig) -> TypeEnvironment:
    return prelude() if config.prelude else TypeEnvironment.empty()


def _report_error(error: InferenceError, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps({"status": "error", "error": error.to_dict()}, indent=2))
    else:
        print(f"error{error}")
        if error.constraint is not None:
            origin = error.details.get("origin")
            where = f" (from {origin})" if origin else ""
            print(f"  while solving {error.constraint}{where}")


def _typed_lines(root: TypedTerm) -> list[str]:
    lines: list[str] = []
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        lines.append(f"{'  ' * depth}{type(node.term).__name__}: {node.type}")
        for name, t in node.bound:
            lines.append(f"{'  ' * (depth + 1)}{name} : {t}")
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return lines


def _typed_json(node: TypedTerm) -> dict:
    d: dict = {"node": type(node.term).__name__, "type": str(node.type)}
    if node.bound:
        d["bound"] = {name: str(t) for name, t in node.bound}
    if node.children:
        d["children"] = [_typed_json(c) for c in node.children]
    return d


def cmd_check(args: argparse.Namespace) -> int:
    """Infer the principal type of a JSON term file."""
    try:
        config = _configure(args)
    except ConfigError as e:
        print(json.dumps({"status": "error", "error": {"kind": "config_error", "message": str(e)}}))
        return 2

    try:
        term = load_term(args.file)
    except OSError as e:
        print(json.dumps({"status": "error", "error": {"kind": "io_error", "message": str(e)}}))
        return 2
    except (MalformedTerm, TermTooDeep) as e:
        _report_error(e, config.format)
        return 2

    try:
        result = infer_types(term, _environment(config))
    except TermTooDeep as e:
        _report_error(e, config.format)
        return 2
    except InferenceError as e:
        logger.debug("inference failed: %s", e)
        _report_error(e, config.format)
        return 1

    logger.info("%s: %s", args.file, result.summary)
    if config.format == "json":
        out = {
            "status": "ok",
            "type": str(result.type),
            "type_json": encode_type(result.type),
        }
        try:
            if config.annotate:
                out["typed_term"] = _typed_json(result.typed_term)
            text = json.dumps(out, indent=2)
        except RecursionError:
            _report_error(TermTooDeep(sys.getrecursionlimit()), config.format)
            return 2
        print(text)
    else:
        print(result.type)
        if config.annotate:
            print("\n".join(_typed_lines(result.typed_term)))
    return 0


def cmd_constraints(args: argparse.Namespace) -> int:
    """Print the constraints generated for a JSON term file."""
    try:
        config = _configure(args)
        term = load_term(args.file)
    except ConfigError as e:
        print(f"error[config_error]: {e}")
        return 2
    except OSError as e:
        print(f"error[io_error]: {e}")
        return 2
    except (MalformedTerm, TermTooDeep) as e:
        _report_error(e, "pretty")
        return 2

    try:
        root, constraints = ConstraintGenerator().infer(_environment(config), term)
    except RecursionError:
        _report_error(TermTooDeep(sys.getrecursionlimit()), "pretty")
        return 2
    except InferenceError as e:
        _report_error(e, "pretty")
        return 1

    print(f"root: {root}")
    for constraint in constraints:
        print(constraint)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="simpl",
        description="simpl: Hindley-Milner type inference for the simpl language",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # check
    p_check = subparsers.add_parser("check", help="Infer the principal type of a term")
    p_check.add_argument("file", help="JSON term file")
    p_check.add_argument("--format", dest="output_format", choices=["pretty", "json"],
                         help="Output format (default: from config, else pretty)")
    p_check.add_argument("--prelude", action="store_true",
                         help="Start from the built-in environment (add, sub, mul, is_zero, not)")
    p_check.add_argument("--annotate", action="store_true",
                         help="Also print the type of every sub-expression")
    p_check.add_argument("--config", help="Config file (default: nearest .simplrc.yml)")
    p_check.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p_check.set_defaults(func=cmd_check)

    # constraints
    p_cons = subparsers.add_parser("constraints", help="Print generated constraints")
    p_cons.add_argument("file", help="JSON term file")
    p_cons.add_argument("--prelude", action="store_true",
                        help="Start from the built-in environment")
    p_cons.add_argument("--config", help="Config file (default: nearest .simplrc.yml)")
    p_cons.set_defaults(func=cmd_constraints)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
