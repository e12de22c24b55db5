"""Command line interface for the Accumulator Calculator plugin."""

from __future__ import annotations

import argparse
import json
import math
from typing import Any

from .core import (
    DEFAULT_PRECISION,
    Accumulator,
    default_operations,
    describe_sequence,
    format_number,
    operation_kind,
)


def _print(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


def _binding(text: str) -> tuple[str, float]:
    name, sep, raw_value = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{text}'")
    try:
        return name, float(raw_value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid value for {name}: '{raw_value}'") from exc


def feed(accumulator: Accumulator, tokens: list[str]) -> None:
    """Push each token into ``accumulator``: numbers, known symbols, else variables."""

    for token in tokens:
        if token in accumulator.operations:
            accumulator.perform_operation(token)
            continue
        try:
            value = float(token)
        except ValueError:
            accumulator.set_variable_operand(token)
        else:
            accumulator.set_operand(value)


def command_run(args: argparse.Namespace) -> None:
    accumulator = Accumulator(precision=args.precision)
    feed(accumulator, args.tokens)
    evaluation = accumulator.evaluate(dict(args.variables or []))
    result = evaluation.result
    _print(
        {
            "result": result if result is not None and math.isfinite(result) else None,
            "formatted": format_number(result, args.precision) if result is not None else None,
            "pending": evaluation.is_pending,
            "description": evaluation.description,
            "sequence": describe_sequence(evaluation),
        }
    )


def command_operations(args: argparse.Namespace) -> None:
    table = default_operations()
    _print({"operations": [{"symbol": symbol, "kind": operation_kind(op)} for symbol, op in table.items()]})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Accumulator Calculator CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Evaluate a sequence of keypad tokens")
    run_parser.add_argument("tokens", nargs="+", help="Numbers, operator symbols or variable names")
    run_parser.add_argument(
        "--var",
        dest="variables",
        action="append",
        type=_binding,
        metavar="NAME=VALUE",
        help="Bind a variable (repeatable)",
    )
    run_parser.add_argument("--precision", type=int, default=DEFAULT_PRECISION, help="Fractional digits shown")
    run_parser.set_defaults(func=command_run)

    operations_parser = subparsers.add_parser("operations", help="List the supported operator symbols")
    operations_parser.set_defaults(func=command_operations)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
