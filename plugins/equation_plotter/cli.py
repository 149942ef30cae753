"""Command line interface for the Equation Plotter plugin."""

from __future__ import annotations

import argparse
import json
from typing import Any

from .core import (
    EquationValidationError,
    UnitConversionError,
    dumps,
    export_to_json_file,
    load_json_file,
    units_scaling_ratio,
)


def _print(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def command_evaluate(args: argparse.Namespace) -> None:
    try:
        record = load_json_file(args.path)
        if args.output:
            path = export_to_json_file(record, args.output, strip_inputs=args.strip_inputs)
            _print({"written": str(path), "failed_samples": len(record.diagnostics)})
            return
        record.evaluate(strip_inputs=args.strip_inputs)
    except EquationValidationError as exc:
        raise SystemExit(f"Invalid equation record: {exc}") from exc
    print(dumps(record))


def command_ratio(args: argparse.Namespace) -> None:
    try:
        ratio = units_scaling_ratio(args.from_unit, args.to_unit)
    except UnitConversionError as exc:
        raise SystemExit(str(exc)) from exc
    _print({"from_unit": args.from_unit, "to_unit": args.to_unit, "ratio": ratio})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Equation Plotter CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate an equation record JSON file")
    evaluate_parser.add_argument("path", help="Path to the equation record")
    evaluate_parser.add_argument("--output", help="Write the evaluated record to this file")
    evaluate_parser.add_argument(
        "--strip-inputs",
        dest="strip_inputs",
        action="store_true",
        help="Keep only units and points in the output",
    )
    evaluate_parser.set_defaults(func=command_evaluate)

    ratio_parser = subparsers.add_parser("ratio", help="Scaling ratio between two unit strings")
    ratio_parser.add_argument("from_unit", help="Units of the existing values (e.g. kg)")
    ratio_parser.add_argument("to_unit", help="Units to convert to (e.g. g)")
    ratio_parser.set_defaults(func=command_ratio)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
