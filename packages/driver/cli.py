"""sexpc command-line interface."""

from __future__ import annotations

import argparse
import ast
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence, TextIO

from packages.lang import printer
from packages.lang.errors import CompileError
from packages.lang.types import format_type
from packages.telemetry.logger import get_logger

from . import pipeline
from .types import DriverConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "driver" / "default.yaml"

_LOGGER = get_logger("sexpc.driver.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sexpc", description="Type check S-expression programs and emit JavaScript"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None,
        help="Optional path to a driver configuration YAML file.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Override configuration values using dot notation (e.g. output.show_types=true).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Infer and print the type of every form")
    check.add_argument("source", type=Path, help="Path to the source file")
    check.add_argument(
        "--types", action="store_true", help="Annotate every sub-expression with its type"
    )
    check.add_argument(
        "--subs", action="store_true", help="Print the solved substitution for each form"
    )
    check.add_argument("--emit", action="store_true", help="Also print the JavaScript output")
    check.add_argument("--json", action="store_true", help="Emit the full report as JSON")

    emit = subparsers.add_parser("emit", help="Type check, then write JavaScript")
    emit.add_argument("source", type=Path, help="Path to the source file")
    emit.add_argument("--output", type=Path, help="Write JavaScript here instead of stdout")
    emit.add_argument(
        "--no-check", action="store_true", help="Skip type inference before emitting"
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        overrides = _parse_overrides(args.overrides)
        config = pipeline.load_configuration(args.config, overrides=overrides)
        source = args.source.read_text(encoding="utf-8")
    except (OSError, ValueError) as exc:
        print(f"[sexpc] error: {exc}", file=sys.stderr)
        return 1

    filename = str(args.source)
    try:
        if args.command == "check":
            return _cmd_check(args, config, source, filename)
        if args.command == "emit":
            return _cmd_emit(args, config, source, filename)
    except CompileError as exc:
        _LOGGER.debug("compile of %s failed during %s stage", filename, exc.stage)
        print(f"{exc.describe(source, filename)}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


# ---------------------------------------------------------------------------
# Sub-commands


def _cmd_check(
    args: argparse.Namespace, config: DriverConfig, source: str, filename: str
) -> int:
    flags: dict[str, Any] = {"inference": {"enabled": True}}
    output: dict[str, Any] = {}
    if args.types:
        output["show_types"] = True
    if args.subs:
        output["show_substitution"] = True
    if args.emit:
        output["emit_javascript"] = True
    if args.json:
        output["format"] = "json"
    flags["output"] = output
    config = config.merge(flags)

    report = pipeline.compile_source(source, filename=filename, config=config)
    if config.output.format == "json":
        json.dump(report.to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0
    _write_text_report(report, config, sys.stdout)
    return 0


def _cmd_emit(
    args: argparse.Namespace, config: DriverConfig, source: str, filename: str
) -> int:
    flags: dict[str, Any] = {"output": {"emit_javascript": True}}
    if args.no_check:
        flags["inference"] = {"enabled": False}
    config = config.merge(flags)

    report = pipeline.compile_source(source, filename=filename, config=config)
    if args.output is not None:
        args.output.write_text(report.javascript, encoding="utf-8")
        _LOGGER.info("wrote %s", args.output)
    else:
        sys.stdout.write(report.javascript)
    return 0


def _write_text_report(
    report: pipeline.CompileReport, config: DriverConfig, stream: TextIO
) -> None:
    for form in report.forms:
        rendered = printer.to_source(form.node, with_types=config.output.show_types)
        if form.root_type is not None and not config.output.show_types:
            rendered += f" : {format_type(form.root_type)}"
        stream.write(rendered + "\n")
        if config.output.show_substitution and form.substitution is not None:
            for variable, replacement in form.substitution:
                stream.write(f"  {variable} -> {format_type(replacement, raw=True)}\n")
        if form.javascript is not None:
            stream.write(f"  // {form.javascript}\n")


# ---------------------------------------------------------------------------
# Helpers


def _parse_overrides(raw: Sequence[str] | None) -> Mapping[str, Any]:
    overrides: dict[str, Any] = {}
    if not raw:
        return overrides
    for item in raw:
        key, sep, value_text = item.partition("=")
        if not sep:
            raise ValueError(f"override '{item}' is missing '='")
        key_parts = [part for part in key.split(".") if part]
        if not key_parts:
            raise ValueError("override key must not be empty")
        cursor = overrides
        for part in key_parts[:-1]:
            cursor = cursor.setdefault(part, {})
            if not isinstance(cursor, dict):
                raise ValueError(f"override '{key}' conflicts with an existing value")
        cursor[key_parts[-1]] = _coerce_literal(value_text)
    return overrides


def _coerce_literal(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return ast.literal_eval(value)
    except (ValueError, SyntaxError):
        return value


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
