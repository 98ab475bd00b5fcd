#!/usr/bin/env python3
"""Type check a source file and print JavaScript for it."""

from __future__ import annotations

import argparse
from pathlib import Path

from packages.driver import cli


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compile an S-expression program to JavaScript")
    parser.add_argument("source", type=Path, help="Path to the source file")
    parser.add_argument("--config", type=Path, help="Optional driver configuration file")
    parser.add_argument(
        "--set", dest="overrides", action="append", help="Configuration overrides (key=value)"
    )
    parser.add_argument("--output", type=Path, help="Write JavaScript to this file")
    parser.add_argument(
        "--no-check", action="store_true", help="Skip type inference before emitting"
    )

    args = parser.parse_args(argv)

    cli_args: list[str] = []
    if args.config:
        cli_args.extend(["--config", str(args.config)])
    for override in args.overrides or ():
        cli_args.extend(["--set", override])

    cli_args.extend(["emit", str(args.source)])
    if args.output:
        cli_args.extend(["--output", str(args.output)])
    if args.no_check:
        cli_args.append("--no-check")

    return cli.main(cli_args)


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
