"""Command line entrypoint: `gots <command>`."""
from __future__ import annotations

import argparse
import sys

from gots.cli.commands.generate import register_generate_command, run_generate_command
from gots.cli.commands.livereload import register_livereload_command, run_livereload_command
from gots.cli.commands.watch import register_watch_command, run_watch_command


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gots", description="Generate TypeScript typings from Python types.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_generate_command(subparsers)
    register_watch_command(subparsers)
    register_livereload_command(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "generate":
        try:
            return run_generate_command(args)
        except Exception as exc:
            print(f"gots: {exc}", file=sys.stderr)
            return 1
    if args.command == "watch":
        try:
            return run_watch_command(args)
        except Exception as exc:
            print(f"gots: {exc}", file=sys.stderr)
            return 1
    if args.command == "livereload":
        try:
            return run_livereload_command(args)
        except Exception as exc:
            print(f"gots: {exc}", file=sys.stderr)
            return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
