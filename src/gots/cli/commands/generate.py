"""Generate TypeScript typings for Python types named on the command line."""
from __future__ import annotations

import argparse
import importlib
import inspect
import sys
from pathlib import Path
from typing import Any

from gots.config import GeneratorSettings
from gots.errors import RootResolutionError
from gots.generator import render_type_definition
from gots.reflect import primitive_kind_of


def register_generate_command(subparsers: argparse._SubParsersAction) -> None:
    """Register the `generate` subcommand and its CLI arguments."""
    generate_parser = subparsers.add_parser("generate", help="Write TypeScript typings for Python types.")
    generate_parser.add_argument(
        "roots",
        nargs="+",
        help="Root types as module:Name, or a module to use every public class defined in it.",
    )
    generate_parser.add_argument("--namespace", default=None, help="Wrap output in `declare namespace <name>`.")
    generate_parser.add_argument(
        "--package",
        default=None,
        help="Only expand referenced types from modules starting with this prefix (default: all).",
    )
    generate_parser.add_argument("--out", default=None, help="Write to file instead of stdout.")


def run_generate_command(args: argparse.Namespace) -> int:
    """Resolve roots, generate typings and write them out."""
    settings = GeneratorSettings()
    namespace = args.namespace if args.namespace is not None else settings.namespace
    package = args.package if args.package is not None else settings.package
    out = args.out if args.out is not None else settings.out

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    roots: list[Any] = []
    for spec in args.roots:
        roots.extend(resolve_root_spec(spec))
    if not roots:
        raise RootResolutionError(f"No root types found in: {' '.join(args.roots)}")

    generated_typescript = render_type_definition(*roots, namespace=namespace, package=package)

    if out:
        output_path = Path(out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(generated_typescript, encoding="utf-8")
        print(f"[gots] wrote {len(roots)} root(s) -> {output_path}", flush=True)
    else:
        print(generated_typescript, end="")
    return 0


def resolve_root_spec(spec: str) -> list[Any]:
    """
    Resolve `module:Name` (dotted attribute paths allowed) or a bare `module`.

    A bare module yields every public struct or interface class defined in it,
    in definition order.
    """
    module_name, _, attribute_path = spec.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RootResolutionError(f"Cannot import {module_name!r}: {exc}") from exc

    if attribute_path:
        value: Any = module
        for part in attribute_path.split("."):
            try:
                value = getattr(value, part)
            except AttributeError as exc:
                raise RootResolutionError(f"{module_name!r} has no attribute {attribute_path!r}") from exc
        return [value]

    return [
        value
        for name, value in vars(module).items()
        if inspect.isclass(value)
        and value.__module__ == module.__name__
        and not name.startswith("_")
        and primitive_kind_of(value) is None
    ]
