"""Regenerate typings whenever watched Python sources change."""
from __future__ import annotations

import argparse
import subprocess
import sys
import time
from pathlib import Path

from watchfiles import DefaultFilter, watch


class SourcesFilter(DefaultFilter):
    def __call__(self, change, path: str) -> bool:
        p = path.replace("\\", "/")
        if "__pycache__" in p or p.endswith(".pyc"):
            return False
        return p.endswith(".py") and super().__call__(change, path)


def register_watch_command(subparsers: argparse._SubParsersAction) -> None:
    """Register the `watch` subcommand and its CLI arguments."""
    watch_parser = subparsers.add_parser("watch", help="Regenerate typings when sources change.")
    watch_parser.add_argument("roots", nargs="+", help="Root types, same format as `generate`.")
    watch_parser.add_argument(
        "--path",
        dest="paths",
        action="append",
        default=None,
        help="Directory to watch (repeatable, default: current directory).",
    )
    watch_parser.add_argument("--out", required=True, help="Output .d.ts file.")
    watch_parser.add_argument("--namespace", default=None, help="Wrap output in `declare namespace <name>`.")
    watch_parser.add_argument("--package", default=None, help="Origin filter module prefix.")
    watch_parser.add_argument("--debounce", type=int, default=300, help="Debounce in milliseconds.")


def build_generate_command(args: argparse.Namespace) -> list[str]:
    """Command line for one generation run in a fresh interpreter."""
    cmd = [sys.executable, "-m", "gots", "generate", *args.roots, "--out", str(args.out)]
    if args.namespace is not None:
        cmd.extend(["--namespace", args.namespace])
    if args.package is not None:
        cmd.extend(["--package", args.package])
    return cmd


def run_gen(args: argparse.Namespace) -> int:
    # A fresh interpreter re-imports the changed modules.
    print("\n[gots watch] Generating TS types...", flush=True)
    r = subprocess.run(build_generate_command(args), cwd=str(Path.cwd()), check=False)
    if r.returncode == 0:
        print(f"[gots watch] OK -> {args.out}", flush=True)
    else:
        print(f"[gots watch] FAILED (exit {r.returncode})", flush=True)
    return r.returncode


def run_watch_command(args: argparse.Namespace) -> int:
    """Generate once, then again after every batch of source changes."""
    raw_paths = args.paths or ["."]
    watch_dirs = [Path(p).resolve() for p in raw_paths if Path(p).is_dir()]
    if not watch_dirs:
        print("[gots watch] ERROR: watch dirs missing.", file=sys.stderr)
        print("Expected:\n" + "\n".join(f"  - {p}" for p in raw_paths), file=sys.stderr)
        return 2

    run_gen(args)

    print("[gots watch] Watching:", flush=True)
    for d in watch_dirs:
        print("  -", d, flush=True)

    try:
        for changes in watch(*map(str, watch_dirs), watch_filter=SourcesFilter(), debounce=args.debounce):
            changed = sorted({p.replace("\\", "/") for (_c, p) in changes})
            print("\n[gots watch] Change detected:", flush=True)
            for p in changed:
                print("  -", p, flush=True)

            run_gen(args)
            time.sleep(0.05)
    except KeyboardInterrupt:
        print("\n[gots watch] Stopping...", flush=True)

    return 0
