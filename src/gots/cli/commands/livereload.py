"""Run the browser live-reload service."""
from __future__ import annotations

import argparse

from gots.config import LiveReloadSettings
from gots.livereload import start_live_reload


def register_livereload_command(subparsers: argparse._SubParsersAction) -> None:
    """Register the `livereload` subcommand and its CLI arguments."""
    livereload_parser = subparsers.add_parser("livereload", help="Push reload events to browsers on file writes.")
    livereload_parser.add_argument("--host", default=None, help="Bind address.")
    livereload_parser.add_argument("--port", type=int, default=None, help="Listen port (default: 8181).")
    livereload_parser.add_argument("--watch", dest="watch_folder", default=None, help="Directory to watch.")
    livereload_parser.add_argument("--period", type=float, default=None, help="Seconds between change checks.")


def build_settings(args: argparse.Namespace) -> LiveReloadSettings:
    """Environment settings overridden by explicit CLI flags."""
    overrides = {
        name: getattr(args, name)
        for name in ("host", "port", "watch_folder", "period")
        if getattr(args, name) is not None
    }
    return LiveReloadSettings(**overrides)


def run_livereload_command(args: argparse.Namespace) -> int:
    start_live_reload(build_settings(args))
    return 0
