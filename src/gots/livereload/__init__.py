"""Browser live reload: push a reload event when watched files are written."""
from gots.livereload.client import render_client
from gots.livereload.server import LiveReload, start_live_reload
from gots.livereload.watcher import ModificationFilter, WatcherPlugin

__all__ = [
    "LiveReload",
    "ModificationFilter",
    "WatcherPlugin",
    "render_client",
    "start_live_reload",
]
