"""Engine plugin that watches a folder and stamps the live-reload app."""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

from cherrypy.process import plugins
from watchfiles import Change, DefaultFilter, watch

if TYPE_CHECKING:
    from gots.livereload.server import LiveReload


class ModificationFilter(DefaultFilter):
    """Only writes to existing files count; creates and deletes are ignored."""

    def __call__(self, change: Change, path: str) -> bool:
        return change == Change.modified and super().__call__(change, path)


class WatcherPlugin(plugins.SimplePlugin):
    """Runs the file watch loop on a background thread for the engine's lifetime."""

    def __init__(self, bus, app: LiveReload, debounce: int = 100) -> None:
        super().__init__(bus)
        self.app = app
        self.debounce = debounce
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="livereload-watcher", daemon=True)
        self._thread.start()
        self.bus.log(f"Live reload watching {self.app.watch_path}")

    start.priority = 70

    def stop(self) -> None:
        self._stop_event.set()
        self.app.close()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def run(self) -> None:
        try:
            for changes in watch(
                str(self.app.watch_path),
                watch_filter=ModificationFilter(),
                debounce=self.debounce,
                stop_event=self._stop_event,
            ):
                self.app.touch()
                for _change, path in sorted(changes):
                    print(f"[livereload] modified {path}", flush=True)
        except Exception:
            self.bus.log("Live reload watcher failed", level=40, traceback=True)
            raise
