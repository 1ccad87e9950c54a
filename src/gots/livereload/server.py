"""CherryPy application serving the live-reload client and its event stream."""
from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable, Iterator, Optional

import cherrypy

from gots.config import LiveReloadSettings
from gots.livereload.client import render_client
from gots.livereload.watcher import WatcherPlugin

RELOAD_EVENT = b"data: reload\n\n"
KEEPALIVE = b": ping\n\n"


class LiveReload:
    """
    Tracks the time of the last file write and streams reloads to browsers.

    `last_mod` is a nanosecond timestamp. A client whose stamp is older than
    the server's receives a reload event.
    """

    def __init__(self, settings: LiveReloadSettings) -> None:
        self.settings = settings
        self.watch_path = Path(settings.watch_folder).resolve()
        self.last_mod = time.time_ns()
        self._lock = threading.Lock()
        self._closed = threading.Event()

    def touch(self) -> None:
        with self._lock:
            self.last_mod = time.time_ns()

    def close(self) -> None:
        """End all open event streams."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def stream(
        self,
        last_mod: int,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Iterator[bytes]:
        """Yield a reload event whenever the server stamp passes `last_mod`."""
        if last_mod < self.last_mod:
            last_mod = self.last_mod
            yield RELOAD_EVENT

        while not self.closed:
            sleep(self.settings.period)
            current = self.last_mod
            if last_mod < current:
                last_mod = current
                yield RELOAD_EVENT
            else:
                yield KEEPALIVE

    # ---- HTTP ----

    @cherrypy.expose
    def live_reload_js(self) -> str:
        cherrypy.response.headers["Content-Type"] = "text/javascript; charset=utf-8"
        cherrypy.response.headers["Cache-Control"] = "no-cache"
        host = cherrypy.request.headers.get("Host", f"localhost:{self.settings.port}")
        return render_client(host, time.time_ns())

    @cherrypy.expose
    def events(self, lastMod: str = "0", **_params: str) -> Iterator[bytes]:
        try:
            last_mod = int(lastMod)
        except ValueError:
            last_mod = 0

        headers = cherrypy.response.headers
        headers["Content-Type"] = "text/event-stream"
        headers["Cache-Control"] = "no-cache"
        headers["Access-Control-Allow-Origin"] = "*"
        return self.stream(last_mod)

    events._cp_config = {"response.stream": True}


def start_live_reload(settings: Optional[LiveReloadSettings] = None) -> None:
    """Serve live reload until the engine exits."""
    settings = settings or LiveReloadSettings()
    app = LiveReload(settings)

    if not app.watch_path.is_dir():
        raise NotADirectoryError(f"Watch folder does not exist: {app.watch_path}")

    cherrypy.config.update({
        "server.socket_host": settings.host,
        "server.socket_port": settings.port,
        "engine.autoreload.on": False,
        "log.screen": False,
    })
    cherrypy.tree.mount(app, "/")
    WatcherPlugin(cherrypy.engine, app).subscribe()

    print(f"[livereload] serving http://{settings.host}:{settings.port}/live-reload.js", flush=True)
    print(f"[livereload] watching {app.watch_path}", flush=True)

    cherrypy.engine.signals.subscribe()
    cherrypy.engine.start()
    cherrypy.engine.block()
