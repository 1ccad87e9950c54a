"""Template rendering seam for CherryPy handlers."""
from __future__ import annotations

import io
from typing import Any, Protocol

import cherrypy

from gots.emitter import StringWriter


class ViewEngine(Protocol):
    def render(self, out: StringWriter, view: str, model: Any) -> None:
        ...


class CherryPyViewRenderer:
    """Adapts a ViewEngine to CherryPy responses."""

    def __init__(self, engine: ViewEngine, content_type: str = "text/html; charset=utf-8") -> None:
        self.engine = engine
        self.content_type = content_type

    def render(self, out: StringWriter, view: str, model: Any) -> None:
        self.engine.render(out, view, model)

    def render_response(self, view: str, model: Any) -> str:
        """Render into a buffer for returning from an exposed handler."""
        buffer = io.StringIO()
        self.render(buffer, view, model)
        cherrypy.response.headers["Content-Type"] = self.content_type
        return buffer.getvalue()
