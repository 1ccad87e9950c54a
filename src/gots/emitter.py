"""Indentation-aware line writer for generated declarations."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol


class StringWriter(Protocol):
    def write(self, s: str, /) -> int: ...


class Emitter:
    """Writes lines to an output sink, two spaces per indentation level."""

    indent_unit = "  "

    def __init__(self, out: StringWriter) -> None:
        self.out = out
        self.depth = 0

    def line(self, text: str) -> None:
        """Write one full line at the current depth."""
        self.start(text)
        self.end_line()

    def start(self, text: str) -> None:
        """Begin a line at the current depth without ending it."""
        self.out.write(self.indent_unit * self.depth)
        self.out.write(text)

    def append(self, text: str) -> None:
        self.out.write(text)

    def end_line(self) -> None:
        self.out.write("\n")

    def indent(self) -> None:
        self.depth += 1

    def dedent(self) -> None:
        self.depth -= 1

    @contextmanager
    def indented(self) -> Iterator[None]:
        self.indent()
        try:
            yield
        finally:
            self.dedent()

    @contextmanager
    def namespace(self, name: str) -> Iterator[None]:
        """Wrap output in `declare namespace <name> { ... }`; no-op for an empty name."""
        if not name:
            yield
            return

        self.line(f"declare namespace {name} {{")
        with self.indented():
            yield
        self.line("}")
