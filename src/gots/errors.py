"""Errors raised while generating type definitions."""
from __future__ import annotations


class GenerationError(RuntimeError):
    """Base class for generation failures."""


class UnsupportedResultError(GenerationError):
    """A method's result could not be mapped to exactly one type fragment."""

    def __init__(self, method_name: str, fragments: list[str]) -> None:
        super().__init__(f"Unsupported result for {method_name}: {fragments!r}")
        self.method_name = method_name
        self.fragments = fragments


class UnsupportedRootError(GenerationError):
    """A root value whose type is not a struct or interface."""

    def __init__(self, signature: str, kind: str) -> None:
        super().__init__(f"Unsupported root type {signature} ({kind}); expected a struct or interface.")
        self.signature = signature
        self.kind = kind


class RootResolutionError(GenerationError):
    """A `module:Name` root reference that cannot be imported."""
