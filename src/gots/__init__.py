"""TypeScript declarations from Python runtime types."""
from __future__ import annotations

from gots.descriptors import FieldDescriptor, Kind, MethodDescriptor, TypeDescriptor
from gots.errors import GenerationError, RootResolutionError, UnsupportedResultError, UnsupportedRootError
from gots.generator import DefinitionGenerator, generate_type_definition, render_type_definition
from gots.reflect import Reflector
from gots.type_info import TypeInfo, resolve

__all__ = [
    "DefinitionGenerator",
    "FieldDescriptor",
    "GenerationError",
    "Kind",
    "MethodDescriptor",
    "Reflector",
    "RootResolutionError",
    "TypeDescriptor",
    "TypeInfo",
    "UnsupportedResultError",
    "UnsupportedRootError",
    "generate_type_definition",
    "render_type_definition",
    "resolve",
]
