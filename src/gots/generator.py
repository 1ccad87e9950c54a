"""Generate TypeScript declarations (.d.ts) from Python runtime types."""
from __future__ import annotations

import io
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from gots.descriptors import (
    ANY_SIGNATURE,
    PRIMITIVE_KINDS,
    FieldDescriptor,
    Kind,
    TypeDescriptor,
    underlying,
)
from gots.emitter import Emitter, StringWriter
from gots.errors import UnsupportedResultError, UnsupportedRootError
from gots.reflect import Reflector
from gots.type_info import TypeInfo, resolve


# ============================================================
# Kind tables
# ============================================================

NUMBER_KINDS = frozenset({
    Kind.INT, Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64,
    Kind.UINT, Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64,
    Kind.FLOAT32, Kind.FLOAT64,
})

OBJECT_KINDS = frozenset({Kind.UINTPTR, Kind.COMPLEX64, Kind.COMPLEX128, Kind.UNSAFE_POINTER})

ROOT_KINDS = frozenset({Kind.STRUCT, Kind.INTERFACE})

# Formal parameter name of generic templates.
TEMPLATE_PARAM = "T"

# Catch-all placeholders.
OPAQUE_TYPE = "unknown"
ALIAS_BASE_TYPE = "object"


def typing_name_for_base(kind: Kind) -> str:
    """Lexical mapping of a primitive kind."""
    if kind is Kind.STRING:
        return "string"
    if kind is Kind.BOOL:
        return "boolean"
    if kind in NUMBER_KINDS:
        return "number"
    if kind in OBJECT_KINDS:
        return "object"
    return OPAQUE_TYPE


def typing_name_for_kind(param: str, kind: Kind) -> str:
    """Text of a generic-parameter field from its kind structure alone."""
    if kind is Kind.POINTER:
        return "null | " + param
    if kind is Kind.SLICE:
        return param + "[]"
    return param


@dataclass
class MembersResult:
    """Embedded types to merge and referenced types to schedule."""
    embeds: list[TypeDescriptor] = field(default_factory=list)
    referenced: list[TypeDescriptor] = field(default_factory=list)


# ============================================================
# Generator
# ============================================================

class DefinitionGenerator:
    """
    Emits one structural declaration per admissible type reachable from the roots.

    Roots are always written. Discovered types are written breadth-first when
    they pass the origin filter: not a bare primitive, named, and defined in a
    module starting with `package`.
    """

    def __init__(self, out: StringWriter, *, namespace: str = "", package: str = "") -> None:
        self.emitter = Emitter(out)
        self.namespace = namespace
        self.package = package
        self.reflector = Reflector()

    def generate(self, *roots: Any) -> None:
        with self.emitter.namespace(self.namespace):
            self.write_definitions(*roots)

    # ---- traversal ----

    def should_write_type(self, t: TypeDescriptor, info: TypeInfo) -> bool:
        """Origin filter deciding full expansion versus an opaque reference."""
        if info.is_basic:
            return False
        if not t.package.startswith(self.package):
            return False
        if t.name == "":
            return False
        return True

    def write_definitions(self, *roots: Any) -> None:
        processed: dict[str, TypeInfo] = {}
        pending: deque[TypeDescriptor] = deque()

        for root in roots:
            t = underlying(self.reflector.type_of(root))
            if t.kind not in ROOT_KINDS:
                raise UnsupportedRootError(t.signature, t.kind.value)

            info = resolve(t)
            if info.qualified_name in processed:
                continue

            processed[info.qualified_name] = info
            pending.extend(self.write_type(t, info))
            self.emitter.end_line()

        while pending:
            t = underlying(pending.popleft())
            info = resolve(t)
            if info.qualified_name in processed:
                continue

            # Marked before the filter so rejected types are never revisited.
            processed[info.qualified_name] = info
            if not self.should_write_type(t, info):
                continue

            pending.extend(self.write_type(t, info))
            self.emitter.end_line()

    # ---- type writer ----

    def write_type(self, t: TypeDescriptor, info: TypeInfo) -> list[TypeDescriptor]:
        """Write a full declaration and return the types it references."""
        type_name = info.base_name

        if info.is_generic:
            self.emitter.line(f"type {type_name}<{TEMPLATE_PARAM}> = {{")
        elif t.kind in PRIMITIVE_KINDS:
            self.emitter.line(f"type {type_name} = {ALIAS_BASE_TYPE} & {{")
        else:
            self.emitter.line(f"type {type_name} = {{")

        with self.emitter.indented():
            result = self.write_members(t, info)

        self.emitter.start("}")
        for embedded in result.embeds:
            self.emitter.append(" & " + self.embedded_type_name(embedded))
        self.emitter.end_line()
        return result.referenced

    def embedded_type_name(self, t: TypeDescriptor) -> str:
        info = resolve(t)
        if info.is_generic:
            return self.generic_reference(t, info)
        if not self.should_write_type(t, info):
            return OPAQUE_TYPE
        return t.name

    # ---- member writer ----

    def write_members(self, t: TypeDescriptor, info: TypeInfo) -> MembersResult:
        result = MembersResult()

        if t.kind is Kind.STRUCT:
            for field_info in t.fields:
                if not field_info.exported:
                    continue
                self._write_field(field_info, info, result)

        if t.kind is Kind.INTERFACE:
            result.referenced.extend(self.write_methods(t))
        else:
            result.referenced.extend(self.write_methods(t.pointer))
        return result

    def _write_field(self, field_info: FieldDescriptor, info: TypeInfo, result: MembersResult) -> None:
        ft = underlying(field_info.type)

        if field_info.anonymous:
            result.embeds.append(ft)
        elif info.is_generic and field_info.generic_param:
            template = field_info.template or field_info.type
            self.emitter.line(f"{field_info.name}: {typing_name_for_kind(TEMPLATE_PARAM, template.kind)}")
        elif ft.kind is Kind.STRUCT and ft.name == "":
            self._write_inline_struct(field_info, ft, result)
            return
        else:
            self.emitter.line(f"{field_info.name}: {self.type_name(field_info.type)}")

        if ft.kind is Kind.SLICE and ft.elem is not None:
            result.referenced.append(underlying(ft.elem))
        elif ft.kind is Kind.MAP and ft.key is not None and ft.elem is not None:
            result.referenced.extend([underlying(ft.key), underlying(ft.elem)])
        else:
            result.referenced.append(ft)

    def _write_inline_struct(self, field_info: FieldDescriptor, ft: TypeDescriptor, result: MembersResult) -> None:
        if field_info.type.kind is Kind.POINTER:
            self.emitter.line(f"{field_info.name}: null | {{")
        else:
            self.emitter.line(f"{field_info.name}: {{")

        with self.emitter.indented():
            inline = self.write_members(ft, resolve(ft))
        result.referenced.extend(inline.referenced)
        self.emitter.line("}")

    # ---- method writer ----

    def write_methods(self, t: TypeDescriptor) -> list[TypeDescriptor]:
        """Write call signatures for exported methods; return referenced types."""
        referenced: list[TypeDescriptor] = []
        is_interface = t.kind is Kind.INTERFACE

        for method in t.methods:
            if not method.exported:
                continue
            if len(method.results) > 1:
                self.emitter.line(f"// multiple results {method.name}")
                continue

            params: list[str] = []
            for index, param_type in enumerate(method.params):
                if not is_interface and index == 0:
                    continue  # receiver
                number = index + 1 if is_interface else index
                params.append(f"p{number}: {self.type_name(param_type)}")
                referenced.append(param_type)
            params_text = ", ".join(params)

            if not method.results:
                self.emitter.line(f"{method.name}({params_text}): void")
                continue

            result_type = method.results[0]
            fragments = self.result_fragments(result_type)
            if result_type.kind is Kind.POINTER and result_type.elem is not None:
                referenced.append(result_type.elem)
            elif result_type.kind is Kind.SLICE and result_type.elem is not None:
                referenced.append(result_type.elem)
            elif result_type.kind is not Kind.MAP:
                referenced.append(result_type)

            if len(fragments) != 1:
                raise UnsupportedResultError(method.name, fragments)
            self.emitter.line(f"{method.name}({params_text}): {fragments[0]}")
        return referenced

    # ---- type-name mapper ----

    def type_name(self, t: TypeDescriptor) -> str:
        """Textual representation of a descriptor in the output language."""
        if resolve(t).is_alias:
            return t.name

        kind = t.kind
        if kind in PRIMITIVE_KINDS:
            return typing_name_for_base(kind)
        if kind is Kind.POINTER and t.elem is not None:
            return "null | " + self.type_name(t.elem)
        if kind is Kind.SLICE and t.elem is not None:
            if t.elem.kind is Kind.POINTER:
                return f"({self.type_name(t.elem)})[]"
            return self.type_name(t.elem) + "[]"
        if kind is Kind.INTERFACE:
            if t.signature == ANY_SIGNATURE:
                return "any"
            return "null | " + t.name
        if kind is Kind.MAP and t.key is not None and t.elem is not None:
            return f"Record<{self.type_name(t.key)}, {self.type_name(t.elem)}>"
        if kind is Kind.STRUCT:
            info = resolve(t)
            if info.is_generic:
                return self.generic_reference(t, info)
            if not self.should_write_type(t, info):
                return OPAQUE_TYPE
            return t.name
        if kind is Kind.FUNC:
            return t.name or "Function"
        return t.name or OPAQUE_TYPE

    def generic_reference(self, t: TypeDescriptor, info: TypeInfo) -> str:
        """`Base<Arg, ...>` with each argument mapped like any other reference."""
        if not t.type_args:
            return f"{info.base_name}<{info.generic_param_text}>"
        return f"{info.base_name}<{', '.join(self.type_name(a) for a in t.type_args)}>"

    def result_fragments(self, result_type: TypeDescriptor) -> list[str]:
        """Output-language fragments for one method result; the writer needs exactly one."""
        return [self.type_name(result_type)]


# ============================================================
# Entry points
# ============================================================

def generate_type_definition(
    out: StringWriter,
    *roots: Any,
    namespace: str = "",
    package: str = "",
) -> None:
    """
    Write TypeScript typings for the given roots to `out`.

    Wraps output in `declare namespace <namespace>` when a namespace is given.
    Referenced types are expanded only when their module starts with `package`.
    """
    DefinitionGenerator(out, namespace=namespace, package=package).generate(*roots)


def render_type_definition(*roots: Any, namespace: str = "", package: str = "") -> str:
    """Same as generate_type_definition, returned as a string."""
    buffer = io.StringIO()
    generate_type_definition(buffer, *roots, namespace=namespace, package=package)
    return buffer.getvalue()
