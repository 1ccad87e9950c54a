"""Describe Python runtime types as TypeDescriptors."""
from __future__ import annotations

import collections
import collections.abc
import ctypes
import dataclasses
import inspect
import sys
import types
import typing
from typing import Any, Optional

from gots.descriptors import (
    ANY_SIGNATURE,
    PRIMITIVE_KINDS,
    FieldDescriptor,
    Kind,
    MethodDescriptor,
    TypeDescriptor,
    is_exported,
)


# ============================================================
# Lookup tables
# ============================================================

BARE_PRIMITIVES: dict[type, Kind] = {
    bool: Kind.BOOL,
    int: Kind.INT,
    float: Kind.FLOAT64,
    complex: Kind.COMPLEX128,
    str: Kind.STRING,
}

CTYPES_PRIMITIVES: dict[type, Kind] = {
    ctypes.c_bool: Kind.BOOL,
    ctypes.c_int8: Kind.INT8,
    ctypes.c_int16: Kind.INT16,
    ctypes.c_int32: Kind.INT32,
    ctypes.c_int64: Kind.INT64,
    ctypes.c_uint8: Kind.UINT8,
    ctypes.c_uint16: Kind.UINT16,
    ctypes.c_uint32: Kind.UINT32,
    ctypes.c_uint64: Kind.UINT64,
    ctypes.c_float: Kind.FLOAT32,
    ctypes.c_double: Kind.FLOAT64,
    ctypes.c_void_p: Kind.UINTPTR,
}

SLICE_ORIGINS: frozenset[Any] = frozenset({
    list,
    set,
    frozenset,
    collections.deque,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Set,
    collections.abc.MutableSet,
})

MAP_ORIGINS: frozenset[Any] = frozenset({
    dict,
    collections.OrderedDict,
    collections.defaultdict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
})

# Classes from these top-level modules are never embedded or scanned for methods.
LIBRARY_MODULES = frozenset({
    "builtins",
    "typing",
    "typing_extensions",
    "abc",
    "enum",
    "dataclasses",
    "collections",
    "ctypes",
    "_ctypes",
    "types",
    "pydantic",
    "pydantic_settings",
})

_TYPE_ALIAS_TYPE = getattr(typing, "TypeAliasType", None)
_NONE_TYPE = type(None)


# ============================================================
# Helpers
# ============================================================

def is_library_class(cls: type) -> bool:
    """Return True for object and classes defined by the runtime or libraries."""
    if cls is object:
        return True
    module = getattr(cls, "__module__", "") or ""
    return module.split(".", 1)[0] in LIBRARY_MODULES


def is_type_like(value: Any) -> bool:
    """Return True when a value names a type rather than being an instance."""
    if inspect.isclass(value) or value is Any:
        return True
    if isinstance(value, (typing.TypeVar, typing.NewType)):
        return True
    if _TYPE_ALIAS_TYPE is not None and isinstance(value, _TYPE_ALIAS_TYPE):
        return True
    return typing.get_origin(value) is not None


def primitive_kind_of(cls: type) -> Optional[Kind]:
    """Find the primitive kind a class is, or derives from."""
    for klass in cls.__mro__:
        if klass in BARE_PRIMITIVES:
            return BARE_PRIMITIVES[klass]
        if klass in CTYPES_PRIMITIVES:
            return CTYPES_PRIMITIVES[klass]
    return None


def is_interface_class(cls: type) -> bool:
    if getattr(cls, "_is_protocol", False):
        return True
    return inspect.isabstract(cls) and not inspect.get_annotations(cls)


def substitute_type_vars(annotation: Any, mapping: dict[Any, Any]) -> Any:
    """Replace type variables of a generic class with its arguments."""
    if not mapping:
        return annotation
    if isinstance(annotation, typing.TypeVar):
        return mapping.get(annotation, annotation)
    parameters = getattr(annotation, "__parameters__", ())
    if not parameters or inspect.isclass(annotation):
        return annotation
    try:
        return annotation[tuple(mapping.get(p, p) for p in parameters)]
    except TypeError:
        return annotation


def mentions_type_vars(annotation: Any, parameters: tuple[Any, ...]) -> bool:
    """True when an annotation is built from the class's own type variables."""
    if not parameters:
        return False
    if isinstance(annotation, typing.TypeVar):
        return annotation in parameters
    if inspect.isclass(annotation):
        return False
    return any(p in parameters for p in getattr(annotation, "__parameters__", ()))


def _type_hints(obj: Any) -> dict[str, Any]:
    """
    Resolved annotations of a class (whole MRO) or function.

    When some annotation cannot be evaluated at runtime (names imported under
    `TYPE_CHECKING`, locals of an enclosing function) the rest are resolved
    one by one and the unresolvable ones become `Any`.
    """
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, AttributeError, TypeError, SyntaxError):
        return _resolve_each(obj)


def _resolve_each(obj: Any) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    targets = reversed(obj.__mro__) if inspect.isclass(obj) else (obj,)
    for target in targets:
        if inspect.isclass(target):
            module = sys.modules.get(target.__module__)
            globalns = dict(vars(module)) if module is not None else {}
            localns = dict(vars(target))
        else:
            globalns = getattr(target, "__globals__", {})
            localns = None
        for name, annotation in inspect.get_annotations(target).items():
            hints[name] = _evaluate(annotation, globalns, localns)
    return hints


def _evaluate(annotation: Any, globalns: dict[str, Any], localns: Optional[dict[str, Any]]) -> Any:
    if isinstance(annotation, typing.ForwardRef):
        annotation = annotation.__forward_arg__
    if not isinstance(annotation, str):
        return annotation
    try:
        value = eval(annotation, globalns, localns)
    except (NameError, AttributeError, TypeError, SyntaxError):
        return Any
    return _NONE_TYPE if value is None else value


# ============================================================
# Reflector
# ============================================================

class Reflector:
    """
    Builds descriptors for Python types, one per distinct type.

    Class bodies (fields, methods) are read on first access, so a class
    referring to itself resolves to the same cached descriptor.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, TypeDescriptor] = {}
        self.any = TypeDescriptor(kind=Kind.INTERFACE, signature=ANY_SIGNATURE)

    def type_of(self, value: Any) -> TypeDescriptor:
        """Descriptor for a root value: types as-is, instances by their class."""
        if is_type_like(value):
            return self.describe(value)
        return self.describe(getattr(value, "__orig_class__", type(value)))

    def describe(self, annotation: Any) -> TypeDescriptor:
        try:
            cached = self._cache.get(annotation)
        except TypeError:
            return self._describe(annotation)
        if cached is not None:
            return cached

        descriptor = self._describe(annotation)
        self._cache[annotation] = descriptor
        return descriptor

    def _describe(self, annotation: Any) -> TypeDescriptor:
        if annotation is Any or annotation is object or isinstance(annotation, typing.TypeVar):
            return self.any
        if annotation is None or annotation is _NONE_TYPE:
            return TypeDescriptor(kind=Kind.OTHER, signature="None")

        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)
        if origin is typing.Annotated:
            return self.describe(args[0])

        if _TYPE_ALIAS_TYPE is not None and isinstance(annotation, _TYPE_ALIAS_TYPE):
            return self._describe_named(annotation, annotation.__value__)
        if isinstance(annotation, typing.NewType):
            return self._describe_named(annotation, annotation.__supertype__)

        if annotation in BARE_PRIMITIVES:
            return TypeDescriptor(
                kind=BARE_PRIMITIVES[annotation],
                name=annotation.__name__,
                signature=annotation.__name__,
            )
        if annotation in CTYPES_PRIMITIVES:
            kind = CTYPES_PRIMITIVES[annotation]
            return TypeDescriptor(kind=kind, name=kind.value, signature=kind.value)
        if annotation in (bytes, bytearray):
            return self._slice_of(self.describe(ctypes.c_uint8))

        container = origin if origin is not None else annotation

        if origin is typing.Union or origin is types.UnionType:
            members = [a for a in args if a is not _NONE_TYPE]
            if len(members) == 1 and len(members) != len(args):
                return self.describe(members[0]).pointer
            return TypeDescriptor(
                kind=Kind.OTHER,
                signature=" | ".join(self.describe(a).signature for a in args),
            )

        if container is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return self._slice_of(self.describe(args[0]))
            if args and all(a == args[0] for a in args):
                return self._slice_of(self.describe(args[0]))
            return self._slice_of(self.any)

        if _is_member(container, SLICE_ORIGINS):
            return self._slice_of(self.describe(args[0]) if args else self.any)

        if _is_member(container, MAP_ORIGINS):
            key = self.describe(args[0]) if args else self.any
            value = self.describe(args[1]) if len(args) > 1 else self.any
            return TypeDescriptor(
                kind=Kind.MAP,
                signature=f"map[{key.signature}]{value.signature}",
                key=key,
                elem=value,
            )

        if container is collections.abc.Callable:
            return TypeDescriptor(kind=Kind.FUNC, signature="func")

        if inspect.isclass(container):
            return self._describe_class(container, args)

        return TypeDescriptor(kind=Kind.OTHER, signature=repr(annotation))

    # ---- compound helpers ----

    def _slice_of(self, elem: TypeDescriptor) -> TypeDescriptor:
        return TypeDescriptor(kind=Kind.SLICE, signature="[]" + elem.signature, elem=elem)

    def _describe_named(self, alias: Any, value: Any) -> TypeDescriptor:
        """NewType / `type X = ...`: named primitive, otherwise transparent."""
        target = self.describe(value)
        if target.kind not in PRIMITIVE_KINDS:
            return target
        module = getattr(alias, "__module__", "") or ""
        name = alias.__name__
        return TypeDescriptor(
            kind=target.kind,
            name=name,
            package=module,
            signature=f"{module}.{name}" if module else name,
        )

    def _describe_class(self, cls: type, args: tuple[Any, ...]) -> TypeDescriptor:
        module = cls.__module__
        qualname = cls.__qualname__
        parameters = tuple(getattr(cls, "__parameters__", ()))
        mapping = dict(zip(parameters, args)) if args else {}

        type_args = tuple(self.describe(a) for a in args)
        signature = f"{module}.{qualname}"
        if type_args:
            signature += "[" + ", ".join(a.signature for a in type_args) + "]"

        kind = primitive_kind_of(cls)
        if kind is not None:
            descriptor = TypeDescriptor(
                kind=kind,
                name=cls.__name__,
                package=module,
                signature=signature,
                load_methods=lambda: self._methods(cls, mapping, receiver=descriptor.pointer),
            )
            return descriptor

        if is_interface_class(cls):
            return TypeDescriptor(
                kind=Kind.INTERFACE,
                name=cls.__name__,
                package=module,
                signature=signature,
                type_args=type_args,
                load_methods=lambda: self._methods(cls, mapping, receiver=None),
            )

        # Classes declared inside another class body are inline (unnamed) structs.
        inline = "." in qualname and "<locals>" not in qualname
        descriptor = TypeDescriptor(
            kind=Kind.STRUCT,
            name="" if inline else cls.__name__,
            package=module,
            signature=signature,
            type_args=type_args,
            load_fields=lambda: self._fields(cls, mapping),
            load_methods=lambda: self._methods(cls, mapping, receiver=descriptor.pointer),
        )
        return descriptor

    # ---- class bodies ----

    def _fields(self, cls: type, mapping: dict[Any, Any]) -> list[FieldDescriptor]:
        parameters = tuple(getattr(cls, "__parameters__", ()))
        fields: list[FieldDescriptor] = []

        for base in cls.__dict__.get("__orig_bases__", cls.__bases__):
            base_cls = typing.get_origin(base) or base
            if not inspect.isclass(base_cls) or is_library_class(base_cls):
                continue
            fields.append(
                FieldDescriptor(
                    name=base_cls.__name__,
                    type=self.describe(substitute_type_vars(base, mapping)),
                    exported=is_exported(base_cls.__name__),
                    anonymous=True,
                )
            )

        own_names = list(inspect.get_annotations(cls))
        if not own_names:
            return fields

        hints = _type_hints(cls)
        dataclass_fields = {f.name: f for f in dataclasses.fields(cls)} if dataclasses.is_dataclass(cls) else {}

        for name in own_names:
            hint = hints.get(name, Any)
            if hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar:
                continue
            if isinstance(hint, dataclasses.InitVar):
                continue

            generic_param = mentions_type_vars(hint, parameters)
            dataclass_field = dataclass_fields.get(name)
            fields.append(
                FieldDescriptor(
                    name=name,
                    type=self.describe(substitute_type_vars(hint, mapping)),
                    exported=is_exported(name),
                    tags=dict(dataclass_field.metadata) if dataclass_field is not None else {},
                    generic_param=generic_param,
                    template=self.describe(hint) if generic_param else None,
                )
            )
        return fields

    def _methods(
        self,
        cls: type,
        mapping: dict[Any, Any],
        *,
        receiver: Optional[TypeDescriptor],
    ) -> list[MethodDescriptor]:
        functions: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            if is_library_class(klass):
                continue
            for name, member in vars(klass).items():
                if inspect.isfunction(member) and is_exported(name):
                    functions[name] = member
                else:
                    functions.pop(name, None)

        return [
            self._method(name, function, mapping, receiver)
            for name, function in functions.items()
        ]

    def _method(
        self,
        name: str,
        function: Any,
        mapping: dict[Any, Any],
        receiver: Optional[TypeDescriptor],
    ) -> MethodDescriptor:
        hints = _type_hints(function)
        parameters = list(inspect.signature(function).parameters.values())[1:]  # self

        param_types: list[TypeDescriptor] = [receiver] if receiver is not None else []
        for parameter in parameters:
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            annotation = hints.get(parameter.name, Any)
            param_types.append(self.describe(substitute_type_vars(annotation, mapping)))

        return MethodDescriptor(
            name=name,
            params=tuple(param_types),
            results=self._results(hints, mapping),
        )

    def _results(self, hints: dict[str, Any], mapping: dict[Any, Any]) -> tuple[TypeDescriptor, ...]:
        if "return" not in hints:
            return (self.any,)

        annotation = substitute_type_vars(hints["return"], mapping)
        if annotation is None or annotation is _NONE_TYPE:
            return ()

        # A fixed-size tuple return is several results.
        args = typing.get_args(annotation)
        if typing.get_origin(annotation) is tuple and Ellipsis not in args:
            return tuple(self.describe(a) for a in args)
        return (self.describe(annotation),)


def _is_member(container: Any, origins: frozenset[Any]) -> bool:
    try:
        return container in origins
    except TypeError:
        return False
