"""Runtime type descriptors walked by the definition generator."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable, Mapping, Optional


class Kind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    STRING = "string"
    UNSAFE_POINTER = "unsafe.Pointer"
    POINTER = "ptr"
    SLICE = "slice"
    MAP = "map"
    STRUCT = "struct"
    INTERFACE = "interface"
    FUNC = "func"
    OTHER = "other"


PRIMITIVE_KINDS = frozenset({
    Kind.BOOL,
    Kind.INT, Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64,
    Kind.UINT, Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64, Kind.UINTPTR,
    Kind.FLOAT32, Kind.FLOAT64,
    Kind.COMPLEX64, Kind.COMPLEX128,
    Kind.STRING,
    Kind.UNSAFE_POINTER,
})

# Printable signature of the universal (empty) interface.
ANY_SIGNATURE = "Any"


def is_exported(name: str) -> bool:
    return bool(name) and not name.startswith("_")


@dataclass(frozen=True)
class FieldDescriptor:
    """One struct field; embedded base classes are anonymous fields."""
    name: str
    type: TypeDescriptor
    exported: bool = True
    anonymous: bool = False
    tags: Mapping[str, object] = field(default_factory=dict)
    generic_param: bool = False
    # Unsubstituted field type of a generic-parameter field.
    template: Optional[TypeDescriptor] = None


@dataclass(frozen=True)
class MethodDescriptor:
    """Method signature; concrete methods carry the receiver as params[0]."""
    name: str
    params: tuple[TypeDescriptor, ...] = ()
    results: tuple[TypeDescriptor, ...] = ()

    @property
    def exported(self) -> bool:
        return is_exported(self.name)


FieldLoader = Callable[[], "tuple[FieldDescriptor, ...]"]
MethodLoader = Callable[[], "tuple[MethodDescriptor, ...]"]


@dataclass(frozen=True, eq=False)
class TypeDescriptor:
    """
    Immutable description of one runtime type.

    Fields and methods load lazily so self-referential types can be
    described before their members are.
    """
    kind: Kind
    name: str = ""
    package: str = ""
    signature: str = ""
    elem: Optional[TypeDescriptor] = None
    key: Optional[TypeDescriptor] = None
    type_args: tuple[TypeDescriptor, ...] = ()
    load_fields: Optional[FieldLoader] = field(default=None, repr=False)
    load_methods: Optional[MethodLoader] = field(default=None, repr=False)

    def __str__(self) -> str:
        return self.signature

    @cached_property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        if self.load_fields is None:
            return ()
        return tuple(self.load_fields())

    @cached_property
    def methods(self) -> tuple[MethodDescriptor, ...]:
        if self.load_methods is None:
            return ()
        return tuple(sorted(self.load_methods(), key=lambda m: m.name))

    @cached_property
    def pointer(self) -> TypeDescriptor:
        """Pointer-to-this; its method set is the full method set of this type."""
        return TypeDescriptor(
            kind=Kind.POINTER,
            signature="*" + self.signature,
            elem=self,
            load_methods=lambda: self.methods,
        )


def underlying(t: TypeDescriptor) -> TypeDescriptor:
    """Strip one level of pointer indirection."""
    if t.kind is Kind.POINTER and t.elem is not None:
        return t.elem
    return t
