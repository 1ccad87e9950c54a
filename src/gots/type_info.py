"""Canonical identity of type descriptors."""
from __future__ import annotations

import re
from dataclasses import dataclass

from gots.descriptors import PRIMITIVE_KINDS, Kind, TypeDescriptor, underlying

# module.path.Base[module.path.Param]; qualnames may contain `<locals>`.
GENERIC_NAME_REGEX = re.compile(r"(?P<qualified>[^\[]+)\[(?P<params>(?:.*\.)?(?P<param>.*))\]")


@dataclass(frozen=True)
class TypeInfo:
    """Identity record; `qualified_name` is the dedup key."""
    is_generic: bool = False
    is_basic: bool = False
    is_alias: bool = False
    is_interface: bool = False
    underlying_kind: Kind = Kind.OTHER
    base_name: str = ""
    qualified_name: str = ""
    generic_param_text: str = ""


def is_base_type(t: TypeDescriptor) -> bool:
    return t.kind in PRIMITIVE_KINDS


def is_alias_to_base_type(t: TypeDescriptor) -> bool:
    """A named primitive: primitive kind declared in some module."""
    return t.package != "" and is_base_type(t)


def resolve(t: TypeDescriptor) -> TypeInfo:
    """Classify a descriptor by its printable signature and kind."""
    match = None
    if t.kind in (Kind.STRUCT, Kind.INTERFACE):
        match = GENERIC_NAME_REGEX.fullmatch(t.signature)
    if match is not None:
        # Params are not part of the dedup key.
        return TypeInfo(
            is_generic=True,
            underlying_kind=t.kind,
            base_name=match.group("qualified").rpartition(".")[2],
            qualified_name=match.group("qualified"),
            generic_param_text=match.group("param"),
        )

    is_alias = is_alias_to_base_type(t)
    is_basic = is_base_type(t) and not is_alias

    inner = underlying(t)
    if inner.kind is Kind.INTERFACE:
        return TypeInfo(
            is_basic=is_basic,
            is_alias=is_alias,
            is_interface=True,
            underlying_kind=inner.kind,
            base_name=inner.name,
            qualified_name=inner.signature,
        )

    return TypeInfo(
        is_basic=is_basic,
        is_alias=is_alias,
        underlying_kind=t.kind,
        base_name=t.name or t.signature.rpartition(".")[2],
        qualified_name=t.signature,
    )
