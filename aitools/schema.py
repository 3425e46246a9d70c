"""
Type-to-schema inference.

This module defines:
- the Type Descriptor variants (`Primitive`, `Reference`, `FixedArray`,
  `FixedTuple`, `NamedContainer`, `Opaque`, `Unknown`);
- `describe()`: classify a resolved Python annotation into a descriptor;
- `ty_to_schema()`: a pure, total mapping from descriptor to JSON Schema fragment.

Optionality is never encoded in a fragment; `is_optional()` reports it so the
caller can leave the parameter out of ``required``.
"""

from __future__ import annotations

import collections
import collections.abc
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import JsonValue

#: Container names treated as "growable sequence of T".
SEQUENCE_CONTAINERS = frozenset(
    {
        "list",
        "List",
        "tuple",
        "Tuple",
        "Sequence",
        "MutableSequence",
        "set",
        "Set",
        "MutableSet",
        "frozenset",
        "FrozenSet",
        "deque",
        "Deque",
    }
)

#: Container names treated as "nullable/optional of T".
OPTIONAL_CONTAINERS = frozenset({"Optional"})

_PRIMITIVES = {
    bool: "boolean",
    int: "integer",
    float: "number",
    str: "string",
}

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.deque,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)


@dataclass(frozen=True)
class Primitive:
    json_type: str


@dataclass(frozen=True)
class Reference:
    target: "TypeDescriptor"


@dataclass(frozen=True)
class FixedArray:
    item: "TypeDescriptor"


@dataclass(frozen=True)
class FixedTuple:
    items: Tuple["TypeDescriptor", ...]


@dataclass(frozen=True)
class NamedContainer:
    name: str
    inner: Optional["TypeDescriptor"] = None


@dataclass(frozen=True)
class Opaque:
    pass


@dataclass(frozen=True)
class Unknown:
    label: str = ""


TypeDescriptor = Union[Primitive, Reference, FixedArray, FixedTuple, NamedContainer, Opaque, Unknown]


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def describe(annotation: Any) -> TypeDescriptor:
    """
    Classify a resolved annotation into a Type Descriptor.

    Parameters
    ----------
    annotation : Any
        An annotation as returned by ``typing.get_type_hints(include_extras=True)``.

    Returns
    -------
    TypeDescriptor
        Never raises; unrecognised shapes become `Unknown`.
    """
    if annotation is Any or annotation is object or annotation is JsonValue:
        return Opaque()

    if annotation is typing.Optional:
        return NamedContainer("Optional")

    # exact lookup keeps bool from falling into the int family
    if isinstance(annotation, type) and annotation in _PRIMITIVES:
        return Primitive(_PRIMITIVES[annotation])

    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return Reference(describe(supertype))

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return Reference(describe(args[0]))

    if _is_union(origin):
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == len(args):
            return Unknown(repr(annotation))
        if len(members) == 1:
            return NamedContainer("Optional", describe(members[0]))
        return NamedContainer("Optional", Unknown(repr(annotation)))

    if origin is tuple and annotation is not typing.Tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return FixedArray(describe(args[0]))
        if args == ((),):
            args = ()
        return FixedTuple(tuple(describe(arg) for arg in args))

    container = origin or annotation
    if isinstance(container, type) and container in _SEQUENCE_ORIGINS:
        inner = describe(args[0]) if args else None
        return NamedContainer(container.__name__, inner)

    return Unknown(repr(annotation))


def ty_to_schema(descriptor: TypeDescriptor) -> Dict[str, Any]:
    """Return the JSON Schema fragment for a descriptor (a fresh dict each call)."""
    if isinstance(descriptor, Reference):
        return ty_to_schema(descriptor.target)

    if isinstance(descriptor, FixedArray):
        return {"type": "array", "items": ty_to_schema(descriptor.item)}

    if isinstance(descriptor, FixedTuple):
        items = [ty_to_schema(item) for item in descriptor.items]
        return {
            "type": "array",
            "items": items,
            "minItems": len(items),
            "maxItems": len(items),
        }

    if isinstance(descriptor, NamedContainer):
        if descriptor.name in SEQUENCE_CONTAINERS:
            if descriptor.inner is not None:
                return {"type": "array", "items": ty_to_schema(descriptor.inner)}
            return {"type": "array", "items": {"type": "string"}}
        if descriptor.name in OPTIONAL_CONTAINERS:
            if descriptor.inner is not None:
                return ty_to_schema(descriptor.inner)
            return {}

    if isinstance(descriptor, Primitive):
        return {"type": descriptor.json_type}

    if isinstance(descriptor, Opaque):
        return {}

    return {"type": "string"}


def is_optional(descriptor: TypeDescriptor) -> bool:
    """True when the descriptor (looking through references) is a nullable container."""
    while isinstance(descriptor, Reference):
        descriptor = descriptor.target
    return isinstance(descriptor, NamedContainer) and descriptor.name in OPTIONAL_CONTAINERS


def annotation_to_schema(annotation: Any) -> Dict[str, Any]:
    """Shortcut for ``ty_to_schema(describe(annotation))``."""
    return ty_to_schema(describe(annotation))
