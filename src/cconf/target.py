"""Destination descriptors for the population engine.

A :class:`Target` classifies a type annotation into the shape the engine
dispatches on (sequence, mapping, struct, polymorphic, scalar, ...).
Struct-like classes are dataclasses, pydantic models, and any other class
that declares annotated attributes.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import functools
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ValidationError

__all__ = [
    "Field",
    "Kind",
    "Target",
    "describe",
    "find_field",
    "new_instance",
    "satisfies",
    "struct_fields",
    "zero_value",
]

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)
_SEQUENCE_ORIGINS: tuple[Any, ...] = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)
_MAPPING_ORIGINS: tuple[Any, ...] = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)
_SCALAR_TYPES: tuple[type, ...] = (str, int, float, bool, bytes, type(None))


class Kind(str, enum.Enum):
    """Shape of a population destination."""

    ANY = "any"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    ARRAY = "array"
    MAPPING = "mapping"
    STRUCT = "struct"
    POLYMORPHIC = "polymorphic"
    UNION = "union"


@dataclass(frozen=True)
class Target:
    """A classified destination type.

    ``tp`` is the annotation with ``Optional`` and ``Annotated`` removed;
    ``args`` holds element types (sequence), slot types (array), or the
    key and value types (mapping).
    """

    kind: Kind
    tp: Any
    args: tuple[Any, ...] = ()
    optional: bool = False
    container: type | None = None


@dataclass(frozen=True)
class Field:
    """An attribute of a struct-like class."""

    name: str
    tp: Any
    settable: bool = True


def _strip(tp: Any) -> tuple[Any, bool]:
    optional = False
    while True:
        origin = typing.get_origin(tp)
        if origin is typing.Annotated:
            tp = typing.get_args(tp)[0]
            continue
        if origin in _UNION_TYPES:
            args = typing.get_args(tp)
            rest = tuple(a for a in args if a is not type(None))
            if len(rest) < len(args):
                optional = True
                if len(rest) == 1:
                    tp = rest[0]
                    continue
                tp = Union[rest]
        return tp, optional


def _has_annotations(cls: type) -> bool:
    for klass in cls.__mro__:
        if klass is object:
            continue
        if inspect.get_annotations(klass):
            return True
    return False


def _is_protocol(tp: Any) -> bool:
    return bool(getattr(tp, "_is_protocol", False)) and tp is not typing.Protocol


def _classify(tp: Any) -> Target:
    if tp is Any or tp is object or isinstance(tp, typing.TypeVar):
        return Target(Kind.ANY, tp)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in _UNION_TYPES:
        return Target(Kind.UNION, tp, args)

    if tp in _SEQUENCE_ORIGINS or origin in _SEQUENCE_ORIGINS:
        return Target(Kind.SEQUENCE, tp, (args[0] if args else Any,), container=list)

    if tp is tuple or origin is tuple:
        if not args:
            return Target(Kind.SEQUENCE, tp, (Any,), container=tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return Target(Kind.SEQUENCE, tp, (args[0],), container=tuple)
        if args == ((),):
            return Target(Kind.ARRAY, tp, (), container=tuple)
        return Target(Kind.ARRAY, tp, args, container=tuple)

    if tp in _MAPPING_ORIGINS or origin in _MAPPING_ORIGINS:
        key_tp, value_tp = args if len(args) == 2 else (Any, Any)
        return Target(Kind.MAPPING, tp, (key_tp, value_tp), container=dict)

    if origin is None and isinstance(tp, type):
        if issubclass(tp, _SCALAR_TYPES) or issubclass(tp, enum.Enum):
            return Target(Kind.SCALAR, tp)
        if _is_protocol(tp) or inspect.isabstract(tp):
            return Target(Kind.POLYMORPHIC, tp)
        if dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel) or _has_annotations(tp):
            return Target(Kind.STRUCT, tp)

    return Target(Kind.SCALAR, tp)


def _describe(tp: Any) -> Target:
    stripped, optional = _strip(tp)
    target = _classify(stripped)
    if optional:
        target = dataclasses.replace(target, optional=True)
    return target


_describe_cached = functools.lru_cache(maxsize=512)(_describe)


def describe(tp: Any) -> Target:
    """Classify the annotation ``tp``. Results are cached per annotation."""
    try:
        return _describe_cached(tp)
    except TypeError:
        return _describe(tp)


@functools.lru_cache(maxsize=256)
def struct_fields(cls: type) -> dict[str, Field]:
    """Return the configurable attributes of a struct-like class, keyed by name.

    Raises:
        NameError: If a forward reference in the annotations cannot be resolved.
    """
    fields: dict[str, Field] = {}

    if issubclass(cls, BaseModel):
        frozen = bool(cls.model_config.get("frozen"))
        for name, info in cls.model_fields.items():
            settable = not (frozen or info.frozen) and not name.startswith("_")
            fields[name] = Field(name, info.annotation, settable)
            if info.alias and info.alias != name:
                fields[info.alias] = fields[name]
    elif dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls, include_extras=True)
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        for f in dataclasses.fields(cls):
            settable = not frozen and not f.name.startswith("_")
            fields[f.name] = Field(f.name, hints.get(f.name, Any), settable)
    else:
        hints = typing.get_type_hints(cls, include_extras=True)
        for name, hint in hints.items():
            is_class_var = typing.get_origin(hint) is typing.ClassVar or hint is typing.ClassVar
            settable = not is_class_var and not name.startswith("_")
            fields[name] = Field(name, hint, settable)

    for klass in cls.__mro__:
        if klass is object or klass is BaseModel:
            continue
        for name, attr in vars(klass).items():
            if not isinstance(attr, property) or name in fields:
                continue
            try:
                ret = typing.get_type_hints(attr.fget).get("return", Any)
            except (NameError, TypeError):
                ret = Any
            fields[name] = Field(name, ret, attr.fset is not None and not name.startswith("_"))

    return fields


def find_field(cls: type, name: str) -> Field | None:
    """Look up an attribute of ``cls`` by name (or pydantic alias)."""
    return struct_fields(cls).get(name)


def _required_zeros(cls: type) -> dict[str, Any]:
    if issubclass(cls, BaseModel):
        return {name: zero_value(info.annotation) for name, info in cls.model_fields.items() if info.is_required()}
    hints = typing.get_type_hints(cls, include_extras=True)
    return {
        f.name: zero_value(hints.get(f.name, Any))
        for f in dataclasses.fields(cls)
        if f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
    }


def new_instance(cls: type) -> Any:
    """Create a fresh instance of a struct-like class.

    Classes whose constructors need arguments are built with zero values
    for every required attribute.
    """
    try:
        obj = cls()
    except (TypeError, ValidationError):
        if issubclass(cls, BaseModel):
            return cls.model_construct(**_required_zeros(cls))
        if dataclasses.is_dataclass(cls):
            return cls(**_required_zeros(cls))
        obj = cls.__new__(cls)

    if issubclass(cls, BaseModel) or dataclasses.is_dataclass(cls):
        return obj
    for name, f in struct_fields(cls).items():
        if not f.settable or isinstance(getattr(cls, name, None), property):
            continue
        if not hasattr(obj, name):
            setattr(obj, name, zero_value(f.tp))
    return obj


def zero_value(tp: Any) -> Any:
    """The value an unset destination of type ``tp`` starts from."""
    target = describe(tp)
    if target.optional:
        return None
    kind = target.kind
    if kind is Kind.SEQUENCE:
        return target.container()  # type: ignore[misc]
    if kind is Kind.ARRAY:
        return tuple(zero_value(a) for a in target.args)
    if kind is Kind.MAPPING:
        return {}
    if kind is Kind.STRUCT:
        return new_instance(target.tp)
    if kind is Kind.SCALAR:
        supertype = getattr(target.tp, "__supertype__", None)
        if supertype is not None:
            return zero_value(supertype)
        tp = target.tp
        if isinstance(tp, type) and issubclass(tp, (bool, int, float, str, bytes)) and not issubclass(tp, enum.Enum):
            return tp()
    return None


def _protocol_members(proto: type) -> set[str]:
    members: set[str] = set()
    for base in proto.__mro__:
        if base is object or base is typing.Protocol or base is typing.Generic:
            continue
        if not getattr(base, "_is_protocol", False):
            continue
        members.update(name for name in vars(base) if not name.startswith("_"))
        members.update(name for name in inspect.get_annotations(base) if not name.startswith("_"))
    return members


def satisfies(obj: Any, tp: Any) -> bool:
    """Whether ``obj`` provides the capabilities required by ``tp``."""
    if _is_protocol(tp) and not getattr(tp, "_is_runtime_protocol", False):
        return all(hasattr(obj, name) for name in _protocol_members(tp))
    return isinstance(obj, tp)
