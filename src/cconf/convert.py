"""Scalar conversion between configuration values and annotated types."""

from __future__ import annotations

import enum
import types
import typing
from typing import Any, Union

from pydantic import PydanticUndefinedAnnotation, PydanticUserError, TypeAdapter, ValidationError

__all__ = ["ConversionError", "convert", "type_name"]

_UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)

_adapters: dict[Any, TypeAdapter[Any]] = {}


class ConversionError(ValueError):
    """Raised when a value is not convertible to a requested type."""


def type_name(tp: Any) -> str:
    """Readable name for a type or annotation, used in error messages."""
    if isinstance(tp, type) and typing.get_origin(tp) is None:
        return tp.__name__
    return repr(tp).replace("typing.", "")


def _adapter(tp: Any) -> TypeAdapter[Any]:
    try:
        adapter = _adapters.get(tp)
    except TypeError:
        return TypeAdapter(tp)
    if adapter is None:
        adapter = _adapters[tp] = TypeAdapter(tp)
    return adapter


def _fail(value: Any, tp: Any) -> ConversionError:
    return ConversionError(f"{type(value).__name__} cannot be used to configure {type_name(tp)}")


def convert(value: Any, tp: Any) -> Any:
    """Convert a scalar ``value`` to the type ``tp``.

    Numbers convert between int and float (float to int truncates), strings
    and booleans only accept their own kind, enums convert by value.
    Other annotations are validated by pydantic in lax mode.

    Raises:
        ConversionError: If the value is not convertible.
    """
    if tp is Any or tp is object:
        return value

    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:
        return convert(value, supertype)

    origin = typing.get_origin(tp)
    if origin is typing.Annotated:
        return convert(value, typing.get_args(tp)[0])
    if origin in _UNION_TYPES:
        args = typing.get_args(tp)
        if value is None and type(None) in args:
            return None
        for arg in args:
            if arg is type(None):
                continue
            try:
                return convert(value, arg)
            except ConversionError:
                continue
        raise _fail(value, tp)

    if isinstance(tp, type) and origin is None:
        if isinstance(value, bool) and not issubclass(tp, bool):
            raise _fail(value, tp)
        if isinstance(value, tp):
            return value
        if issubclass(tp, enum.Enum):
            try:
                return tp(value)
            except ValueError as exc:
                raise _fail(value, tp) from exc
        if issubclass(tp, bool):
            raise _fail(value, tp)
        if issubclass(tp, (int, float)):
            if not isinstance(value, (int, float)):
                raise _fail(value, tp)
            # inf and nan have no int form; huge ints have no float form.
            try:
                return tp(value)
            except (OverflowError, ValueError) as exc:
                raise _fail(value, tp) from exc
        if issubclass(tp, str):
            if isinstance(value, str):
                return tp(value)
            raise _fail(value, tp)

    try:
        return _adapter(tp).validate_python(value)
    except (ValidationError, PydanticUserError, PydanticUndefinedAnnotation) as exc:
        raise _fail(value, tp) from exc
