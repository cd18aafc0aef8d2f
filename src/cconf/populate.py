"""Population engine: projects untyped configuration trees onto typed objects."""

from __future__ import annotations

import copy
import enum
import logging
from typing import Any

from pydantic import ValidationError

from cconf.convert import ConversionError, convert, type_name
from cconf.errors import ConfigTargetError, ConfigValueError
from cconf.registry import TypeRegistry
from cconf.target import Kind, Target, describe, find_field, satisfies, zero_value

logger = logging.getLogger(__name__)

__all__ = ["TYPE_KEY", "Populator", "check_target"]

TYPE_KEY = "type"

_IMMUTABLE = (int, float, complex, str, bytes, bool, tuple, frozenset, enum.Enum)


def _join(key: str, seg: object) -> str:
    return f"{key}.{seg}" if key else str(seg)


def check_target(target: Any) -> None:
    """Raise ConfigTargetError unless ``target`` can be populated in place."""
    if target is None or isinstance(target, type) or isinstance(target, _IMMUTABLE):
        raise ConfigTargetError(target)


class Populator:
    """Walks a destination alongside an untyped source tree and assigns values.

    Every recursive step returns the value to store at the current location;
    mutable destinations (lists, dicts, objects) are updated in place and
    returned.
    """

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self._registry = registry if registry is not None else TypeRegistry()

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def populate(self, target: Any, source: Any, key: str = "") -> None:
        """Populate ``target`` in place from ``source``.

        Objects are configured through their declared fields: dataclass and
        pydantic fields, class-level annotations and settable properties.
        Attributes assigned only in ``__init__`` are not fields, so a class
        without annotations is treated as a scalar and rejects a mapping.

        Args:
            target: A mutable object, list, or dict.
            source: Untyped tree (or sub-tree) to read from.
            key: Dotted path of ``source`` within the store, used in errors.

        Raises:
            ConfigTargetError: If ``target`` is None, a class, or immutable.
            ConfigValueError: If the source does not fit the target's shape.
        """
        check_target(target)

        tp = type(target)
        if isinstance(target, list):
            tp = list
        elif isinstance(target, dict):
            tp = dict
        self._populate(describe(tp), target, source, key)

    # ----- Dispatch -----

    def _populate(self, target: Target, current: Any, source: Any, key: str) -> Any:
        if source is None:
            return self._populate_null(target, current)

        if target.kind is Kind.ANY:
            return copy.deepcopy(source)

        if isinstance(source, list):
            return self._populate_sequence(target, current, source, key)

        if isinstance(source, dict):
            kind = target.kind
            if kind is Kind.POLYMORPHIC:
                return self._populate_polymorphic(target, source, key)
            if kind is Kind.STRUCT:
                if current is None or not isinstance(current, target.tp):
                    current = self._allocate(target.tp, key)
                return self._populate_struct(current, source, key)
            if kind is Kind.MAPPING:
                return self._populate_mapping(target, current, source, key)
            if kind is Kind.UNION:
                return copy.deepcopy(source)
            raise ConfigValueError(key, f"a map cannot be used to configure {type_name(target.tp)}")

        return self._populate_scalar(target, source, key)

    def _allocate(self, tp: Any, key: str) -> Any:
        try:
            return zero_value(tp)
        except (NameError, TypeError, ValidationError) as exc:
            raise ConfigValueError(key, f"cannot create an instance of {type_name(tp)}: {exc}", cause=exc) from exc

    # ----- Shapes -----

    def _populate_sequence(self, target: Target, current: Any, source: list[Any], key: str) -> Any:
        if target.kind is Kind.UNION:
            return copy.deepcopy(source)
        if target.kind is Kind.ARRAY:
            return self._populate_array(target, current, source, key)
        if target.kind is not Kind.SEQUENCE:
            raise ConfigValueError(key, f"list cannot be used to configure {type_name(target.tp)}")

        elem = describe(target.args[0])
        n = len(source)
        if target.container is list and isinstance(current, list):
            items = current
        else:
            items = list(current) if isinstance(current, (list, tuple)) else []

        if len(items) < n:
            for _ in range(n - len(items)):
                items.append(self._allocate(elem.tp, key) if not elem.optional else None)
        for i in range(n):
            items[i] = self._populate(elem, items[i], source[i], _join(key, i))
        del items[n:]

        if target.container is tuple:
            return tuple(items)
        return items

    def _populate_array(self, target: Target, current: Any, source: list[Any], key: str) -> Any:
        size = len(target.args)
        previous = list(current) if isinstance(current, tuple) and len(current) == size else None
        slots: list[Any] = []
        for i, slot_tp in enumerate(target.args):
            slot = describe(slot_tp)
            if i >= len(source):
                slots.append(None if slot.optional else self._allocate(slot_tp, key))
                continue
            existing = previous[i] if previous is not None else None
            slots.append(self._populate(slot, existing, source[i], _join(key, i)))
        return tuple(slots)

    def _populate_mapping(self, target: Target, current: Any, source: dict[str, Any], key: str) -> Any:
        key_tp, value_tp = target.args
        value_target = describe(value_tp)
        result = current if isinstance(current, dict) else {}
        for k, v in source.items():
            path = _join(key, k)
            try:
                converted = convert(k, key_tp)
            except ConversionError as exc:
                raise ConfigValueError(path, f"key {exc}", cause=exc) from exc
            elem = None if value_target.optional else self._allocate(value_target.tp, path)
            result[converted] = self._populate(value_target, elem, v, path)
        return result

    def _populate_struct(self, obj: Any, source: dict[str, Any], key: str) -> Any:
        cls = type(obj)
        for k, v in source.items():
            if k == TYPE_KEY:
                continue
            path = _join(key, k)
            try:
                field = find_field(cls, k)
            except NameError as exc:
                raise ConfigValueError(path, f"cannot resolve the annotations of {cls.__name__}: {exc}", cause=exc) from exc
            if field is None:
                raise ConfigValueError(path, f"field {k} not found in {cls.__name__}")
            if not field.settable:
                raise ConfigValueError(path, f"field {k} cannot be set")

            # Unset struct-typed fields, Optional or not, are allocated by _populate.
            current = getattr(obj, field.name, None)
            value = self._populate(describe(field.tp), current, v, path)
            try:
                setattr(obj, field.name, value)
            except (AttributeError, TypeError, ValidationError) as exc:
                raise ConfigValueError(path, f"field {k} cannot be set: {exc}", cause=exc) from exc
        return obj

    def _populate_polymorphic(self, target: Target, source: dict[str, Any], key: str) -> Any:
        discriminator = source.get(TYPE_KEY)
        if discriminator is None:
            raise ConfigValueError(key, "missing the type element")
        if not isinstance(discriminator, str):
            raise ConfigValueError(key, "type must be a string")

        provider = self._registry.resolve(discriminator)
        if provider is None:
            raise ConfigValueError(key, f'type "{discriminator}" is unknown')

        try:
            obj = provider()
        except Exception as exc:
            raise ConfigValueError(key, f'the provider of type "{discriminator}" failed: {exc}', cause=exc) from exc
        if obj is None:
            raise ConfigValueError(key, f'the provider of type "{discriminator}" returned None')
        if not satisfies(obj, target.tp):
            raise ConfigValueError(key, f"{type(obj).__name__} does not implement {type_name(target.tp)}")

        logger.debug("Built %s for '%s' from type '%s'", type(obj).__name__, key, discriminator)
        return self._populate_struct(obj, source, key)

    def _populate_null(self, target: Target, current: Any) -> Any:
        if target.optional or target.kind in (Kind.ANY, Kind.POLYMORPHIC, Kind.UNION):
            return None
        if target.kind is Kind.SEQUENCE:
            if isinstance(current, list):
                current.clear()
                return current
            return target.container()  # type: ignore[misc]
        if target.kind is Kind.MAPPING:
            if isinstance(current, dict):
                current.clear()
                return current
            return {}
        return current

    def _populate_scalar(self, target: Target, source: Any, key: str) -> Any:
        try:
            return convert(source, target.tp)
        except ConversionError as exc:
            raise ConfigValueError(key, str(exc), cause=exc) from exc
