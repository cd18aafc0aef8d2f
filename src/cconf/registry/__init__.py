"""cconf type registry.

Maps ``"type"`` discriminators to providers used during polymorphic
population.

Usage::

    from cconf.registry import TypeRegistry

    registry = TypeRegistry()
    registry.register("redis", RedisCache)
"""

from __future__ import annotations

from cconf.registry.registry import Provider, TypeRegistry
from cconf.registry.validation import validate_provider

__all__ = [
    "Provider",
    "TypeRegistry",
    "validate_provider",
]
