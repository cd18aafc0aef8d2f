"""Provider validation for the type registry."""

from __future__ import annotations

import inspect
from typing import Any

__all__ = ["validate_provider"]

_REQUIRED_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


def _returns_none(provider: Any) -> bool:
    if inspect.isclass(provider):
        return False
    annotations = getattr(provider, "__annotations__", None) or {}
    if "return" not in annotations:
        return False
    ret = annotations["return"]
    return ret is None or ret is type(None) or ret == "None"


def validate_provider(provider: Any) -> list[str]:
    """Validate that ``provider`` can be called with no arguments to build one value.

    Accepts classes and plain callables. Returns a list of validation error
    strings. Empty list means valid.
    """
    if not callable(provider):
        return [f"The provider should be a callable, got {type(provider).__name__}"]

    if inspect.isclass(provider) and inspect.isabstract(provider):
        return [f"The provider should be a concrete class, got abstract {provider.__name__}"]

    errors: list[str] = []
    try:
        sig = inspect.signature(provider)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are trusted.
        sig = None

    if sig is not None:
        required = [
            name
            for name, param in sig.parameters.items()
            if param.kind in _REQUIRED_KINDS and param.default is inspect.Parameter.empty
        ]
        if required:
            errors.append(f"The provider should take no arguments, got required parameters {', '.join(required)}")

    if _returns_none(provider):
        errors.append("The provider should have a single output, got None")

    return errors
