"""Deep merge of untyped configuration trees."""

from __future__ import annotations

from typing import Any

__all__ = ["merge", "merge_all"]


def merge(a: Any, b: Any) -> Any:
    """Merge ``b`` into ``a`` and return the result.

    If either side is not a dict, ``b`` replaces ``a``. Otherwise ``a`` is
    updated in place: keys holding dicts on both sides are merged
    recursively and every other key of ``b`` overwrites ``a``. Lists are
    replaced, never merged element-wise.
    """
    if not isinstance(a, dict) or not isinstance(b, dict):
        return b

    for key, value in b.items():
        current = a.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = merge(current, value)
        a[key] = value
    return a


def merge_all(*trees: Any) -> Any:
    """Fold ``trees`` left to right with :func:`merge`. Later trees win."""
    result: Any = None
    for tree in trees:
        result = merge(result, tree)
    return result
