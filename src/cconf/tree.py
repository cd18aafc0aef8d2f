"""Path-based access to untyped configuration trees.

A tree is made of dicts, lists and scalars as produced by the loaders.
Paths are separator-joined segments; a segment indexes a dict by key or a
list by a non-negative decimal index.
"""

from __future__ import annotations

from typing import Any

from cconf.errors import PathError

__all__ = ["MISSING", "get_element", "get_path", "paths_overlap", "set_element", "set_path"]


class _Missing:
    """Marker for a path that does not resolve to a node."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def _parse_index(seg: str) -> int | None:
    if not seg.isdigit() or not seg.isascii():
        return None
    return int(seg)


def get_element(node: Any, seg: str) -> Any:
    """Return the child of a dict or list at ``seg``, or MISSING.

    A child that holds ``None`` is reported as MISSING.
    """
    if isinstance(node, dict):
        value = node.get(seg)
    elif isinstance(node, list):
        i = _parse_index(seg)
        if i is None or i >= len(node):
            return MISSING
        value = node[i]
    else:
        return MISSING
    return MISSING if value is None else value


def set_element(node: Any, seg: str, value: Any) -> None:
    """Assign ``value`` as the child of a dict or list at ``seg``.

    Lists are never grown: the index must address an existing slot.

    Raises:
        ValueError: If ``seg`` is not a usable list index.
    """
    if isinstance(node, dict):
        node[seg] = value
        return
    i = _parse_index(seg)
    if i is None:
        raise ValueError(f"{seg} is not a valid list index")
    if i >= len(node):
        raise ValueError(f"{seg} is out of the list index bound")
    node[i] = value


def get_path(tree: Any, path: str, separator: str = ".") -> Any:
    """Resolve a dotted path against ``tree``. Returns MISSING if unresolvable."""
    node = tree
    for seg in path.split(separator):
        node = get_element(node, seg)
        if node is MISSING:
            return MISSING
    return node


def set_path(tree: Any, path: str, value: Any, separator: str = ".") -> None:
    """Assign ``value`` at a dotted path, creating missing intermediate dicts.

    The tree is left unchanged when the write fails.

    Raises:
        PathError: If an intermediate node is a scalar, a list index is
            invalid or out of range, or a list would have to be created.
    """
    node = tree
    segs = path.split(separator)
    last = len(segs) - 1
    for i, seg in enumerate(segs):
        prefix = separator.join(segs[: i + 1])
        if not isinstance(node, (dict, list)):
            raise PathError(prefix, f"got {type(node).__name__} instead of a dict or list")

        if i == last:
            try:
                set_element(node, seg, value)
            except ValueError as exc:
                raise PathError(path, str(exc)) from exc
            return

        child = get_element(node, seg)
        if child is not MISSING:
            node = child
            continue

        # Everything below this point is new: check the rest of the path,
        # then attach the whole branch at once.
        for j in range(i + 1, len(segs)):
            if _parse_index(segs[j]) is not None:
                raise PathError(separator.join(segs[: j + 1]), "lists are not created implicitly")
        branch = value
        for s in reversed(segs[i + 1 :]):
            branch = {s: branch}
        try:
            set_element(node, seg, branch)
        except ValueError as exc:
            raise PathError(prefix, str(exc)) from exc
        return


def paths_overlap(a: str, b: str, separator: str = ".") -> bool:
    """Whether one path equals or is an ancestor of the other.

    Digit segments are compared as list indexes, so ``l.00`` and ``l.0``
    overlap.
    """
    for x, y in zip(a.split(separator), b.split(separator)):
        if x == y:
            continue
        i = _parse_index(x)
        if i is None or i != _parse_index(y):
            return False
    return True
