"""Structural cloning of plain data.

:func:`clone_structure` is a deep copy that only understands the
value shapes a JSON document can hold: mappings, sequences, strings,
numbers, booleans and ``None``. Everything else is dropped:

- a non-plain value inside a mapping removes its key;
- a non-plain value inside a list becomes ``None``;
- a non-plain value at the root raises :class:`UnclonableValueError`.

Callables, arbitrary objects, sets, bytes and datetimes are all non-plain.
The output therefore survives any number of encode/decode round trips
unchanged, which is what makes sanitized nodes safe to persist.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from typing import Any

_PRIMITIVES = (str, int, bool, type(None))


class CloneError(ValueError):
    """A value could not be expressed as plain data."""


class UnclonableValueError(CloneError):
    """The root value is not plain data."""


class CyclicStructureError(CloneError):
    """The value contains a reference cycle."""


class _Dropped:
    """Sentinel for a nested value that has no plain-data form."""


_DROPPED = _Dropped()
_END = object()


def _mapping_key(key: Any) -> str | None:
    # Mirrors how a JSON encoder coerces non-string keys.
    if isinstance(key, str):
        return key
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        return repr(key) if math.isfinite(key) else None
    return None


def _scalar(value: Any) -> Any:
    if isinstance(value, _PRIMITIVES):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return _DROPPED


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping | list | tuple)


def _open(value: Any, active: set[int]) -> tuple[Any, Iterator[Any], int]:
    """Start copying a container: returns its empty copy, entries and marker."""
    marker = id(value)
    if marker in active:
        kind = "Mapping" if isinstance(value, Mapping) else "Sequence"
        raise CyclicStructureError(f"{kind} refers back to itself")
    active.add(marker)
    if isinstance(value, Mapping):
        return {}, iter(value.items()), marker
    return [], iter(value), marker


def _clone(value: Any) -> Any:
    if not _is_container(value):
        return _scalar(value)

    # ``active`` holds the containers between the root and the current one;
    # meeting one of them again is a cycle.
    active: set[int] = set()
    root, entries, marker = _open(value, active)
    stack = [(root, entries, marker)]
    while stack:
        target, entries, marker = stack[-1]
        entry = next(entries, _END)
        if entry is _END:
            stack.pop()
            active.discard(marker)
            continue

        if isinstance(target, dict):
            key, item = entry
            name = _mapping_key(key)
            if name is None:
                continue
        else:
            item = entry

        if _is_container(item):
            cloned, child_entries, child_marker = _open(item, active)
            stack.append((cloned, child_entries, child_marker))
        else:
            cloned = _scalar(item)
            if cloned is _DROPPED:
                if isinstance(target, dict):
                    continue
                cloned = None

        if isinstance(target, dict):
            target[name] = cloned
        else:
            target.append(cloned)
    return root


def clone_structure(value: Any) -> Any:
    """Return a plain-data deep copy of *value*.

    Nesting depth is bounded only by memory; the walk keeps its own stack.

    Raises:
        UnclonableValueError: *value* itself is not plain data.
        CyclicStructureError: *value* contains a reference cycle.
    """
    result = _clone(value)
    if result is _DROPPED:
        raise UnclonableValueError(f"Cannot clone value of type {type(value).__name__}")
    return result


def is_plain_data(value: Any) -> bool:
    """True if *value* clones to an equal value with nothing dropped."""
    try:
        clone_structure(value)
    except CloneError:
        return False

    pending = [value]
    while pending:
        item = pending.pop()
        if isinstance(item, dict):
            if not all(isinstance(key, str) for key in item):
                return False
            pending.extend(item.values())
        elif isinstance(item, list):
            pending.extend(item)
        elif isinstance(item, float):
            if not math.isfinite(item):
                return False
        elif not isinstance(item, _PRIMITIVES):
            return False
    return True
