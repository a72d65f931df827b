"""
Dotted property paths for inspector edits.

Paths address attributes and dict keys alike: "name", "payload.intensity",
"metadata.isPickable".
"""

from __future__ import annotations

import copy
from typing import Any

import numpy as np

from scenekit import log


def _step_get(cur: Any, part: str) -> Any:
    if isinstance(cur, dict):
        return cur[part]
    return getattr(cur, part)


class _Missing:
    """Value of a property path that does not exist."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

_RAISE = object()


def resolve_path_get(obj: Any, path: str, default: Any = _RAISE) -> Any:
    """
    Value at path. A missing key or attribute raises, unless a default
    is given (usually MISSING).
    """
    cur = obj
    for part in path.split("."):
        try:
            cur = _step_get(cur, part)
        except (KeyError, AttributeError):
            if default is _RAISE:
                raise
            return default
    return cur


def resolve_path_set(obj: Any, path: str, value: Any) -> None:
    parts = path.split(".")
    cur = obj
    for part in parts[:-1]:
        cur = _step_get(cur, part)
    last = parts[-1]

    if isinstance(cur, dict):
        existing = cur.get(last)
        if isinstance(existing, np.ndarray) and value is not None:
            cur[last] = np.array(value, dtype=existing.dtype)
        else:
            cur[last] = value
        return

    if not hasattr(cur, last):
        log.debug(f"[InspectField] creating attribute '{path}' on {type(cur).__name__}")
    setattr(cur, last, value)


def resolve_path_delete(obj: Any, path: str) -> None:
    """Remove the dict key or attribute at path. Absent ones are ignored."""
    parts = path.split(".")
    cur = obj
    for part in parts[:-1]:
        cur = _step_get(cur, part)
    last = parts[-1]

    if isinstance(cur, dict):
        cur.pop(last, None)
    elif last in vars(cur):
        delattr(cur, last)


def clone_value(value: Any) -> Any:
    """
    Copy of a value safe to keep inside a command.

    numpy arrays and containers are copied, everything else is returned as is.
    """
    if isinstance(value, np.ndarray):
        return value.copy()
    if isinstance(value, (list, dict, set)):
        return copy.deepcopy(value)
    return value


def values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        try:
            return bool(np.array_equal(np.asarray(a), np.asarray(b)))
        except (TypeError, ValueError):
            return False
    return a == b
