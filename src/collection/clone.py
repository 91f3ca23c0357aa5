"""Structural deep copy of record values.

This module isolates callers from hooks and persistence by copying
record data before it leaves the caller's hands.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

_PRIMITIVE_TYPES = (str, int, float, bool, bytes, type(None))


def clone_value(value: Any) -> Any:
    """Return a structurally independent deep copy of value.

    Mappings become dicts and records lose their identity. Lists and
    tuples keep their type. Callables are not data: they are dropped
    from mappings and become None inside sequences. Other objects go
    through copy.deepcopy.

    Args:
        value: Record, mapping, sequence, or primitive.

    Returns:
        Independent copy of value.
    """
    if isinstance(value, _PRIMITIVE_TYPES):
        return value
    if isinstance(value, Mapping):
        return {
            key: clone_value(item)
            for key, item in value.items()
            if not callable(item)
        }
    if isinstance(value, list):
        return [_clone_item(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_clone_item(item) for item in value)
    return copy.deepcopy(value)


def _clone_item(item: Any) -> Any:
    if callable(item):
        return None
    return clone_value(item)
