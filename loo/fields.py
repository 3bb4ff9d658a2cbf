"""
Loo Field Stores

Each tree node (and each of its severity views) owns one FieldStore: an
ordered mapping that only ever accumulates. At emit time the stores along
the path are overlaid with mergeFields, later sources winning.

Property of Uncompromising Sensors LLC.
"""

# Imports
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional


def combineFields(mapping: Optional[Mapping], fields: Mapping) -> Dict[str, Any]:
    """One dict from an optional positional mapping plus keyword fields (keywords win)."""
    combined: Dict[str, Any] = {}
    if mapping is not None:
        if not isinstance(mapping, Mapping):
            raise TypeError(f"Fields must be a mapping, got {type(mapping).__name__}")
        combined.update(mapping)
    combined.update(fields)
    return combined


class FieldStore:
    """Accumulating key/value store for one scope"""

    def __init__(self):
        self._fields: Dict[str, Any] = {}

    def add(self, mapping: Optional[Mapping] = None, /, **fields) -> None:
        """Append/overwrite keys; never replaces the whole store."""
        self._fields.update(combineFields(mapping, fields))

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._fields)

    def clear(self) -> None:
        self._fields.clear()

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldStore({self._fields!r})"


def _overlay(target: Dict[str, Any], source: Mapping) -> None:
    for key, value in source.items():
        current = target.get(key)
        if value is not current and isinstance(value, Mapping) and isinstance(current, Mapping):
            merged = dict(current)
            _overlay(merged, value)
            target[key] = merged
        else:
            # Values are shared, not copied; the serializer deals with cycles
            target[key] = value


def mergeFields(sources: Iterable[Optional[Mapping]]) -> Dict[str, Any]:
    """
    Deep-overlay sources in order; nested mappings merge, scalars are replaced.

    None and empty sources are skipped. Inputs are never mutated.
    """
    merged: Dict[str, Any] = {}
    for source in sources:
        if source:
            _overlay(merged, source)
    return merged
