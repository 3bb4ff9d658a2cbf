"""
Loo Record Serializer

Turns a record mapping into one newline-terminated UTF-8 JSON line using
orjson, the same encoder the stream servers use for their NDJSON output.

Contract:
- Never raises. Values orjson cannot encode natively go through a default
  hook; cycles, oversize integers, lone surrogates and runaway nesting are
  sanitized and the record is encoded a second time.
- Key order of the record is preserved (no key sorting).

Property of Uncompromising Sensors LLC.
"""

# Imports
import orjson
from collections.abc import Mapping
from typing import Any


CIRCULAR = '[Circular]'
TRUNCATED = '[Truncated]'

# orjson refuses integers outside the signed/unsigned 64-bit range
_INT_MIN = -(2 ** 63)
_INT_MAX = 2 ** 64 - 1

# orjson's own recursion limit is 254; stay well below it
_MAX_DEPTH = 128

_OPTIONS = orjson.OPT_NON_STR_KEYS


def _default(obj: Any) -> Any:
    """orjson default hook for values without a native JSON form."""
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj).decode('utf-8', errors='replace')
    # Decimal, paths, exceptions and anything else: text form
    return str(obj)


def _cleanText(value: str) -> str:
    """Replace lone surrogates (e.g. surrogateescape file names), which orjson rejects."""
    try:
        value.encode('utf-8')
        return value
    except UnicodeEncodeError:
        return value.encode('utf-8', 'surrogatepass').decode('utf-8', 'replace')


def _sanitize(value: Any, ancestors: tuple, depth: int) -> Any:
    """Copy value into plain JSON types, cutting cycles and deep nesting."""
    if isinstance(value, str):
        return _cleanText(str(value))
    if value is None or isinstance(value, (bool, float)):
        return value
    if isinstance(value, int):
        if _INT_MIN <= value <= _INT_MAX:
            return int(value)
        return str(value)
    if depth >= _MAX_DEPTH:
        return TRUNCATED

    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        if id(value) in ancestors:
            return CIRCULAR
        ancestors = ancestors + (id(value),)
        if isinstance(value, Mapping):
            return {_cleanText(str(k)): _sanitize(v, ancestors, depth + 1)
                    for k, v in value.items()}
        return [_sanitize(v, ancestors, depth + 1) for v in value]

    try:
        orjson.dumps(value, option=_OPTIONS)
        return value
    except TypeError:
        pass
    try:
        fallback = _default(value)
    except Exception:
        fallback = f"<unrepresentable {type(value).__name__}>"
    return _sanitize(fallback, ancestors, depth + 1)


def makeSafe(value: Any) -> Any:
    """Return a JSON-safe copy of value (cycles replaced by '[Circular]')."""
    return _sanitize(value, (), 0)


def serializeRecord(record: Mapping) -> bytes:
    """
    Serialize a record to its wire form.

    Args:
        record: Record mapping (time, level, name, message?, fields?, err?, host, pid)

    Returns:
        UTF-8 JSON bytes terminated by a single newline
    """
    try:
        return orjson.dumps(record, default=_default, option=_OPTIONS | orjson.OPT_APPEND_NEWLINE)
    except orjson.JSONEncodeError:
        return orjson.dumps(makeSafe(record), default=_default, option=_OPTIONS | orjson.OPT_APPEND_NEWLINE)


def _isCyclic(value: Any, ancestors: tuple = (), depth: int = 0) -> bool:
    if depth >= _MAX_DEPTH or not isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return False
    if id(value) in ancestors:
        return True
    ancestors = ancestors + (id(value),)
    children = value.values() if isinstance(value, Mapping) else value
    return any(_isCyclic(child, ancestors, depth + 1) for child in children)


def dumpsValue(value: Any) -> str:
    """
    JSON text for a single value (printf %j).

    Cyclic values render as '[Circular]'; other values orjson rejects
    (oversize integers, lone surrogates) are sanitized and encoded.
    """
    try:
        return orjson.dumps(value, default=_default, option=_OPTIONS).decode('utf-8')
    except orjson.JSONEncodeError:
        if _isCyclic(value):
            return CIRCULAR
        return orjson.dumps(makeSafe(value), default=_default, option=_OPTIONS).decode('utf-8')


def parseLine(line: bytes | str) -> Any:
    """Parse one serialized record line back into a mapping."""
    return orjson.loads(line)
