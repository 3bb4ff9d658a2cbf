"""
Loo Call Formatter

Turns the positional arguments of a log call into a (message, fields, err)
triple. Pure and deterministic: no registry access, no side effects.

Argument classification (decided once, on the first argument):
- STRUCTURED: a mapping. Its 'message' key becomes the message, every other
  key becomes a field.
- ERROR_LIKE: an exception (or any object with 'message' and 'stack').
  Message is "<code>: <message>", plus an err detail block.
- PRIMITIVE: everything else. Strings go through printf substitution,
  other values become the message verbatim.

Printf directives: %s %d %i %f %j %o %O %c %%. A directive without a
remaining argument stays in the output verbatim. Mapping arguments left over
after substitution are merged into fields; other leftovers are dropped.

Property of Uncompromising Sensors LLC.
"""

# Imports
import errno
import math
import re
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

# Local imports
from .serializer import dumpsValue


NAN = 'NaN'

_DIRECTIVE = re.compile(r'%([sdifjoOc%])')
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
_LEADING_FLOAT = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


class ArgKind(str, Enum):
    """Classification of the first log call argument"""
    PRIMITIVE = "primitive"
    STRUCTURED = "structured"
    ERROR_LIKE = "errorLike"


@dataclass
class Formatted:
    """Result of formatting one log call"""
    message: Any = None
    hasMessage: bool = False
    fields: Optional[Dict[str, Any]] = None
    err: Optional[Dict[str, Any]] = None


def classifyArg(value: Any) -> ArgKind:
    """Classify a log call argument as PRIMITIVE, STRUCTURED or ERROR_LIKE."""
    if isinstance(value, BaseException):
        return ArgKind.ERROR_LIKE
    if isinstance(value, Mapping):
        return ArgKind.STRUCTURED
    if hasattr(value, 'message') and hasattr(value, 'stack'):
        return ArgKind.ERROR_LIKE
    return ArgKind.PRIMITIVE


# ===== Number coercion =====

def _renderNumber(number: float) -> str:
    if math.isnan(number):
        return NAN
    if math.isinf(number):
        return 'Infinity' if number > 0 else '-Infinity'
    if number.is_integer():
        return str(int(number))
    return repr(number)


def toNumber(value: Any) -> str:
    """Numeric coercion used by %d. Anything without a numeric reading is NaN."""
    if value is None:
        return NAN
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _renderNumber(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return '0'
        try:
            return str(int(text, 0)) if text.lower().startswith(('0x', '0o', '0b')) else str(int(text))
        except ValueError:
            pass
        try:
            return _renderNumber(float(text))
        except ValueError:
            return NAN
    try:
        return _renderNumber(float(value))
    except (TypeError, ValueError):
        return NAN


def _toInteger(value: Any) -> str:
    """%i: integer parse (leading digits of strings, truncation of floats)."""
    if isinstance(value, bool) or value is None:
        return NAN
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return NAN
        return str(int(value))
    match = _LEADING_INT.match(str(value))
    return str(int(match.group(1))) if match else NAN


def _toFloat(value: Any) -> str:
    """%f: float parse (leading number of strings)."""
    if isinstance(value, bool) or value is None:
        return NAN
    if isinstance(value, (int, float)):
        return _renderNumber(float(value))
    match = _LEADING_FLOAT.match(str(value))
    return _renderNumber(float(match.group(1))) if match else NAN


def _toJson(value: Any) -> str:
    """%j: JSON text; None stands in for an absent value."""
    return 'undefined' if value is None else dumpsValue(value)


_CONVERTERS = {
    's': str,
    'd': toNumber,
    'i': _toInteger,
    'f': _toFloat,
    'j': _toJson,
    'o': repr,
    'O': repr,
    'c': lambda value: '',
}


def formatPrintf(template: str, args: Sequence[Any]) -> Tuple[str, Sequence[Any]]:
    """
    Substitute printf directives in template from args, left to right.

    Returns:
        (message, leftover arguments not consumed by a directive)
    """
    if not args:
        return template, ()

    index = 0

    def substitute(match):
        nonlocal index
        code = match.group(1)
        if code == '%':
            return '%'
        if index >= len(args):
            return match.group(0)
        value = args[index]
        index += 1
        return _CONVERTERS[code](value)

    message = _DIRECTIVE.sub(substitute, template)
    return message, args[index:]


# ===== Error normalization =====

def _errorCode(error: Any) -> Any:
    code = getattr(error, 'code', None)
    if code is None and isinstance(error, OSError) and error.errno:
        code = errno.errorcode.get(error.errno, error.errno)
    if code == '':
        return None
    return code


def errorDetail(error: Any, includeStack: bool = True) -> Dict[str, Any]:
    """
    Build the err block for an exception or error-like object.

    Returns:
        {message, name, code?, stack}
    """
    if isinstance(error, BaseException):
        message = str(error)
        name = type(error).__name__
        stack = ''.join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip('\n')
    else:
        message = getattr(error, 'message', None)
        name = getattr(error, 'name', None) or type(error).__name__
        stack = getattr(error, 'stack', None)

    detail: Dict[str, Any] = {'message': message, 'name': name}
    code = _errorCode(error)
    if code is not None:
        detail['code'] = code
    if includeStack:
        detail['stack'] = stack
    return detail


def errorMessage(detail: Mapping) -> Any:
    """Record message for an err block: '<code>: <message>' when a code is set."""
    code = detail.get('code')
    if code:
        return f"{code}: {detail['message']}"
    return detail['message']


# ===== Entry point =====

def _harvestFields(extras: Sequence[Any], fields: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    for extra in extras:
        if classifyArg(extra) is ArgKind.STRUCTURED:
            if fields is None:
                fields = {}
            fields.update(extra)
    return fields


def formatArgs(args: Sequence[Any], includeStack: bool = True) -> Formatted:
    """
    Format the positional arguments of one log call.

    Args:
        args: Positional arguments exactly as passed to the log call
        includeStack: Whether err blocks carry the traceback

    Returns:
        Formatted(message, hasMessage, fields, err); hasMessage is False only
        when there is no message-bearing argument at all
    """
    if not args:
        return Formatted()

    first, extras = args[0], args[1:]
    kind = classifyArg(first)

    if kind is ArgKind.ERROR_LIKE:
        detail = errorDetail(first, includeStack=includeStack)
        return Formatted(message=errorMessage(detail), hasMessage=True, err=detail)

    if kind is ArgKind.STRUCTURED:
        fields = {key: value for key, value in first.items() if key != 'message'}
        result = Formatted(fields=_harvestFields(extras, fields) or None)
        if 'message' in first:
            result.message = first['message']
            result.hasMessage = True
        return result

    if isinstance(first, str):
        message, extras = formatPrintf(first, extras)
        return Formatted(message=message, hasMessage=True, fields=_harvestFields(extras))

    return Formatted(message=first, hasMessage=True, fields=_harvestFields(extras))
