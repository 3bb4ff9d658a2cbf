"""
Loo Severity Levels

Fixed ordered set of severities: debug < info < warn < error < fatal.
The lowercase label is what appears in the "level" key of every record.

Property of Uncompromising Sensors LLC.
"""

# Imports
import logging
from enum import IntEnum
from typing import Union


class Severity(IntEnum):
    """Ordered severity enumeration"""
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    def __str__(self) -> str:
        return self.label


SEVERITIES = tuple(Severity)

_ALIASES = {
    'warning': Severity.WARN,
    'critical': Severity.FATAL,
}


def parseSeverity(value: Union[Severity, str, int]) -> Severity:
    """
    Parse a severity from a Severity, a label ('warn', 'WARNING') or a rank.

    Raises:
        ValueError: If the value does not name a known severity
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Unknown severity: {value!r}")
    if isinstance(value, int):
        try:
            return Severity(value)
        except ValueError:
            raise ValueError(f"Unknown severity rank: {value}") from None
    if isinstance(value, str):
        label = value.strip().lower()
        if label in _ALIASES:
            return _ALIASES[label]
        for severity in SEVERITIES:
            if severity.label == label:
                return severity
    raise ValueError(f"Unknown severity: {value!r}")


def fromStdlibLevel(levelno: int) -> Severity:
    """Map a stdlib logging level number onto the nearest severity at or below it."""
    if levelno < logging.INFO:
        return Severity.DEBUG
    if levelno < logging.WARNING:
        return Severity.INFO
    if levelno < logging.ERROR:
        return Severity.WARN
    if levelno < logging.CRITICAL:
        return Severity.ERROR
    return Severity.FATAL
