"""
Loo Logging Context

Context-scoped fields merged into every record emitted from the current
thread or asyncio task, with the lowest precedence of all field sources.

Usage:
    from loo.context import contextScope, setContext

    setContext(service='gem', nodeId='node1')

    with contextScope(requestId=rid):
        log.info('Handling request')   # fields include service, nodeId, requestId

Property of Uncompromising Sensors LLC.
"""

# Imports
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Mapping, Optional

_contextFields: ContextVar[Optional[Dict[str, Any]]] = ContextVar('loo_context_fields', default=None)


def setContext(mapping: Optional[Mapping] = None, /, **fields) -> None:
    """Add fields to the current context (existing keys are overwritten)."""
    current = dict(_contextFields.get() or {})
    if mapping:
        current.update(mapping)
    current.update(fields)
    _contextFields.set(current)


def getContext() -> Dict[str, Any]:
    """Current context fields (a copy)"""
    return dict(_contextFields.get() or {})


def clearContext() -> None:
    _contextFields.set(None)


@contextmanager
def contextScope(mapping: Optional[Mapping] = None, /, **fields) -> Iterator[Dict[str, Any]]:
    """Add fields for the duration of the with-block, then restore the previous context."""
    current = dict(_contextFields.get() or {})
    if mapping:
        current.update(mapping)
    current.update(fields)
    token = _contextFields.set(current)
    try:
        yield dict(current)
    finally:
        _contextFields.reset(token)
