"""
Loo stdlib Bridge

logging.Handler that forwards standard library log records into the loo
tree, so third-party libraries using `logging` land in the same sinks.

- Node: record.name with dots as separators (optional prefix path)
- Severity: < INFO debug, < WARNING info, < ERROR warn, < CRITICAL error, else fatal
- Message: record.getMessage() as-is (no second printf pass)
- Fields: attributes passed through `extra=`
- err: built from exc_info

Records from the library's own 'loo' diagnostics logger are ignored.

Usage:
    from loo.bridge import installBridge
    installBridge()                          # root stdlib logger -> loo
    logging.getLogger('app.db').warning('slow query', extra={'ms': 812})

Property of Uncompromising Sensors LLC.
"""

# Imports
import logging
from typing import Any, Dict, Optional, Sequence

# Local imports
from .context import getContext
from .formatter import errorDetail, errorMessage
from .registry import ProcessRegistry, getRegistry
from .severity import fromStdlibLevel
from .tree import splitPath


DIAGNOSTICS_LOGGER = 'loo'

# Attributes every LogRecord carries; anything else came from extra=
_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'asctime', 'taskName'
}


def extraFields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields passed to the stdlib call through extra="""
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith('_')
    }


class LooHandler(logging.Handler):
    """LooHandler(prefix=None, level=NOTSET) -> stdlib records into the loo tree"""

    def __init__(self, prefix: Optional[str | Sequence[str]] = None, level: int = logging.NOTSET,
                 registry: Optional[ProcessRegistry] = None):
        super().__init__(level)
        self.prefix = splitPath(prefix)
        self._registry = registry

    @property
    def registry(self) -> ProcessRegistry:
        return self._registry if self._registry is not None else getRegistry()

    def nodePath(self, record: logging.LogRecord):
        if record.name == 'root':
            return self.prefix
        return self.prefix + splitPath(record.name)

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == DIAGNOSTICS_LOGGER or record.name.startswith(DIAGNOSTICS_LOGGER + '.'):
            return
        try:
            registry = self.registry
            message = record.getMessage()
            err = None
            if record.exc_info and record.exc_info[1] is not None:
                err = errorDetail(record.exc_info[1], includeStack=registry.config.includeStack)
                if not message:
                    message = errorMessage(err)
            registry.emit(self.nodePath(record), fromStdlibLevel(record.levelno), message=message,
                          hasMessage=True, fields=extraFields(record) or None, err=err,
                          baseFields=getContext())
        except Exception:
            self.handleError(record)


def installBridge(logger: Optional[logging.Logger] = None, level: int = logging.NOTSET,
                  prefix: Optional[str] = None) -> LooHandler:
    """Attach a LooHandler to logger (default: the root logger) once; returns the handler."""
    target = logger if logger is not None else logging.getLogger()
    for handler in target.handlers:
        if isinstance(handler, LooHandler):
            return handler
    handler = LooHandler(prefix=prefix, level=level)
    target.addHandler(handler)
    return handler


def removeBridge(logger: Optional[logging.Logger] = None) -> int:
    """Detach every LooHandler from logger; returns how many were removed"""
    target = logger if logger is not None else logging.getLogger()
    handlers = [h for h in target.handlers if isinstance(h, LooHandler)]
    for handler in handlers:
        target.removeHandler(handler)
    return len(handlers)
