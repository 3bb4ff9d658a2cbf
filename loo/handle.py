"""
Loo Logger Handles

Public facade over the process registry. A LoggerHandle addresses its node
by path, never by object: two handles for the same path are interchangeable,
and a handle obtained before reset() keeps working afterwards (on a fresh
node).

Usage:
    import loo

    db = loo.logger('app:db')
    db.addFields(component='db')
    db.warn.attachSink(sys.stderr)            # warn and above from app:db and below
    db.info('Connected to %s', host, retries=2)

    pool = db.deriveChild('pool')             # 'app:db:pool', same as db('pool')
    pool.error(exc)                           # err block + 'CODE: message'

Property of Uncompromising Sensors LLC.
"""

# Imports
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# Local imports
from .context import getContext
from .fields import combineFields
from .formatter import formatArgs
from .registry import ProcessRegistry, getRegistry
from .severity import Severity, parseSeverity
from .sinks import Subscription
from .tree import ROOT_NAME, joinPath, splitPath


class SeverityView:
    """
    One severity facet of a logger.

    Calling the view logs at its severity. Sinks attached here receive records
    at this severity and above (exact=True: this severity only) from the node
    and all its descendants. Fields added here only reach records of exactly
    this severity.
    """

    def __init__(self, handle: 'LoggerHandle', severity: Severity):
        self._handle = handle
        self._severity = severity

    @property
    def severity(self) -> Severity:
        return self._severity

    @property
    def logger(self) -> 'LoggerHandle':
        return self._handle

    def __call__(self, *args, **fields) -> int:
        return self._handle.log(self._severity, *args, **fields)

    def attachSink(self, sink: Any, exact: bool = False) -> Subscription:
        return self._handle.registry.attach(self._handle.path, sink, severity=self._severity, exact=exact)

    def detachSink(self, target: Union[Subscription, Any]) -> int:
        return self._handle._detach(target, self._severity)

    def addFields(self, mapping: Optional[Mapping] = None, /, **fields) -> 'SeverityView':
        self._handle.registry.addFields(self._handle.path, combineFields(mapping, fields), severity=self._severity)
        return self

    @property
    def fields(self) -> Dict[str, Any]:
        return self._handle.registry.getFields(self._handle.path, severity=self._severity)

    def __repr__(self) -> str:
        return f"SeverityView({self._handle.name!r}, {self._severity.label})"


class LoggerHandle:
    """LoggerHandle(path) -> logger for one namespace ('' is the root)"""

    def __init__(self, path: Union[str, Tuple[str, ...], List[str], None] = None,
                 registry: Optional[ProcessRegistry] = None):
        self._path = splitPath(path)
        self._registry = registry
        self.debug = SeverityView(self, Severity.DEBUG)
        self.info = SeverityView(self, Severity.INFO)
        self.warn = SeverityView(self, Severity.WARN)
        self.error = SeverityView(self, Severity.ERROR)
        self.fatal = SeverityView(self, Severity.FATAL)
        # Make sure the node exists so it shows up in the tree right away
        self.registry.resolve(self._path)

    # ===== Identity =====
    @property
    def registry(self) -> ProcessRegistry:
        return self._registry if self._registry is not None else getRegistry()

    @property
    def path(self) -> Tuple[str, ...]:
        return self._path

    @property
    def name(self) -> str:
        return joinPath(self._path) if self._path else ROOT_NAME

    @property
    def node(self):
        """The underlying tree node (identical for every handle on this path)"""
        return self.registry.resolve(self._path)

    @property
    def parent(self) -> Optional['LoggerHandle']:
        if not self._path:
            return None
        return LoggerHandle(self._path[:-1], registry=self._registry)

    def children(self) -> List['LoggerHandle']:
        return [LoggerHandle(node.path, registry=self._registry) for node in self.registry.childrenOf(self._path)]

    def deriveChild(self, segment: str) -> 'LoggerHandle':
        """Handle for a sub-namespace; segment may itself contain separators"""
        return LoggerHandle(self._path + splitPath(segment), registry=self._registry)

    __call__ = deriveChild

    def severity(self, severity: Union[Severity, str, int]) -> SeverityView:
        return getattr(self, parseSeverity(severity).label)

    # ===== Logging =====
    def log(self, severity: Union[Severity, str, int], /, *args, **fields) -> int:
        """
        Log one record.

        Args:
            severity: Severity (or its label)
            *args: printf template and arguments, a mapping, an exception or a value
            **fields: Call-site fields, overriding every inherited field

        Returns:
            Number of sinks the record was delivered to
        """
        severity = parseSeverity(severity)
        registry = self.registry
        formatted = formatArgs(args, includeStack=registry.config.includeStack)

        callFields = formatted.fields
        if fields:
            callFields = dict(callFields or {})
            callFields.update(fields)

        return registry.emit(self._path, severity, message=formatted.message, hasMessage=formatted.hasMessage,
                             fields=callFields, err=formatted.err, baseFields=getContext())

    # ===== Severity-agnostic scope =====
    def attachSink(self, sink: Any) -> Subscription:
        """Receive every record from this node and its descendants."""
        return self.registry.attach(self._path, sink)

    def detachSink(self, target: Union[Subscription, Any]) -> int:
        return self._detach(target, None)

    def addFields(self, mapping: Optional[Mapping] = None, /, **fields) -> 'LoggerHandle':
        self.registry.addFields(self._path, combineFields(mapping, fields))
        return self

    @property
    def fields(self) -> Dict[str, Any]:
        return self.registry.getFields(self._path)

    def _detach(self, target: Union[Subscription, Any], severity: Optional[Severity]) -> int:
        if isinstance(target, Subscription):
            return 1 if self.registry.detach(target) else 0
        return self.registry.detachSink(self._path, target, severity=severity)

    # ===== Dunder =====
    def __eq__(self, other) -> bool:
        if not isinstance(other, LoggerHandle):
            return NotImplemented
        return self._path == other._path and self.registry is other.registry

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"LoggerHandle({self.name!r})"


def logger(path: Union[str, Tuple[str, ...], List[str], None] = '') -> LoggerHandle:
    """Resolve (creating if needed) the logger for a namespace path."""
    return LoggerHandle(path)
