"""
Loo Process Registry

Process-wide singleton owning the namespace tree, the live config and the
tree-wide lock. It is published under a well-known attribute of the builtins
module, so every copy of this package loaded in the process (including one
imported under a different module name) coordinates through the same tree
and the same subscribers.

Lifecycle:
- Created on first use (getRegistry)
- reset() returns it to a bare root: no fields, no subscribers

All tree mutations and every dispatch happen under one re-entrant lock; a
sink may log from inside its write() on the same thread.

Property of Uncompromising Sensors LLC.
"""

# Imports
import builtins
import logging
import threading
from collections.abc import Mapping
from typing import Any, Dict, Optional, Sequence

# Local imports
from . import emitter
from .config import LooConfig, buildConfig
from .environment import Environment
from .severity import Severity, parseSeverity
from .sinks import Subscription, asSink
from .tree import NamespaceTree, Node, ROOT_NAME, splitPath


GLOBAL_KEY = '__loo_registry__'

log = logging.getLogger(__name__)


class ProcessRegistry:
    """
    ProcessRegistry() -> shared tree + config + lock.

    Methods taking a path accept 'a:b', 'a.b' or a segment sequence.
    """

    def __init__(self, config: Optional[LooConfig] = None):
        self._lock = threading.RLock()
        self._tree = NamespaceTree()
        self._config = config or buildConfig()

    # ===== Config =====
    @property
    def config(self) -> LooConfig:
        return self._config

    @config.setter
    def config(self, value: LooConfig) -> None:
        with self._lock:
            self._config = value

    # ===== Tree =====
    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def getRoot(self) -> Node:
        with self._lock:
            return self._tree.root

    def resolve(self, path: str | Sequence[str] | None) -> Node:
        with self._lock:
            return self._tree.resolve(path)

    def parentOf(self, path: str | Sequence[str] | None) -> Optional[Node]:
        with self._lock:
            return self._tree.parent(self._tree.resolve(path))

    def childrenOf(self, path: str | Sequence[str] | None) -> list:
        with self._lock:
            return self._tree.children(self._tree.resolve(path))

    def nodeNames(self) -> list:
        with self._lock:
            return self._tree.names()

    def reset(self) -> None:
        """Clear every node, field and subscriber back to a bare root."""
        with self._lock:
            self._tree.reset()
        log.debug("Registry reset")

    # ===== Fields =====
    def addFields(self, path, fields: Mapping, severity: Optional[Severity] = None) -> None:
        with self._lock:
            node = self._tree.resolve(path)
            store = node.fields if severity is None else node.views[severity].fields
            store.add(fields)

    def getFields(self, path, severity: Optional[Severity] = None) -> Dict[str, Any]:
        with self._lock:
            node = self._tree.resolve(path)
            store = node.fields if severity is None else node.views[severity].fields
            return store.snapshot()

    # ===== Subscriptions =====
    def attach(self, path, sink: Any, severity: Optional[Severity] = None, exact: bool = False) -> Subscription:
        """Attach sink to a node (severity None) or to one of its severity views."""
        adapted = asSink(sink)
        with self._lock:
            node = self._tree.resolve(path)
            subscription = Subscription(self, node.name, adapted, severity=severity, exact=exact, original=sink)
            if severity is None:
                node.subscriptions.append(subscription)
            else:
                node.views[severity].subscriptions.append(subscription)
            return subscription

    def detach(self, subscription: Subscription) -> bool:
        """Remove a subscription; False when it was already gone"""
        with self._lock:
            subscription._deactivate()
            node = self._tree.get(subscription.name)
            if node is None:
                return False
            scope = node.subscriptions if subscription.severity is None else node.views[subscription.severity].subscriptions
            if subscription in scope:
                scope.remove(subscription)
                return True
            return False

    def detachSink(self, path, sink: Any, severity: Optional[Severity] = None) -> int:
        """Detach every subscription of sink (the object passed to attach) in one scope"""
        with self._lock:
            node = self._tree.resolve(path)
            scope = node.subscriptions if severity is None else node.views[severity].subscriptions
            matches = [s for s in scope if s.original is sink or s.sink is sink]
            for subscription in matches:
                self.detach(subscription)
            return len(matches)

    # ===== Emit =====
    def emit(self, path, severity: Severity, message: Any = None, hasMessage: bool = False,
             fields: Optional[Mapping] = None, err: Optional[Mapping] = None,
             baseFields: Optional[Mapping] = None) -> int:
        """Route one formatted record; returns the number of sinks reached."""
        with self._lock:
            node = self._tree.resolve(path)
            environment = Environment(self._config)
            return emitter.emit(self._tree, environment, node, severity, message=message,
                                hasMessage=hasMessage, fields=fields, err=err, baseFields=baseFields)

    def inject(self, record: Mapping) -> int:
        """
        Route a raw record mapping as if it were logged at its node.

        The record needs 'level' and 'name'; a leading 'root' segment in the
        name is ignored ('root:a' is node 'a'). 'message', 'fields' and
        'err' are optional.
        """
        if not isinstance(record, Mapping):
            raise TypeError(f"Record must be a mapping, got {type(record).__name__}")
        if 'level' not in record:
            raise ValueError("Record has no 'level'")
        severity = parseSeverity(record['level'])
        segments = splitPath(record.get('name') or '')
        if segments and segments[0] == ROOT_NAME:
            segments = segments[1:]
        return self.emit(segments, severity, message=record.get('message'),
                         hasMessage='message' in record, fields=record.get('fields'),
                         err=record.get('err'))

    def __repr__(self) -> str:
        return f"ProcessRegistry(nodes={len(self._tree)})"


def getRegistry() -> ProcessRegistry:
    """Return the process-wide registry, creating and publishing it on first use."""
    registry = getattr(builtins, GLOBAL_KEY, None)
    if registry is None:
        # setdefault is atomic: concurrent first calls agree on one instance
        registry = vars(builtins).setdefault(GLOBAL_KEY, ProcessRegistry())
    return registry


def reset() -> None:
    getRegistry().reset()


def inject(record: Mapping) -> int:
    return getRegistry().inject(record)
