"""
Loo Namespace Tree

Arena-style storage of logger nodes: one flat table from joined name to
Node. Nodes refer to their parent and children by name, never by object, so
the tree has no reference cycles and reset is a plain table rebuild.

Architecture Invariants:
- Exactly one Node per distinct name until reset
- resolve(path) with the same path always returns the same Node
- Every missing node between the nearest existing ancestor and the target
  is created and linked in one resolve

Not thread-safe on its own; the process registry serializes access.

Property of Uncompromising Sensors LLC.
"""

# Imports
import re
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

# Local imports
from .fields import FieldStore
from .severity import SEVERITIES, Severity
from .sinks import Subscription


SEPARATOR = ':'
ROOT_NAME = 'root'

_SPLIT = re.compile(r'[:.]')


def splitPath(path: str | Sequence[str] | None) -> Tuple[str, ...]:
    """
    Normalize a namespace path to its segments.

    'lb:lc', 'lb.lc' and ['lb', 'lc'] all give ('lb', 'lc'); empty segments
    are dropped; '' and None give the root path ().
    """
    if path is None:
        return ()
    if isinstance(path, str):
        parts = _SPLIT.split(path)
    else:
        parts = []
        for segment in path:
            if not isinstance(segment, str):
                raise TypeError(f"Path segments must be str, got {type(segment).__name__}")
            parts.extend(_SPLIT.split(segment))
    return tuple(part for part in (p.strip() for p in parts) if part)


def joinPath(path: Sequence[str]) -> str:
    return SEPARATOR.join(path)


class SeverityScope:
    """Fields and subscriptions of one severity view of a node"""

    def __init__(self):
        self.fields = FieldStore()
        self.subscriptions: List[Subscription] = []


class Node:
    """
    One namespace.

    Attributes:
        path: Segments from the root (root: ())
        name: Joined path, the registry key ('' for the root)
        parentName: Key of the parent node (None for the root)
        children: Last segment -> child key
        fields: Severity-agnostic field store
        subscriptions: Severity-agnostic subscriptions
        views: Severity -> SeverityScope
    """

    def __init__(self, path: Tuple[str, ...], parentName: Optional[str]):
        self.path = path
        self.name = joinPath(path)
        self.parentName = parentName
        self.children: Dict[str, str] = {}
        self.fields = FieldStore()
        self.subscriptions: List[Subscription] = []
        self.views: Dict[Severity, SeverityScope] = {severity: SeverityScope() for severity in SEVERITIES}

    @property
    def isRoot(self) -> bool:
        return not self.path

    @property
    def recordName(self) -> str:
        """Value of the 'name' key in records emitted here"""
        return self.name if self.path else ROOT_NAME

    def __repr__(self) -> str:
        return f"Node({self.recordName!r})"


class NamespaceTree:
    """NamespaceTree() -> flat name -> Node table rooted at ''"""

    def __init__(self):
        self._nodes: Dict[str, Node] = {}
        self.reset()

    @property
    def root(self) -> Node:
        return self._nodes['']

    def reset(self) -> None:
        """Back to a single root with no fields and no subscribers."""
        for node in self._nodes.values():
            for subscription in self._allSubscriptions(node):
                subscription._deactivate()
        self._nodes = {'': Node((), None)}

    def get(self, name: str) -> Optional[Node]:
        return self._nodes.get(name)

    def resolve(self, path: str | Sequence[str] | None) -> Node:
        """Return the node for path, creating any missing nodes along it."""
        segments = splitPath(path)
        existing = self._nodes.get(joinPath(segments))
        if existing is not None:
            return existing

        parent = self.root
        for depth in range(1, len(segments) + 1):
            name = joinPath(segments[:depth])
            node = self._nodes.get(name)
            if node is None:
                node = Node(segments[:depth], parent.name)
                self._nodes[name] = node
                parent.children[segments[depth - 1]] = name
            parent = node
        return parent

    def parent(self, node: Node) -> Optional[Node]:
        if node.parentName is None:
            return None
        return self._nodes[node.parentName]

    def children(self, node: Node) -> List[Node]:
        return [self._nodes[name] for name in node.children.values()]

    def lineage(self, node: Node) -> List[Node]:
        """Nodes from the root down to node (inclusive)"""
        chain = []
        current: Optional[Node] = node
        while current is not None:
            chain.append(current)
            current = self.parent(current)
        chain.reverse()
        return chain

    def names(self) -> List[str]:
        return list(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    @staticmethod
    def _allSubscriptions(node: Node) -> Iterator[Subscription]:
        yield from node.subscriptions
        for scope in node.views.values():
            yield from scope.subscriptions
