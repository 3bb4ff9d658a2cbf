"""
Loo Record Emitter

Builds the final record for one log call, serializes it once, and hands the
bytes to every qualifying subscription.

Record key order: time, level, name, message?, fields?, err?, host, pid.
- 'message' is omitted when the call had no message-bearing argument
- 'fields' is omitted when the merged fields are empty
- 'err' is present only for error-like log calls

Routing for a record of severity S emitted at node N, for N and then every
ancestor up to the root:
  1. severity-agnostic subscriptions
  2. view subscriptions whose severity accepts S (threshold, or exact)
Attachment order is kept inside each scope.

Property of Uncompromising Sensors LLC.
"""

# Imports
import logging
from typing import Any, Dict, List, Mapping, Optional

# Local imports
from .environment import Environment
from .fields import mergeFields
from .serializer import serializeRecord
from .severity import SEVERITIES, Severity
from .sinks import Subscription
from .tree import NamespaceTree, Node


log = logging.getLogger(__name__)


def inheritedFieldSources(tree: NamespaceTree, node: Node, severity: Severity) -> List[Dict[str, Any]]:
    """Field stores in overlay order: for each node root -> N, node fields then S-view fields"""
    sources = []
    for ancestor in tree.lineage(node):
        sources.append(ancestor.fields.snapshot())
        sources.append(ancestor.views[severity].fields.snapshot())
    return sources


def buildRecord(environment: Environment, node: Node, severity: Severity, message: Any = None,
                hasMessage: bool = False, fields: Optional[Mapping] = None,
                err: Optional[Mapping] = None) -> Dict[str, Any]:
    """Assemble the record mapping in wire key order"""
    record: Dict[str, Any] = {
        'time': environment.timestamp(),
        'level': severity.label,
        'name': node.recordName,
    }
    if hasMessage:
        record['message'] = message
    if fields:
        record['fields'] = dict(fields)
    if err:
        record['err'] = dict(err)
    record['host'] = environment.hostname
    record['pid'] = environment.pid
    return record


def collectSubscriptions(tree: NamespaceTree, node: Node, severity: Severity) -> List[Subscription]:
    """Qualifying subscriptions for a record, emitting node first, root last"""
    selected: List[Subscription] = []
    current: Optional[Node] = node
    while current is not None:
        selected.extend(current.subscriptions)
        for viewSeverity in SEVERITIES:
            if viewSeverity > severity:
                break
            for subscription in current.views[viewSeverity].subscriptions:
                if subscription.accepts(severity):
                    selected.append(subscription)
        current = tree.parent(current)
    return selected


def dispatch(payload: bytes, subscriptions: List[Subscription]) -> int:
    """
    Write payload to each subscription; one failing sink never stops the others.

    Returns:
        Number of successful deliveries
    """
    delivered = 0
    for subscription in subscriptions:
        if not subscription.active:
            continue
        try:
            subscription.deliver(payload)
            delivered += 1
        except Exception:
            log.warning("Sink write failed", exc_info=True,
                        extra={'sinkType': type(subscription.sink).__name__, 'node': subscription.name})
    return delivered


def emit(tree: NamespaceTree, environment: Environment, node: Node, severity: Severity,
         message: Any = None, hasMessage: bool = False, fields: Optional[Mapping] = None,
         err: Optional[Mapping] = None, baseFields: Optional[Mapping] = None) -> int:
    """
    Emit one record at node.

    Args:
        fields: Call-site fields (highest precedence)
        baseFields: Context fields (lowest precedence)

    Returns:
        Number of sinks the record was delivered to
    """
    subscriptions = collectSubscriptions(tree, node, severity)
    if not subscriptions:
        return 0

    sources = [baseFields]
    sources.extend(inheritedFieldSources(tree, node, severity))
    sources.append(fields)
    merged = mergeFields(sources)

    record = buildRecord(environment, node, severity, message, hasMessage, merged, err)
    payload = serializeRecord(record)
    return dispatch(payload, subscriptions)
