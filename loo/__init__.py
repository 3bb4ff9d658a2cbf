"""
Loo - hierarchical, namespace-scoped structured logging.

API:
    import loo
    from loo import log, BufferSink

    sink = BufferSink()
    log.attachSink(sink)                  # everything, from everywhere
    log.addFields(team='soloists')        # inherited by every record

    db = loo.logger('app:db')             # same node for every lookup of 'app:db'
    db.warn.attachSink(sys.stderr)        # warn and above from app:db and below
    db.info('Connected to %s in %dms', host, 12, {'pool': 4})
    db.error(exc)

    loo.reset()                           # bare root again (test isolation)

Records are one JSON object per line:
    {"time":..., "level":..., "name":..., "message"?:..., "fields"?:..., "err"?:..., "host":..., "pid":...}
"""

from .config import ConfigError, LooConfig, configure, configureFromFile, getConfig
from .context import clearContext, contextScope, getContext, setContext
from .formatter import formatArgs
from .handle import LoggerHandle, SeverityView, logger
from .registry import ProcessRegistry, getRegistry, inject, reset
from .severity import Severity, parseSeverity
from .sinks import BufferSink, CallableSink, QueueSink, Sink, StreamSink, Subscription, asSink

__version__ = '1.0.0'

# Root logger handle; addresses the root by path so it survives reset()
log = logger()

__all__ = [
    'log',
    'logger',
    'reset',
    'inject',
    'getRegistry',
    'configure',
    'configureFromFile',
    'getConfig',
    'setContext',
    'getContext',
    'clearContext',
    'contextScope',
    'formatArgs',
    'LoggerHandle',
    'SeverityView',
    'ProcessRegistry',
    'Severity',
    'parseSeverity',
    'LooConfig',
    'ConfigError',
    'Sink',
    'BufferSink',
    'StreamSink',
    'CallableSink',
    'QueueSink',
    'Subscription',
    'asSink',
]
