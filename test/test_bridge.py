"""
Loo stdlib Bridge Tests

stdlib logging records forwarded into the loo tree.

Property of Uncompromising Sensors LLC.
"""

import logging
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from loo import log
from loo.bridge import LooHandler, extraFields, installBridge, removeBridge
from loo.sinks import BufferSink


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def stdLogger():
    """Isolated stdlib logger with a LooHandler attached"""
    logger = logging.getLogger('bridgeTest.svc')
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = installBridge(logger)
    yield logger
    removeBridge(logger)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ============================================================================
# Tests
# ============================================================================

class TestBridge:

    def test_forwarded_record(self, stdLogger, bodies):
        sink = BufferSink()
        log.attachSink(sink)
        stdLogger.warning('slow %s', 'query', extra={'ms': 812})
        assert bodies(sink) == [
            {'level': 'warn', 'name': 'bridgeTest:svc', 'message': 'slow query', 'fields': {'ms': 812}},
        ]

    def test_level_mapping(self, stdLogger):
        sink = BufferSink()
        log.attachSink(sink)
        stdLogger.debug('d')
        stdLogger.info('i')
        stdLogger.warning('w')
        stdLogger.error('e')
        stdLogger.critical('c')
        assert [record['level'] for record in sink.records()] == ['debug', 'info', 'warn', 'error', 'fatal']

    def test_message_not_reformatted(self, stdLogger):
        sink = BufferSink()
        log.attachSink(sink)
        stdLogger.info('100%% sure about %s', '%d')
        assert sink.records()[0]['message'] == '100% sure about %d'

    def test_exception_becomes_err_block(self, stdLogger):
        sink = BufferSink()
        log.attachSink(sink)
        try:
            raise KeyError('missing')
        except KeyError:
            stdLogger.exception('lookup failed')
        record = sink.records()[0]
        assert record['level'] == 'error'
        assert record['message'] == 'lookup failed'
        assert record['err']['name'] == 'KeyError'
        assert 'Traceback' in record['err']['stack']

    def test_install_is_idempotent(self, stdLogger):
        assert installBridge(stdLogger) is installBridge(stdLogger)
        assert sum(isinstance(h, LooHandler) for h in stdLogger.handlers) == 1

    def test_prefix(self, bodies):
        sink = BufferSink()
        log.attachSink(sink)
        handler = LooHandler(prefix='py')
        handler.handle(logging.LogRecord('app.db', logging.INFO, __file__, 1, 'hello', None, None))
        assert bodies(sink) == [{'level': 'info', 'name': 'py:app:db', 'message': 'hello'}]

    def test_own_diagnostics_ignored(self):
        sink = BufferSink()
        log.attachSink(sink)
        handler = LooHandler()
        handler.handle(logging.LogRecord('loo.emitter', logging.WARNING, __file__, 1, 'Sink write failed', None, None))
        assert len(sink) == 0

    def test_extra_fields(self):
        record = logging.LogRecord('x', logging.INFO, __file__, 1, 'm', None, None)
        record.userId = 'u1'
        record._private = True
        assert extraFields(record) == {'userId': 'u1'}
