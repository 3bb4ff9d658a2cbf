"""
Loo Logging Context Tests

Context fields reach every record, lowest precedence, scoped by contextvars.

Property of Uncompromising Sensors LLC.
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import loo
from loo import log
from loo.context import clearContext, contextScope, getContext, setContext
from loo.sinks import BufferSink


class TestContextFields:

    def test_context_fields_in_records(self):
        sink = BufferSink()
        log.attachSink(sink)
        setContext(service='gem', nodeId='node1')
        loo.logger('a').info('x')
        assert sink.records()[0]['fields'] == {'service': 'gem', 'nodeId': 'node1'}

    def test_context_has_lowest_precedence(self):
        sink = BufferSink()
        log.attachSink(sink)
        setContext(k='context', only='context')
        log.addFields(k='root')
        log.info('x')
        assert sink.records()[0]['fields'] == {'k': 'root', 'only': 'context'}

    def test_scope_restores_previous_context(self):
        setContext(service='gem')
        with contextScope(requestId=42) as current:
            assert current == {'service': 'gem', 'requestId': 42}
            assert getContext() == {'service': 'gem', 'requestId': 42}
        assert getContext() == {'service': 'gem'}
        clearContext()
        assert getContext() == {}

    def test_keyword_named_mapping_is_a_field(self):
        setContext(mapping='ctx')
        with contextScope({'a': 1}, mapping='scoped') as current:
            assert current == {'mapping': 'scoped', 'a': 1}
        assert getContext() == {'mapping': 'ctx'}

    def test_tasks_have_separate_context(self):
        sink = BufferSink()
        log.attachSink(sink)

        async def handle(requestId):
            with contextScope(requestId=requestId):
                await asyncio.sleep(0)
                log.info('handled')

        async def main():
            await asyncio.gather(handle(1), handle(2))

        asyncio.run(main())
        assert sorted(record['fields']['requestId'] for record in sink.records()) == [1, 2]
