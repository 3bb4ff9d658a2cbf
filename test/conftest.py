"""
Shared fixtures for the loo test-suite.

Every test starts and ends with a bare registry, an empty logging context
and a fixed environment (host, pid, clock) so records are deterministic.

Property of Uncompromising Sensors LLC.
"""

import os
import sys
import pytest
from datetime import datetime, timezone

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import loo


FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
TEST_HOST = 'testhost'
TEST_PID = 4242

ENV_KEYS = ('time', 'host', 'pid')


@pytest.fixture(autouse=True)
def cleanRegistry():
    """Bare root, no context, deterministic environment"""
    loo.reset()
    loo.clearContext()
    loo.configure(hostname=TEST_HOST, pid=TEST_PID, clock=lambda: FIXED_TIME, includeStack=True)
    yield
    loo.reset()
    loo.clearContext()
    loo.configure()


@pytest.fixture
def bodies():
    """bodies(sink) -> records without the environmental keys"""
    def strip(sink):
        return [{k: v for k, v in record.items() if k not in ENV_KEYS} for record in sink.records()]
    return strip
