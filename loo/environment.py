"""
Loo Environment Decoration

Supplies the environmental keys of a record: 'time' (ISO-8601 UTC with
milliseconds), 'host' and 'pid'. The core never computes these itself.

Property of Uncompromising Sensors LLC.
"""

# Imports
import os
import socket
from datetime import datetime, timezone

# Local imports
from .config import LooConfig


_hostname = socket.gethostname()


def isoTimestamp(moment: datetime) -> str:
    """Render a datetime as 2024-01-02T03:04:05.678Z (naive values are taken as UTC)"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.strftime('%Y-%m-%dT%H:%M:%S.') + f"{utc.microsecond // 1000:03d}Z"


class Environment:
    """Environment(config) -> time/host/pid source for one emit"""

    def __init__(self, config: LooConfig):
        self.config = config

    def timestamp(self) -> str:
        return isoTimestamp(self.config.clock())

    @property
    def hostname(self) -> str:
        return self.config.hostname if self.config.hostname is not None else _hostname

    @property
    def pid(self) -> int:
        return self.config.pid if self.config.pid is not None else os.getpid()
