"""
Loo Configuration

Process-wide settings for the environmental decoration of records. The live
config is held by the process registry so every copy of the package loaded
in the process sees the same values.

Usage:
    import loo
    loo.configure(hostname='node1', includeStack=False)
    loo.configureFromFile('loo.json')

Environment overrides (applied when a key is not passed explicitly):
    LOO_HOSTNAME        hostname reported in records
    LOO_INCLUDE_STACK   '0'/'false' drops tracebacks from err blocks

Property of Uncompromising Sensors LLC.
"""

# Imports
import os
import orjson
from dataclasses import dataclass, fields as dataclassFields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional


class ConfigError(ValueError):
    """Invalid configuration"""
    pass


def _utcNow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LooConfig:
    """
    Settings used when decorating records.

    hostname: reported 'host' (None: socket.gethostname())
    pid: reported 'pid' (None: os.getpid() at emit time)
    clock: callable returning the record time (aware datetime)
    includeStack: whether err blocks carry the traceback
    """
    hostname: Optional[str] = None
    pid: Optional[int] = None
    clock: Callable[[], datetime] = _utcNow
    includeStack: bool = True


_TYPES = {
    'hostname': (str, type(None)),
    'pid': (int, type(None)),
    'includeStack': (bool,),
}

_FALSE_VALUES = {'0', 'false', 'no', 'off'}


def _fromEnv() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    hostname = os.environ.get('LOO_HOSTNAME')
    if hostname:
        values['hostname'] = hostname
    includeStack = os.environ.get('LOO_INCLUDE_STACK')
    if includeStack is not None:
        values['includeStack'] = includeStack.strip().lower() not in _FALSE_VALUES
    return values


def buildConfig(**overrides) -> LooConfig:
    """
    Build a LooConfig from defaults, environment, then explicit overrides.

    Raises:
        ConfigError: Unknown key or wrong value type
    """
    known = {f.name for f in dataclassFields(LooConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    for key, value in overrides.items():
        if key == 'clock':
            if not callable(value):
                raise ConfigError("clock must be callable")
            continue
        expected = _TYPES[key]
        if isinstance(value, bool) and bool not in expected:
            raise ConfigError(f"{key} must not be a bool")
        if not isinstance(value, expected):
            raise ConfigError(f"{key} has wrong type {type(value).__name__}")

    values = _fromEnv()
    values.update(overrides)
    return LooConfig(**values)


def loadConfig(path: str | Path) -> Dict[str, Any]:
    """Load a JSON config object from file"""
    with open(path, 'rb') as f:
        data = orjson.loads(f.read())
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} is not a JSON object")
    return data


def configure(**overrides) -> LooConfig:
    """
    Install a fresh config on the process registry.

    Keys not given fall back to environment overrides, then defaults, so
    configure() with no arguments restores the default behavior.
    """
    from .registry import getRegistry

    config = buildConfig(**overrides)
    getRegistry().config = config
    return config


def configureFromFile(path: str | Path) -> LooConfig:
    """configure() from a JSON file (clock cannot be set from a file)"""
    data = loadConfig(path)
    if 'clock' in data:
        raise ConfigError("clock cannot be set from a config file")
    return configure(**data)


def getConfig() -> LooConfig:
    from .registry import getRegistry

    return getRegistry().config
