"""
Loo Sinks

A sink is anything that accepts a write of serialized record bytes (one JSON
object per line, newline-terminated). Buffering, dropping or raising is the
sink's own business; the emitter isolates failures per sink.

Adapters:
- BufferSink: in-memory collector (tests, inspection)
- StreamSink: binary or text stream (files, sys.stderr, sockets' makefile())
- CallableSink: plain function, optionally receiving decoded records
- QueueSink: bounded queue for consumers on another thread (drops oldest)

asSink(target) picks the adapter for arbitrary objects.

Property of Uncompromising Sensors LLC.
"""

# Imports
import io
import queue
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

# Local imports
from .serializer import parseLine
from .severity import Severity

if TYPE_CHECKING:
    from .registry import ProcessRegistry


class Sink(ABC):
    """Abstract byte-stream consumer"""

    @abstractmethod
    def write(self, data: bytes) -> None:
        pass

    def close(self) -> None:
        pass


class BufferSink(Sink):
    """BufferSink() -> collects every write in memory"""

    def __init__(self):
        self._chunks: List[bytes] = []
        self._lock = threading.Lock()

    def write(self, data: bytes) -> None:
        with self._lock:
            self._chunks.append(bytes(data))

    def getvalue(self) -> bytes:
        with self._lock:
            return b''.join(self._chunks)

    def lines(self) -> List[bytes]:
        return self.getvalue().splitlines()

    def records(self) -> List[Dict[str, Any]]:
        """Decode every buffered line back into a record mapping"""
        return [parseLine(line) for line in self.lines()]

    def clear(self) -> None:
        with self._lock:
            self._chunks.clear()

    def __len__(self) -> int:
        return len(self.lines())


class StreamSink(Sink):
    """
    StreamSink(stream, flush=True) -> writes to a file-like object.

    Text streams (io.TextIOBase, e.g. sys.stdout) receive decoded str; set
    text explicitly for objects that are not io classes.
    """

    def __init__(self, stream: Any, flush: bool = True, text: Optional[bool] = None):
        if not hasattr(stream, 'write'):
            raise TypeError(f"{type(stream).__name__} has no write()")
        self.stream = stream
        self.flush = flush
        self.text = isinstance(stream, io.TextIOBase) if text is None else text

    def write(self, data: bytes) -> None:
        self.stream.write(data.decode('utf-8') if self.text else data)
        if self.flush and hasattr(self.stream, 'flush'):
            self.stream.flush()

    def close(self) -> None:
        if hasattr(self.stream, 'flush'):
            self.stream.flush()


class CallableSink(Sink):
    """CallableSink(fn, decode=False) -> fn(bytes), or fn(record) when decode is set"""

    def __init__(self, fn: Callable[[Any], Any], decode: bool = False):
        self.fn = fn
        self.decode = decode

    def write(self, data: bytes) -> None:
        self.fn(parseLine(data) if self.decode else data)


class QueueSink(Sink):
    """
    QueueSink(maxsize=1024) -> bounded queue of record lines.

    Never blocks the log call: on overflow the oldest line is dropped and
    counted in droppedCount.
    """

    def __init__(self, maxsize: int = 1024):
        self.queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._droppedCount = 0
        self._statsLock = threading.Lock()

    @property
    def droppedCount(self) -> int:
        with self._statsLock:
            return self._droppedCount

    def write(self, data: bytes) -> None:
        try:
            self.queue.put_nowait(data)
            return
        except queue.Full:
            pass
        try:
            self.queue.get_nowait()
        except queue.Empty:
            pass
        with self._statsLock:
            self._droppedCount += 1
        try:
            self.queue.put_nowait(data)
        except queue.Full:
            pass

    def get(self, timeout: Optional[float] = None) -> bytes:
        """Next line; raises queue.Empty after timeout"""
        return self.queue.get(timeout=timeout)

    def drain(self) -> List[bytes]:
        items = []
        while True:
            try:
                items.append(self.queue.get_nowait())
            except queue.Empty:
                return items


def asSink(target: Any) -> Sink:
    """
    Adapt target to a Sink.

    Raises:
        TypeError: target is neither a Sink, a writable stream nor a callable
    """
    if isinstance(target, Sink):
        return target
    if hasattr(target, 'write'):
        return StreamSink(target)
    if callable(target):
        return CallableSink(target)
    raise TypeError(f"Cannot use {type(target).__name__} as a sink: needs write() or to be callable")


class Subscription:
    """
    Handle for one sink attachment.

    Read-only fields:
        - name: Node name the sink is attached to
        - severity: Severity view, or None for severity-agnostic
        - exact: True when only records of exactly that severity qualify
        - active: Whether this subscription still receives records
        - recordsSeen: Records delivered through this subscription"""

    def __init__(self, registry: 'ProcessRegistry', name: str, sink: Sink,
                 severity: Optional[Severity] = None, exact: bool = False, original: Any = None):
        self._registry = registry
        self._name = name
        self._severity = severity
        self._exact = exact
        self._active = True
        self._recordsSeen = 0
        self.sink = sink
        self.original = sink if original is None else original

    @property
    def name(self) -> str:
        return self._name

    @property
    def severity(self) -> Optional[Severity]:
        return self._severity

    @property
    def exact(self) -> bool:
        return self._exact

    @property
    def active(self) -> bool:
        return self._active

    @property
    def recordsSeen(self) -> int:
        return self._recordsSeen

    def accepts(self, severity: Severity) -> bool:
        if self._severity is None:
            return True
        if self._exact:
            return severity == self._severity
        return severity >= self._severity

    def deliver(self, payload: bytes) -> None:
        self.sink.write(payload)
        self._recordsSeen += 1

    def _deactivate(self) -> None:
        self._active = False

    def detach(self) -> None:
        """Stop delivering records to this sink (idempotent)."""
        if self._active:
            self._registry.detach(self)

    def __repr__(self) -> str:
        scope = self._severity.label if self._severity is not None else 'any'
        return f"Subscription(name={self._name!r}, severity={scope}, active={self._active})"
