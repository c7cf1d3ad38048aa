"""
Inbound record source.

QueueSource is a bounded queue between producers and the event loop.
When the loop is busy (for example blocked in an upload) the queue fills
and put() blocks, pushing backpressure upstream.
"""

import logging
import queue
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass
class InboundRecord:
    """A record plus the callback that acknowledges it."""
    payload: Any
    on_recycle: Optional[Callable[[], None]] = None

    def recycle(self) -> None:
        """Acknowledge the record. Called once it sits in the buffer or spool."""
        if self.on_recycle is not None:
            self.on_recycle()


class QueueSource:
    """
    Ordered, closable record source.

    get() returns the next record, None once the source is closed and
    drained, and raises queue.Empty when the timeout expires first.
    """

    def __init__(self, maxsize: int = 1000):
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)
        self._closed = False

    def put(self, payload: Any, on_recycle: Optional[Callable[[], None]] = None,
            timeout: Optional[float] = None) -> None:
        if self._closed:
            raise ValueError("QueueSource is closed")
        self._queue.put(InboundRecord(payload, on_recycle), timeout=timeout)

    def close(self) -> None:
        """Signal end-of-stream. Records already queued are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: Optional[float] = None) -> Optional[InboundRecord]:
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker for any later reader
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def qsize(self) -> int:
        return self._queue.qsize()
