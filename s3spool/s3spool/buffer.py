"""
In-memory byte accumulator that sits in front of the spool file.
"""

from __future__ import annotations


class MemoryBuffer:
    """Growable byte buffer owned by a single event loop.

    Bytes come out of drain()/getvalue() in exactly the order they were
    appended. Nothing is ever dropped; the size trigger decides when the
    contents move to disk.
    """

    def __init__(self, initial: bytes = b""):
        self._data = bytearray(initial)

    def append(self, payload: bytes) -> None:
        self._data.extend(payload)

    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def getvalue(self) -> bytes:
        """Return a copy of the current contents without clearing them."""
        return bytes(self._data)

    def drain(self) -> bytes:
        """Remove and return all buffered bytes."""
        data = bytes(self._data)
        self._data.clear()
        return data

    def clear(self) -> None:
        self._data.clear()

    def __repr__(self) -> str:
        return f"MemoryBuffer(size={len(self._data)})"
