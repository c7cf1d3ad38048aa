"""Tests for s3spool.buffer module."""

from s3spool.buffer import MemoryBuffer


class TestMemoryBuffer:
    """Tests for MemoryBuffer class."""

    def test_starts_empty(self):
        buf = MemoryBuffer()
        assert buf.size() == 0
        assert len(buf) == 0
        assert not buf

    def test_append_preserves_order(self):
        buf = MemoryBuffer()
        buf.append(b"one ")
        buf.append(b"two ")
        buf.append(b"three")

        assert buf.getvalue() == b"one two three"
        assert buf.size() == 13

    def test_getvalue_does_not_clear(self):
        buf = MemoryBuffer(b"abc")
        assert buf.getvalue() == b"abc"
        assert buf.size() == 3

    def test_drain_returns_and_clears(self):
        buf = MemoryBuffer()
        buf.append(b"payload")

        assert buf.drain() == b"payload"
        assert buf.size() == 0
        assert buf.drain() == b""

    def test_clear(self):
        buf = MemoryBuffer(b"xyz")
        buf.clear()
        assert not buf
