"""Tests for s3spool.spool module."""

import gzip

import pytest

from s3spool.buffer import MemoryBuffer
from s3spool.errors import SpoolWriteError
from s3spool.spool import SpoolFile, spool_file_name


class TestSpoolFileName:
    """Spool file names are derived from bucket and prefix."""

    def test_prefix_separators_collapse(self):
        assert spool_file_name("logs", "app/web") == "logsapp_web"

    def test_leading_slash(self):
        assert spool_file_name("logs", "/app/web") == "logs_app_web"

    def test_empty_prefix(self):
        assert spool_file_name("logs", "") == "logs"

    def test_distinct_prefixes_get_distinct_files(self):
        assert spool_file_name("b", "x/y") != spool_file_name("b", "x/z")


class TestSpoolFile:
    """Tests for SpoolFile class."""

    def test_path_is_absolute(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        spool = SpoolFile("relative/buffer", "bucket", "a/b")

        assert spool.path.is_absolute()
        assert spool.path == (temp_dir / "relative" / "buffer" / "bucketa_b").resolve()

    def test_missing_file(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        assert not spool.exists()
        assert spool.size() == 0

    def test_spill_creates_directory_and_file(self, temp_dir):
        spool = SpoolFile(temp_dir / "nested" / "buffer", "bucket", "prefix")
        buf = MemoryBuffer(b"hello")

        written = spool.spill(buf)

        assert written == 5
        assert spool.exists()
        assert spool.path.read_bytes() == b"hello"
        assert buf.size() == 0

    def test_spill_appends_in_order(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        for chunk in (b"first,", b"second,", b"third"):
            spool.spill(MemoryBuffer(chunk))

        assert spool.path.read_bytes() == b"first,second,third"

    def test_spill_empty_buffer_creates_empty_file(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        assert spool.spill(MemoryBuffer()) == 0
        assert spool.exists()
        assert spool.size() == 0

    def test_spill_failure_leaves_buffer_untouched(self, temp_dir):
        blocker = temp_dir / "not-a-dir"
        blocker.write_text("occupied")
        spool = SpoolFile(blocker, "bucket", "prefix")
        buf = MemoryBuffer(b"keep me")

        with pytest.raises(SpoolWriteError):
            spool.spill(buf)

        assert buf.getvalue() == b"keep me"
        assert not spool.exists()

    def test_partial_append_is_rolled_back(self, temp_dir, monkeypatch):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        spool.spill(MemoryBuffer(b"existing|"))

        real_open = open

        class HalfWriter:
            def __init__(self, f):
                self._f = f

            def __enter__(self):
                return self

            def __exit__(self, *args):
                self._f.close()

            def tell(self):
                return self._f.tell()

            def truncate(self, size):
                return self._f.truncate(size)

            def flush(self):
                self._f.flush()

            def write(self, data):
                self._f.write(data[: len(data) // 2])
                self._f.flush()
                raise OSError("No space left on device")

        monkeypatch.setattr(
            "s3spool.spool.open",
            lambda path, mode: HalfWriter(real_open(path, mode)),
            raising=False,
        )

        buf = MemoryBuffer(b"new-data")
        with pytest.raises(SpoolWriteError, match="No space left"):
            spool.spill(buf)

        assert spool.path.read_bytes() == b"existing|"
        assert buf.getvalue() == b"new-data"

    def test_read_plain(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        spool.spill(MemoryBuffer(b"line1\nline2\n"))

        assert spool.read(compress=False) == b"line1\nline2\n"
        assert spool.exists()

    def test_read_compressed(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        spool.spill(MemoryBuffer(b"x" * 1000))

        body = spool.read(compress=True)

        assert len(body) < 1000
        assert gzip.decompress(body) == b"x" * 1000

    def test_read_missing_file_raises(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        with pytest.raises(SpoolWriteError):
            spool.read()

    def test_remove(self, temp_dir):
        spool = SpoolFile(temp_dir, "bucket", "prefix")
        spool.spill(MemoryBuffer(b"data"))

        spool.remove()
        assert not spool.exists()

        # Removing twice is fine
        spool.remove()
