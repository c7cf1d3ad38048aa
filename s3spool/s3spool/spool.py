"""
Spool file and disk writer.

One append-only file per (bucket, prefix) lives under the staging root:

    {buffer_path}/{bucket}{prefix with "/" replaced by "_"}

Its existence means "there is data not yet delivered to the remote
store". It is created lazily on the first spill and removed only after a
confirmed upload.
"""

from __future__ import annotations

import gzip
import logging
from pathlib import Path
from typing import Union

from s3spool.buffer import MemoryBuffer
from s3spool.errors import SpoolWriteError

logger = logging.getLogger(__name__)


def spool_file_name(bucket: str, prefix: str) -> str:
    """
    Derive the spool file name for a bucket/prefix pair.

    Examples:
        spool_file_name("logs", "app/web")  -> "logsapp_web"
        spool_file_name("logs", "/app/web") -> "logs_app_web"
    """
    return bucket + "_".join(prefix.split("/"))


class SpoolFile:
    """
    The single staging file of one output instance.

    All paths are resolved once at construction; nothing here depends on
    the process working directory.
    """

    def __init__(self, buffer_path: Union[str, Path], bucket: str, prefix: str = ""):
        self.directory = Path(buffer_path).expanduser().resolve()
        self.path = self.directory / spool_file_name(bucket, prefix)

    def exists(self) -> bool:
        return self.path.exists()

    def size(self) -> int:
        """Current size in bytes, 0 when the file does not exist."""
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0

    def spill(self, buffer: MemoryBuffer) -> int:
        """
        Append the buffer's contents to the spool file and clear the buffer.

        Creates the staging directory and the file on first use. On any
        failure the buffer is left untouched and SpoolWriteError is raised;
        a partially written append is truncated back to its starting
        length so a retry does not duplicate bytes.

        Returns:
            Number of bytes written
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SpoolWriteError(f"Cannot create staging directory {self.directory}: {e}", self.path) from e

        if not self.path.exists():
            logger.info(f"Creating spool file: {self.path}")
            try:
                self.path.touch()
            except OSError as e:
                raise SpoolWriteError(f"Cannot create spool file {self.path}: {e}", self.path) from e

        data = buffer.getvalue()
        if data:
            self._append(data)

        buffer.clear()
        logger.debug(f"Spilled {len(data)} bytes to {self.path}")
        return len(data)

    def _append(self, data: bytes) -> None:
        try:
            f = open(self.path, "ab")
        except OSError as e:
            raise SpoolWriteError(f"Cannot open spool file {self.path}: {e}", self.path) from e

        with f:
            start = f.tell()
            try:
                f.write(data)
                f.flush()
            except OSError as e:
                try:
                    f.truncate(start)
                except OSError as trunc_err:
                    logger.error(f"Could not roll back partial append to {self.path}: {trunc_err}")
                raise SpoolWriteError(f"Cannot append to spool file {self.path}: {e}", self.path) from e

    def read(self, compress: bool = False) -> bytes:
        """
        Read the entire spool file, gzip-compressing it in one shot if asked.

        Raises:
            SpoolWriteError: if the file cannot be read
        """
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise SpoolWriteError(f"Cannot read spool file {self.path}: {e}", self.path) from e

        if compress:
            logger.info("Reading and compressing spool file.")
            return gzip.compress(data)

        logger.info("Reading spool file.")
        return data

    def remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise SpoolWriteError(f"Cannot remove spool file {self.path}: {e}", self.path) from e

    def __repr__(self) -> str:
        return f"SpoolFile({str(self.path)!r})"
