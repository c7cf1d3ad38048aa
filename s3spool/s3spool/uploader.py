"""
Upload coordinator.

On every interval or daily trigger:

    1. bail out with NothingToUploadError if buffer and spool are empty
    2. spill whatever is still buffered to the spool file
    3. read (and optionally gzip) the whole spool file
    4. derive the key {prefix}/{YYYY-MM-DD}/{YYYY-MM-DD_HHMMSS}[.gz]
    5. put the payload to the remote store
    6. delete the spool file, only if the put succeeded

A failed put leaves the spool file untouched, so the next trigger
re-sends the same bytes plus anything spilled since (at-least-once).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from s3spool.buffer import MemoryBuffer
from s3spool.clock import SpoolClock, default_clock
from s3spool.errors import NothingToUploadError, SpoolCleanupError, SpoolWriteError
from s3spool.remote import BlobStore
from s3spool.spool import SpoolFile

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%Y-%m-%d_%H%M%S"

GZIP_EXTENSION = ".gz"
GZIP_CONTENT_TYPE = "multipart/x-gzip"
PLAIN_CONTENT_TYPE = "text/plain"


def build_key(
    prefix: str,
    now: datetime,
    day_boundary: bool = False,
    compression: bool = True,
) -> Tuple[str, str]:
    """
    Build the remote key and content type for an upload at `now`.

    The date partition is the UTC date, or the previous UTC date for a
    day-boundary flush so that yesterday's data lands under yesterday.

    Returns:
        (key, content_type)
    """
    now = now.astimezone(timezone.utc)
    partition = now - timedelta(days=1) if day_boundary else now

    ext = GZIP_EXTENSION if compression else ""
    content_type = GZIP_CONTENT_TYPE if compression else PLAIN_CONTENT_TYPE

    key = f"{prefix}/{partition.strftime(DATE_FORMAT)}/{now.strftime(TIME_FORMAT)}{ext}"
    return key, content_type


class UploadCoordinator:
    """Moves the spool file to the remote store."""

    def __init__(
        self,
        spool: SpoolFile,
        store: BlobStore,
        prefix: str = "",
        compression: bool = True,
        clock: Optional[SpoolClock] = None,
    ):
        self.spool = spool
        self.store = store
        self.prefix = prefix
        self.compression = compression
        self.clock = clock or default_clock

    def upload(self, buffer: MemoryBuffer, day_boundary: bool = False) -> str:
        """
        Flush `buffer` through the spool file to the remote store.

        Returns:
            The key the payload was written to

        Raises:
            NothingToUploadError: buffer empty and no spool file
            SpoolWriteError: the spill, read or cleanup failed
            UploadError: the remote write failed; spool file retained
            SpoolCleanupError: the put succeeded, the spool file was not removed
        """
        if not buffer and not self.spool.exists():
            raise NothingToUploadError("Nothing to upload.")

        self.spool.spill(buffer)

        body = self.spool.read(compress=self.compression)

        key, content_type = build_key(
            self.prefix,
            self.clock.now(),
            day_boundary=day_boundary,
            compression=self.compression,
        )
        self.store.put(key, body, content_type)

        logger.info(f"Upload of {key} finished, removing spool file {self.spool.path}")
        try:
            self.spool.remove()
        except SpoolWriteError as e:
            raise SpoolCleanupError(f"Uploaded {key} but could not remove spool file: {e}", e.path, key) from e
        return key
