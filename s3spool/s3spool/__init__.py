"""
s3spool - durable, rotating output spooler for S3

Records are accumulated in memory, spilled to one append-only local file
per bucket/prefix once a size threshold is crossed, and flushed to S3
under a date-partitioned key on a fixed interval and once a day. The
spool file is deleted only after S3 confirms the write, so a failed
upload loses nothing (at-least-once delivery).
"""

from s3spool.buffer import MemoryBuffer
from s3spool.clock import SpoolClock, default_clock
from s3spool.config import SpoolConfig, load_config
from s3spool.encoding import encode_json_line, encode_raw
from s3spool.errors import (
    ConfigError,
    EncodingError,
    NothingToUploadError,
    SpoolCleanupError,
    SpoolError,
    SpoolWriteError,
    UploadError,
)
from s3spool.remote import BlobStore, S3BlobStore
from s3spool.runner import SpoolRunner
from s3spool.source import InboundRecord, QueueSource
from s3spool.spool import SpoolFile, spool_file_name
from s3spool.triggers import DailyTicker, IntervalTicker, SizeTrigger, next_daily_fire
from s3spool.uploader import UploadCoordinator, build_key

__version__ = "0.1.0"

__all__ = [
    # Buffer / spool
    "MemoryBuffer",
    "SpoolFile",
    "spool_file_name",
    # Triggers
    "SizeTrigger",
    "IntervalTicker",
    "DailyTicker",
    "next_daily_fire",
    # Upload
    "UploadCoordinator",
    "build_key",
    "BlobStore",
    "S3BlobStore",
    # Loop
    "SpoolRunner",
    "QueueSource",
    "InboundRecord",
    # Encoding
    "encode_raw",
    "encode_json_line",
    # Config / clock
    "SpoolConfig",
    "load_config",
    "SpoolClock",
    "default_clock",
    # Errors
    "SpoolError",
    "ConfigError",
    "SpoolWriteError",
    "SpoolCleanupError",
    "EncodingError",
    "UploadError",
    "NothingToUploadError",
]
