"""
SpoolRunner - the event loop of one output instance.

Architecture:
    record → encoder → MemoryBuffer ──(size trigger)──→ SpoolFile
    interval / daily trigger → UploadCoordinator → remote store

Events are handled one at a time. Nothing runs concurrently with an
upload: a slow put stalls intake, and the bounded QueueSource turns that
stall into backpressure on producers.

Usage:
    runner = SpoolRunner.from_config(load_config().validate())
    source = QueueSource()
    threading.Thread(target=feed, args=(source,)).start()
    runner.run(source)
"""

import logging
import queue
from typing import Optional

from s3spool.buffer import MemoryBuffer
from s3spool.clock import SpoolClock, default_clock
from s3spool.config import SpoolConfig
from s3spool.encoding import Encoder, encode_raw
from s3spool.errors import EncodingError, NothingToUploadError, SpoolCleanupError, SpoolError
from s3spool.remote import BlobStore, S3BlobStore
from s3spool.source import InboundRecord, QueueSource
from s3spool.spool import SpoolFile
from s3spool.triggers import DailyTicker, IntervalTicker, SizeTrigger, parse_time_of_day
from s3spool.uploader import UploadCoordinator

logger = logging.getLogger(__name__)

# Upper bound on a single wait so a disabled interval ticker still lets
# the loop re-check the daily ticker against the (possibly frozen) clock.
MAX_WAIT_SECONDS = 60.0


class SpoolRunner:
    """
    Owns the buffer, spool file and triggers of one bucket/prefix pair.

    Not thread-safe: only the thread calling run() (or the handle_* and
    on_* methods directly) may touch it.
    """

    def __init__(
        self,
        config: SpoolConfig,
        store: BlobStore,
        encoder: Encoder = encode_raw,
        clock: Optional[SpoolClock] = None,
    ):
        self.config = config
        self.clock = clock or default_clock
        self.encoder = encoder

        self.buffer = MemoryBuffer()
        self.spool = SpoolFile(config.buffer_path, config.bucket, config.prefix)
        self.uploader = UploadCoordinator(
            self.spool,
            store,
            prefix=config.prefix,
            compression=config.compression,
            clock=self.clock,
        )

        self.size_trigger = SizeTrigger(config.buffer_chunk_limit)
        self.interval_ticker = IntervalTicker(config.ticker_interval, clock=self.clock)
        self.daily_ticker = DailyTicker(parse_time_of_day(config.daily_flush_time), clock=self.clock)

    @classmethod
    def from_config(
        cls,
        config: SpoolConfig,
        encoder: Encoder = encode_raw,
        clock: Optional[SpoolClock] = None,
    ) -> "SpoolRunner":
        """
        Validate `config` and wire an S3-backed runner.

        Raises:
            ConfigError: on any configuration problem (fatal at startup)
        """
        config.validate()
        store = S3BlobStore(
            bucket=config.bucket,
            region=config.region,
            access_key=config.access_key,
            secret_key=config.secret_key,
            timeout=config.upload_timeout,
        )
        return cls(config, store, encoder=encoder, clock=clock)

    def write(self, payload: bytes) -> bool:
        """
        Append an encoded payload, spilling to disk past the size threshold.

        Returns:
            True if a spill happened

        Raises:
            SpoolWriteError: the spill failed; the payload stays buffered
        """
        self.buffer.append(payload)
        if self.size_trigger.should_spill(self.buffer.size()):
            self.spool.spill(self.buffer)
            return True
        return False

    def handle_record(self, record: InboundRecord) -> None:
        """Encode one record and add it to the buffer."""
        try:
            payload = self.encoder(record.payload)
        except EncodingError as e:
            logger.error(f"Error encoding message: {e}")
            record.recycle()
            return

        if payload:
            try:
                self.write(payload)
            except SpoolError as e:
                # The payload is still in the buffer; the next trigger retries the spill
                logger.warning(f"Unable to write to buffer: {e}")

        record.recycle()

    def on_interval(self) -> Optional[str]:
        logger.info("Ticker fired, uploading payload.")
        key = self._upload(day_boundary=False)
        # Next period counts from the end of the upload
        self.interval_ticker.reset()
        return key

    def on_daily(self) -> Optional[str]:
        self.daily_ticker.reset()
        logger.info("Daily ticker fired, uploading payload.")
        return self._upload(day_boundary=True)

    def flush(self) -> Optional[str]:
        """Explicit non-boundary upload, outside any trigger."""
        return self._upload(day_boundary=False)

    def _upload(self, day_boundary: bool) -> Optional[str]:
        try:
            key = self.uploader.upload(self.buffer, day_boundary=day_boundary)
        except NothingToUploadError:
            logger.info("Nothing to upload.")
            return None
        except SpoolCleanupError as e:
            logger.error(f"Payload uploaded to {e.key}, but spool cleanup failed; it will be re-sent: {e}")
            self.buffer.clear()
            return e.key
        except SpoolError as e:
            logger.warning(f"Unable to upload payload: {e}")
            return None

        logger.info(f"Payload uploaded successfully to {key}.")
        self.buffer.clear()
        return key

    def _fire_due_triggers(self) -> None:
        if self.interval_ticker.is_due():
            self.on_interval()
        if self.daily_ticker.is_due():
            self.on_daily()

    def _wait_timeout(self) -> float:
        waits = [MAX_WAIT_SECONDS]
        for ticker in (self.interval_ticker, self.daily_ticker):
            remaining = ticker.seconds_until_due()
            if remaining is not None:
                waits.append(remaining)
        return max(0.0, min(waits))

    def run(self, source: QueueSource) -> None:
        """
        Process records and triggers until the source is closed.

        No final upload happens on exit. Bytes still in memory are spilled
        to the spool file so they wait there for the next start.
        """
        logger.info(f"Starting spool runner for s3://{self.config.bucket}/{self.config.prefix}")

        try:
            while True:
                self._fire_due_triggers()

                try:
                    record = source.get(timeout=self._wait_timeout())
                except queue.Empty:
                    continue

                if record is None:
                    break

                self.handle_record(record)
        finally:
            # Runs on KeyboardInterrupt too
            if self.buffer:
                try:
                    self.spool.spill(self.buffer)
                except SpoolError as e:
                    logger.warning(f"Unable to spill buffer on shutdown: {e}")

            logger.info("Shutting down spool runner.")
