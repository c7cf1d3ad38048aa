"""
s3spool command - spool newline-delimited records to S3.

Usage:
    # Read records from stdin
    tail -F app.log | s3spool --config s3spool.yaml

    # Read records from files, JSON-encode, upload what is left on exit
    s3spool --config s3spool.yaml --json --flush-on-exit events-*.jsonl
"""

import argparse
import logging
import sys
import threading
from typing import IO, Iterable, List, Optional

from s3spool.config import load_config
from s3spool.encoding import ENCODERS
from s3spool.errors import ConfigError
from s3spool.runner import SpoolRunner
from s3spool.source import QueueSource

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3spool",
        description="Buffer records locally and upload them to S3 in date-partitioned batches.",
    )
    parser.add_argument("files", nargs="*", help="Input files (default: stdin)")
    parser.add_argument("--config", help="Path to s3spool.yaml (or .json)")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Encode records as JSON lines instead of passing raw bytes through",
    )
    parser.add_argument(
        "--flush-on-exit",
        action="store_true",
        help="Upload whatever is buffered once input is exhausted",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def feed_lines(source: QueueSource, streams: Iterable[IO[bytes]]) -> None:
    """Push every line of every stream into `source`, then close it."""
    try:
        for stream in streams:
            for line in stream:
                source.put(line)
    finally:
        source.close()


def _open_inputs(paths: List[str]) -> Iterable[IO[bytes]]:
    if not paths:
        yield sys.stdin.buffer
        return
    for path in paths:
        with open(path, "rb") as f:
            yield f


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config)
        runner = SpoolRunner.from_config(
            config,
            encoder=ENCODERS["json" if args.json else "raw"],
        )
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    source = QueueSource(maxsize=config.queue_size)
    feeder = threading.Thread(
        target=feed_lines,
        args=(source, _open_inputs(args.files)),
        daemon=True,
        name="s3spool-feed",
    )
    feeder.start()

    try:
        runner.run(source)
    except KeyboardInterrupt:
        logger.info("Interrupted")

    if args.flush_on_exit:
        runner.flush()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
