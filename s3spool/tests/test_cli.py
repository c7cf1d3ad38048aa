"""Tests for s3spool.cli module."""

import gzip
from unittest.mock import Mock, patch

import pytest

from s3spool.cli import EXIT_CONFIG_ERROR, EXIT_OK, build_parser, feed_lines, main
from s3spool.source import QueueSource


@pytest.fixture
def mock_boto3():
    with patch("s3spool.remote.boto3") as mocked:
        session = mocked.session.Session.return_value
        session.get_available_regions.return_value = ["us-east-1"]
        session.client.return_value = Mock()
        yield mocked


def write_config(temp_dir, **extra):
    lines = [
        "bucket: cli-bucket",
        "prefix: events",
        f"bufferPath: {temp_dir / 'buffer'}",
    ]
    lines += [f"{k}: {v}" for k, v in extra.items()]
    path = temp_dir / "s3spool.yaml"
    path.write_text("\n".join(lines) + "\n")
    return path


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.files == []
    assert not args.json
    assert not args.flush_on_exit


def test_feed_lines_closes_source():
    source = QueueSource()
    feed_lines(source, [iter([b"a\n", b"b\n"])])

    assert source.get(timeout=1).payload == b"a\n"
    assert source.get(timeout=1).payload == b"b\n"
    assert source.get(timeout=1) is None


def test_main_spools_and_flushes(temp_dir, mock_boto3):
    config_path = write_config(temp_dir)
    input_path = temp_dir / "input.log"
    input_path.write_bytes(b"line 1\nline 2\n")

    code = main(["--config", str(config_path), "--flush-on-exit", str(input_path)])

    assert code == EXIT_OK
    client = mock_boto3.session.Session.return_value.client.return_value
    kwargs = client.put_object.call_args[1]
    assert kwargs["Bucket"] == "cli-bucket"
    assert kwargs["Key"].startswith("events/")
    assert kwargs["Key"].endswith(".gz")
    assert gzip.decompress(kwargs["Body"]) == b"line 1\nline 2\n"


def test_main_without_flush_leaves_spool(temp_dir, mock_boto3):
    config_path = write_config(temp_dir, compression="false")
    input_path = temp_dir / "input.log"
    input_path.write_bytes(b"kept for next start\n")

    assert main(["--config", str(config_path), str(input_path)]) == EXIT_OK

    client = mock_boto3.session.Session.return_value.client.return_value
    client.put_object.assert_not_called()
    assert (temp_dir / "buffer" / "cli-bucketevents").read_bytes() == b"kept for next start\n"


def test_main_config_error(temp_dir):
    path = temp_dir / "empty.yaml"
    path.write_text("prefix: no-bucket\n")

    assert main(["--config", str(path)]) == EXIT_CONFIG_ERROR
