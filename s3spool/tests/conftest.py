"""Pytest fixtures for s3spool tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

from s3spool.clock import SpoolClock
from s3spool.config import SpoolConfig
from s3spool.remote import BlobStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def frozen_clock():
    """A clock frozen at 2024-03-02 12:30:45 UTC."""
    return SpoolClock(frozen_time=datetime(2024, 3, 2, 12, 30, 45, tzinfo=timezone.utc))


@pytest.fixture
def mock_store():
    """A BlobStore whose put() records calls and succeeds."""
    return Mock(spec=BlobStore)


@pytest.fixture
def spool_config(temp_dir):
    """Config with a small threshold and the staging dir under temp_dir."""
    return SpoolConfig(
        bucket="test-bucket",
        prefix="logs/app",
        buffer_path=str(temp_dir / "buffer"),
        buffer_chunk_limit=10,
        ticker_interval=60,
        compression=False,
    )


@pytest.fixture(autouse=True)
def reset_env(monkeypatch):
    """Keep S3SPOOL_* variables from the host out of the tests."""
    for var in ("S3SPOOL_CONFIG", "S3SPOOL_BUCKET", "S3SPOOL_PREFIX",
                "S3SPOOL_REGION", "S3SPOOL_BUFFER_PATH"):
        monkeypatch.delenv(var, raising=False)
