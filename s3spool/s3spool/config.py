"""
Configuration loader for s3spool.yaml files.

Options are accepted in snake_case (access_key, buffer_path, ...) or in
camelCase (accessKey, bufferPath, ...). The resulting SpoolConfig is
immutable.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from s3spool.errors import ConfigError
from s3spool.triggers import parse_time_of_day

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "s3spool.yaml"

# Environment overrides, applied on top of file values
ENV_OVERRIDES = {
    "S3SPOOL_BUCKET": "bucket",
    "S3SPOOL_PREFIX": "prefix",
    "S3SPOOL_REGION": "region",
    "S3SPOOL_BUFFER_PATH": "buffer_path",
}


@dataclass(frozen=True)
class SpoolConfig:
    """Settings for one output instance (one bucket/prefix pair)."""
    bucket: str = ""
    prefix: str = ""
    region: str = "us-east-1"
    access_key: str = ""
    secret_key: str = ""
    ticker_interval: float = 0  # Seconds; 0 disables the interval trigger
    compression: bool = True
    buffer_path: str = ".s3spool/buffer"
    buffer_chunk_limit: int = 1_000_000  # Spill once the buffer exceeds this
    daily_flush_time: str = "00:00:00"  # UTC
    upload_timeout: Optional[float] = None
    queue_size: int = 1000

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "SpoolConfig":
        """
        Build a config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: if a value has the wrong type
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for raw_key, value in (values or {}).items():
            key = _snake_case(raw_key)
            if key not in known:
                logger.warning(f"Ignoring unknown config option {raw_key!r}")
                continue
            kwargs[key] = _coerce(key, value)
        return cls(**kwargs)

    def with_env(self, environ: Optional[Dict[str, str]] = None) -> "SpoolConfig":
        """Return a copy with S3SPOOL_* environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides = {
            field_name: environ[var]
            for var, field_name in ENV_OVERRIDES.items()
            if environ.get(var)
        }
        return replace(self, **overrides) if overrides else self

    def validate(self) -> "SpoolConfig":
        """
        Check the config for errors that must abort startup.

        Returns:
            self, so calls can be chained
        """
        if not self.bucket:
            raise ConfigError("bucket is required")
        if bool(self.access_key) != bool(self.secret_key):
            raise ConfigError("access_key and secret_key must be set together")
        if self.ticker_interval < 0:
            raise ConfigError("ticker_interval must be >= 0")
        if self.buffer_chunk_limit <= 0:
            raise ConfigError("buffer_chunk_limit must be > 0")
        if not self.buffer_path:
            raise ConfigError("buffer_path is required")
        if self.upload_timeout is not None and self.upload_timeout <= 0:
            raise ConfigError("upload_timeout must be > 0")
        if self.queue_size <= 0:
            raise ConfigError("queue_size must be > 0")
        try:
            parse_time_of_day(self.daily_flush_time)
        except ValueError as e:
            raise ConfigError(f"daily_flush_time is invalid: {e}") from e
        return self


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


_BOOL_STRINGS = {"true": True, "yes": True, "1": True, "on": True,
                 "false": False, "no": False, "0": False, "off": False}


def _coerce(key: str, value: Any) -> Any:
    try:
        if key == "compression":
            if isinstance(value, str):
                return _BOOL_STRINGS[value.strip().lower()]
            return bool(value)
        if key in ("buffer_chunk_limit", "queue_size"):
            return int(value)
        if key == "ticker_interval":
            return float(value)
        if key == "upload_timeout":
            return None if value is None else float(value)
        return "" if value is None else str(value)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e


def load_config(config_path: Optional[str] = None) -> SpoolConfig:
    """
    Load configuration from s3spool.yaml.

    Search order:
    1. Provided config_path
    2. S3SPOOL_CONFIG environment variable
    3. ./s3spool.yaml in current directory
    4. s3spool.yaml in parent directories (walk up the tree)

    Environment overrides are applied last. With no file found, defaults
    plus overrides are returned.

    Raises:
        ConfigError: if the file cannot be parsed
    """
    if config_path:
        return _load_from_path(config_path).with_env()

    env_path = os.environ.get("S3SPOOL_CONFIG")
    if env_path:
        return _load_from_path(env_path).with_env()

    current = Path.cwd()
    while True:
        config_file = current / CONFIG_FILENAME
        if config_file.exists():
            return _load_from_path(str(config_file)).with_env()

        if current == current.parent:
            break
        current = current.parent

    return SpoolConfig().with_env()


def _load_from_path(path: str) -> SpoolConfig:
    """Load config from a specific path (JSON or YAML by extension)."""
    try:
        with open(path, "r") as f:
            if path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    # Accept either a flat mapping or one nested under "s3spool"
    if isinstance(data.get("s3spool"), dict):
        data = data["s3spool"]

    return SpoolConfig.from_dict(data)
