"""
Remote blob store boundary.

The coordinator only needs one capability: write a full payload to a key
in a single call. S3BlobStore provides it with boto3; tests substitute a
Mock.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from s3spool.errors import ConfigError, UploadError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """
    Abstract base class for remote stores.
    """

    @abstractmethod
    def put(self, key: str, body: bytes, content_type: str) -> None:
        """
        Write `body` to `key` as a private object.

        The write either fully succeeds or raises UploadError; there is
        no partial object to clean up.
        """
        pass


class S3BlobStore(BlobStore):
    """
    Writes objects to a single S3 bucket with put_object.

    Region and credentials are checked when the store is built so a bad
    configuration aborts startup rather than the first upload.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            bucket: Target bucket name
            region: AWS region name, must be one boto3 knows for S3
            access_key: Explicit access key id (falls back to the default
                credential chain when both keys are omitted)
            secret_key: Explicit secret access key
            timeout: Connect/read timeout in seconds for each put
        """
        if bool(access_key) != bool(secret_key):
            raise ConfigError("access_key and secret_key must be set together")

        session = boto3.session.Session(
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
        )
        known_regions = session.get_available_regions("s3")
        if known_regions and region not in known_regions:
            raise ConfigError(f"Region of that name not found: {region!r}")

        client_config = None
        if timeout is not None:
            client_config = BotoConfig(connect_timeout=timeout, read_timeout=timeout)

        self.bucket = bucket
        self.region = region
        self._client = session.client("s3", region_name=region, config=client_config)

    @property
    def client(self):
        return self._client

    def put(self, key: str, body: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                ACL="private",
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadError(f"Error putting s3://{self.bucket}/{key}: {e}", key) from e

        logger.debug(f"Put {len(body)} bytes to s3://{self.bucket}/{key}")
