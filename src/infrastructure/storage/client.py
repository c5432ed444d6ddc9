"""
Object storage client for uploaded files.

Supports AWS S3 and S3-compatible stores (Cloudflare R2, MinIO) through
boto3, with a mock mode for local development.

Mock mode stores objects in memory, enabling API testing without
provisioning a real bucket.
"""

import logging
import mimetypes
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.core.uploads.errors import StorageServiceError
from src.core.uploads.service import ObjectStorageClient

logger = logging.getLogger(__name__)


DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(key: str) -> str:
    """Infer a content type from the key, falling back to binary."""
    guessed, _ = mimetypes.guess_type(key)
    return guessed or DEFAULT_CONTENT_TYPE


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    endpoint_url is None for AWS S3 itself; set it for R2 or MinIO.
    """
    access_key_id: str
    secret_access_key: str
    endpoint_url: Optional[str] = None
    region: str = "us-east-1"
    connect_timeout: int = 10
    read_timeout: int = 60


class S3StorageClient:
    """
    S3 object storage client. Implements ObjectStorageClient from
    core.uploads.service.

    boto3 clients are thread-safe, so one instance is shared by every
    upload worker. Retries are left at a single attempt: a failed put is
    reported, not retried.
    """

    def __init__(self, config: StorageConfig) -> None:
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install boto3"
            )

        self._config = config

        boto_config = Config(
            signature_version='s3v4',
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            retries={'max_attempts': 1, 'mode': 'standard'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id or None,
            aws_secret_access_key=config.secret_access_key or None,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "endpoint": config.endpoint_url or "aws",
                "region": config.region,
            }
        )

    def put_object(
        self,
        bucket: str,
        key: str,
        source_path: Path,
        content_type: Optional[str] = None,
    ) -> None:
        """Stream a local file to the bucket with a single PutObject call."""
        try:
            with open(source_path, 'rb') as body:
                self._s3_client.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type or guess_content_type(key),
                )

            logger.debug("Uploaded object", extra={"bucket": bucket, "key": key})

        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"bucket": bucket, "key": key, "error": str(e)}
            )
            raise StorageServiceError(f"Upload failed: {e}")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development and tests. Implements
    ObjectStorageClient; get_object and keys let callers inspect what
    was stored.

    Objects are kept in a {bucket: {key: bytes}} map guarded by a lock,
    since uploads arrive from several worker threads. Setting fail_with
    makes every put raise, which simulates a provider outage.
    """

    def __init__(self, fail_with: Optional[str] = None) -> None:
        self._buckets: dict[str, dict[str, bytes]] = {}
        self._content_types: dict[tuple[str, str], str] = {}
        self._lock = threading.Lock()
        self.fail_with = fail_with
        logger.info("Initialized mock storage client (in-memory)")

    def put_object(
        self,
        bucket: str,
        key: str,
        source_path: Path,
        content_type: Optional[str] = None,
    ) -> None:
        """Store object in memory."""
        if self.fail_with:
            raise StorageServiceError(self.fail_with)

        data = Path(source_path).read_bytes()
        with self._lock:
            self._buckets.setdefault(bucket, {})[key] = data
            self._content_types[(bucket, key)] = content_type or guess_content_type(key)

        logger.debug(
            "Stored object in mock storage",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)}
        )

    def get_object(self, bucket: str, key: str) -> bytes:
        """Retrieve object from memory."""
        with self._lock:
            objects = self._buckets.get(bucket, {})
            if key not in objects:
                raise StorageServiceError(f"Object not found: {bucket}/{key}")
            return objects[key]

    def content_type(self, bucket: str, key: str) -> Optional[str]:
        with self._lock:
            return self._content_types.get((bucket, key))

    def keys(self, bucket: str) -> list[str]:
        """List keys stored in a bucket."""
        with self._lock:
            return sorted(self._buckets.get(bucket, {}))


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        ObjectStorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
