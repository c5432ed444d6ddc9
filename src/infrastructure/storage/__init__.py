"""
Object storage integration for uploaded files.

Supports S3 (AWS) and S3-compatible stores such as R2 via boto3.
Includes mock mode for local development without credentials.
"""

from .client import (
    MockStorageClient,
    ObjectStorageClient,
    S3StorageClient,
    StorageConfig,
    create_storage_client,
)

__all__ = [
    "MockStorageClient",
    "ObjectStorageClient",
    "S3StorageClient",
    "StorageConfig",
    "create_storage_client",
]
