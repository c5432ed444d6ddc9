"""
Object upload logic.

Contains the upload service, its collaborator protocols, domain models
and key derivation.
"""

from .errors import (
    CleanupError,
    InputConversionError,
    InvalidInputError,
    StorageServiceError,
    UploadError,
)
from .keys import derive_object_key, normalise_name
from .models import UploadRequest, UploadResult, UploadStatus
from .service import (
    BackgroundTaskRunner,
    ObjectStorageClient,
    TemporaryFileStore,
    UploadHandle,
    UploadService,
)

__all__ = [
    "CleanupError",
    "InputConversionError",
    "InvalidInputError",
    "StorageServiceError",
    "UploadError",
    "derive_object_key",
    "normalise_name",
    "UploadRequest",
    "UploadResult",
    "UploadStatus",
    "BackgroundTaskRunner",
    "ObjectStorageClient",
    "TemporaryFileStore",
    "UploadHandle",
    "UploadService",
]
