"""
Error taxonomy for the upload pipeline.

Only InvalidInputError reaches the caller directly. Everything else
happens on a background worker and is reported through the UploadResult
carried by the task handle.
"""


class UploadError(Exception):
    """Base class for upload failures."""
    pass


class InvalidInputError(UploadError):
    """Raised synchronously when a name or key cannot be used."""
    pass


class InputConversionError(UploadError):
    """Raised when content cannot be buffered to a local scratch file."""
    pass


class StorageServiceError(UploadError):
    """Raised when the object store rejects or fails a put."""
    pass


class CleanupError(UploadError):
    """Raised when a scratch file cannot be removed. Never fatal."""
    pass
