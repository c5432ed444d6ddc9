"""
Background upload pipeline.

UploadService validates input on the caller's thread, then hands the
slow part (buffer to disk, put to the bucket, clean up) to a background
runner. Callers get an UploadHandle back: they can ignore it, wait on
it, or attach a callback to its future. Either way the outcome is logged
on the worker.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from .errors import CleanupError, InputConversionError, StorageServiceError
from .keys import derive_object_key, normalise_name, validate_key
from .models import UploadRequest, UploadResult, UploadStatus


@dataclass(frozen=True)
class UploadHandle:
    """
    What a caller gets back from scheduling an upload.

    The key is known up front. The future resolves to an UploadResult and
    never raises for conversion or storage failures.
    """
    key: str
    future: Future

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> UploadResult:
        """Block until the upload finishes (or timeout) and return its outcome."""
        return self.future.result(timeout=timeout)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStorageClient(Protocol):
    """Anything that can put a local file into a bucket under a key."""

    def put_object(
        self,
        bucket: str,
        key: str,
        source_path: Path,
        content_type: Optional[str] = None,
    ) -> None:
        ...


class TemporaryFileStore(Protocol):
    """Local scratch space used to hand bytes to the storage client."""

    def write(self, content: bytes, suffix: str = "") -> Path:
        ...

    def delete(self, path: Path) -> None:
        ...


class BackgroundTaskRunner(Protocol):
    """Runs callables off the calling thread and returns a Future."""

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        description: str = "",
        **kwargs: Any,
    ) -> Future:
        ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class UploadService:
    """
    Non-blocking uploads of in-memory content to one bucket.

    The logger is injected rather than looked up globally so tests and
    embedding applications can capture or redirect upload logs.
    """

    def __init__(
        self,
        storage_client: ObjectStorageClient,
        bucket_name: str,
        scratch_store: TemporaryFileStore,
        runner: BackgroundTaskRunner,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = datetime.now,
        random_key_suffix: bool = False,
    ) -> None:
        if not bucket_name:
            raise ValueError("bucket_name is required")

        self._storage = storage_client
        self._bucket = bucket_name
        self._scratch = scratch_store
        self._runner = runner
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._random_key_suffix = random_key_suffix

    @property
    def bucket_name(self) -> str:
        return self._bucket

    def upload(self, content: bytes, original_name: Optional[str]) -> UploadHandle:
        """
        Schedule an upload under a key derived from the file name.

        Raises InvalidInputError immediately if no usable name is given.
        The key is fixed at scheduling time, so it is known before the
        upload runs.
        """
        name = normalise_name(original_name)
        key = derive_object_key(name, self._clock(), self._random_key_suffix)
        request = UploadRequest(content=content, original_name=name)
        return self._schedule(request, key)

    def upload_with_key(self, key: str, content: bytes) -> UploadHandle:
        """
        Schedule an upload under exactly `key`.

        A later upload with the same key replaces this one.
        """
        key = validate_key(key)
        request = UploadRequest(content=content, explicit_key=key)
        return self._schedule(request, key)

    def _schedule(self, request: UploadRequest, key: str) -> UploadHandle:
        self._logger.info(
            "File upload scheduled",
            extra={"bucket": self._bucket, "key": key, "size_bytes": request.size_bytes},
        )
        future = self._runner.submit(self.run, request, key, description=f"upload {key}")
        return UploadHandle(key=key, future=future)

    def run(self, request: UploadRequest, key: str) -> UploadResult:
        """
        Buffer, put and clean up. Runs on a worker thread.

        Conversion and storage failures become a FAILED result instead of
        an exception. The scratch file is removed whatever happens.
        """
        self._logger.info("File upload in progress", extra={"key": key})

        scratch_path: Optional[Path] = None
        status = UploadStatus.SUCCEEDED
        error: Optional[str] = None
        error_kind: Optional[str] = None

        try:
            scratch_path = self._scratch.write(request.content, suffix=request.scratch_suffix)
            self._storage.put_object(self._bucket, key, scratch_path)
            self._logger.info(
                "File upload completed",
                extra={"bucket": self._bucket, "key": key, "size_bytes": request.size_bytes},
            )
        except InputConversionError as e:
            status, error, error_kind = UploadStatus.FAILED, str(e), "input_conversion"
            self._logger.error(
                "Could not buffer upload to scratch file",
                extra={"key": key, "error": error},
            )
        except StorageServiceError as e:
            status, error, error_kind = UploadStatus.FAILED, str(e), "storage_service"
            self._logger.error(
                "File upload failed",
                extra={"bucket": self._bucket, "key": key, "error": error},
            )
        finally:
            scratch_removed = self._remove_scratch(scratch_path, key)

        return UploadResult(
            key=key,
            bucket=self._bucket,
            status=status,
            size_bytes=request.size_bytes,
            error=error,
            error_kind=error_kind,
            scratch_removed=scratch_removed,
        )

    def _remove_scratch(self, path: Optional[Path], key: str) -> bool:
        if path is None:
            return True

        try:
            self._scratch.delete(path)
        except CleanupError as e:
            self._logger.warning(
                "Scratch file was not removed",
                extra={"key": key, "path": str(path), "error": str(e)},
            )
            return False

        self._logger.debug("Scratch file removed", extra={"key": key, "path": str(path)})
        return True
