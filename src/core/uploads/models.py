"""
Domain models for object uploads.

An UploadRequest lives for exactly one upload attempt. Nothing here is
persisted; the object store is the only durable state.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional


MAX_SCRATCH_EXTENSION = 16


class UploadStatus(Enum):
    """Final state of an upload attempt."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadRequest:
    """
    Bytes to upload plus how to name them.

    Either original_name or explicit_key identifies the object. An
    explicit key always wins, and reusing one replaces the stored object.
    """
    content: bytes
    original_name: Optional[str] = None
    explicit_key: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def scratch_suffix(self) -> str:
        """
        Extension for the scratch file, e.g. ".txt".

        Only ASCII letters and digits from the extension are kept, so the
        scratch path never carries arbitrary user text.
        """
        name = self.original_name or self.explicit_key or ""
        ext = re.sub(r"[^A-Za-z0-9]", "", PurePosixPath(name).suffix)
        return f".{ext[:MAX_SCRATCH_EXTENSION]}" if ext else ""


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of one upload attempt.

    Returned from the background task instead of raising, so a failed
    upload never crashes the worker but is still observable by anyone
    holding the handle.
    """
    key: str
    bucket: str
    status: UploadStatus
    size_bytes: int = 0
    error: Optional[str] = None
    error_kind: Optional[str] = None
    scratch_removed: bool = True

    @property
    def succeeded(self) -> bool:
        return self.status == UploadStatus.SUCCEEDED
