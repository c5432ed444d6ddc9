"""
Local scratch files for uploads.

Every upload gets its own file from tempfile.mkstemp, so two uploads of
the same name never share (or clobber) a scratch file. Files are meant to
live only as long as a single put_object call.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from src.core.uploads.errors import CleanupError, InputConversionError

logger = logging.getLogger(__name__)


class ScratchFileStore:
    """Creates and removes scratch files under one directory."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        if directory is not None:
            directory = Path(directory)
            directory.mkdir(parents=True, exist_ok=True)
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory or Path(tempfile.gettempdir())

    def write(self, content: bytes, suffix: str = "") -> Path:
        """Write content to a fresh scratch file and return its path."""
        path = None
        try:
            fd, path = tempfile.mkstemp(
                suffix=suffix,
                prefix="upload_",
                dir=self._directory,
            )
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        except (OSError, ValueError) as e:
            # a half-written file is still ours to remove
            if path is not None and os.path.exists(path):
                os.remove(path)
            logger.error(
                "Error converting upload content to scratch file",
                extra={"directory": str(self.directory), "error": str(e)},
            )
            raise InputConversionError(f"Could not write scratch file: {e}")

        logger.debug("Wrote scratch file", extra={"path": path, "size_bytes": len(content)})
        return Path(path)

    def delete(self, path: Path) -> None:
        """Remove a scratch file. Already-missing files are not an error."""
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise CleanupError(f"Could not remove scratch file {path}: {e}")
