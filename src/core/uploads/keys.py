"""
Object key derivation.

Keys for name-based uploads are `<name>_<timestamp>` with second
resolution. Two uploads of the same name within the same second get the
same key and the later one overwrites the earlier. The optional random
suffix closes that window while keeping the name as the key prefix.
"""

from datetime import datetime
from pathlib import PurePosixPath
from typing import Optional
from uuid import uuid4

from .errors import InvalidInputError


def normalise_name(original_name: Optional[str]) -> str:
    """
    Reduce a caller-supplied filename to its base name.

    Browsers and clients sometimes send full paths; only the last
    component is used so the key never carries the client's layout.
    """
    if original_name is None:
        raise InvalidInputError("A file name is required")

    name = PurePosixPath(original_name.replace("\\", "/")).name.strip()
    if not name:
        raise InvalidInputError(f"Cannot derive a file name from {original_name!r}")

    return name


def validate_key(key: Optional[str]) -> str:
    """Explicit keys are used verbatim but must not be blank."""
    if key is None or not key.strip():
        raise InvalidInputError("An object key is required")
    return key


def derive_object_key(
    name: str,
    now: datetime,
    random_suffix: bool = False,
) -> str:
    """Build `<name>_<YYYY-MM-DDTHH:MM:SS>[_<hex8>]`."""
    key = f"{name}_{now.isoformat(timespec='seconds')}"
    if random_suffix:
        key = f"{key}_{uuid4().hex[:8]}"
    return key
