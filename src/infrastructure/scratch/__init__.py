"""
Local scratch file handling.

Uploads are buffered to disk before being handed to the storage client.
"""

from .store import ScratchFileStore

__all__ = ["ScratchFileStore"]
