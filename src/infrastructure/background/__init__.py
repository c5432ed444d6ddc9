"""
Background task execution.

Implements the BackgroundTaskRunner protocol from core.uploads.service.
"""

from .runner import BackgroundTaskRunner

__all__ = ["BackgroundTaskRunner"]
