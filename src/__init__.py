"""
Upload Service - accepts files over HTTP and stores them in object storage.

This package contains the complete application:
- core: Framework-agnostic upload pipeline
- infrastructure: Storage, scratch files, background workers
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
