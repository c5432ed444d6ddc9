"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Routes never construct their own collaborators, so
tests can swap any of them through app.dependency_overrides.

The upload service is long-lived: it owns the worker pool, so it is
built once in the application lifespan and kept on app.state.
"""

import logging
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.uploads.service import UploadService
from ..infrastructure.background.runner import BackgroundTaskRunner
from ..infrastructure.scratch.store import ScratchFileStore
from ..infrastructure.storage.client import (
    ObjectStorageClient,
    StorageConfig,
    create_storage_client,
)

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Service Construction
# ---------------------------------------------------------------------------

def build_storage_client(settings: Settings) -> ObjectStorageClient:
    """Return the S3 client, or the in-memory mock in mock mode."""
    if settings.storage_mock_mode:
        return create_storage_client(mock_mode=True)

    config = StorageConfig(
        access_key_id=settings.storage_access_key_id,
        secret_access_key=settings.storage_secret_access_key,
        endpoint_url=settings.storage_endpoint_url,
        region=settings.storage_region,
    )
    return create_storage_client(config=config)


def build_upload_service(
    settings: Settings,
    runner: BackgroundTaskRunner,
) -> UploadService:
    """Wire the upload service from settings. Called once at startup."""
    scratch_dir = Path(settings.upload_scratch_dir) if settings.upload_scratch_dir else None

    service = UploadService(
        storage_client=build_storage_client(settings),
        bucket_name=settings.storage_bucket_name,
        scratch_store=ScratchFileStore(scratch_dir),
        runner=runner,
        logger=logging.getLogger("src.uploads"),
        random_key_suffix=settings.upload_random_key_suffix,
    )

    logger.info(
        "Created upload service",
        extra={
            "bucket": settings.storage_bucket_name,
            "mock_mode": settings.storage_mock_mode,
            "max_workers": runner.max_workers,
        }
    )
    return service


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_upload_service(request: Request) -> UploadService:
    """Provide the shared upload service created during startup."""
    service = getattr(request.app.state, "upload_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Upload service is not available",
        )
    return service


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
