"""
Upload API endpoints.

Both endpoints read the multipart body, hand the bytes to the upload
service and return 202 right away. The object lands in the bucket a
moment later, on a background worker; the response carries the key it
will be stored under.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from ...core.uploads.errors import InvalidInputError
from ..dependencies import AuthenticatedUser, SettingsDep, UploadServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadAcceptedResponse(BaseModel):
    """Response once an upload has been scheduled."""
    key: str = Field(description="Object key the file will be stored under")
    bucket: str = Field(description="Destination bucket")
    size_bytes: int = Field(description="Size of the accepted content")
    status: str = Field(default="accepted", description="Always 'accepted'; the upload runs in the background")


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read the whole upload, rejecting bodies over max_bytes."""
    data = await file.read()
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB",
        )
    return data


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/files",
    response_model=UploadAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Upload a file",
    description="Store a file under a key derived from its name and the current time",
)
async def upload_file(
    file: Annotated[UploadFile, File(description="File to store")],
    api_key: AuthenticatedUser,
    uploads: UploadServiceDep,
    settings: SettingsDep,
) -> UploadAcceptedResponse:
    content = await read_limited(file, settings.max_upload_size_bytes)

    try:
        handle = uploads.upload(content, file.filename)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(
        "File upload accepted",
        extra={"key": handle.key, "upload_filename": file.filename, "size_bytes": len(content)}
    )

    return UploadAcceptedResponse(
        key=handle.key,
        bucket=uploads.bucket_name,
        size_bytes=len(content),
    )


@router.put(
    "/blog-images/{image_id}",
    response_model=UploadAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Upload a blog image",
    description="Store an image under exactly image_id, replacing any previous image with that id",
)
async def upload_blog_image(
    image_id: str,
    file: Annotated[UploadFile, File(description="Image to store")],
    api_key: AuthenticatedUser,
    uploads: UploadServiceDep,
    settings: SettingsDep,
) -> UploadAcceptedResponse:
    content = await read_limited(file, settings.max_upload_size_bytes)

    try:
        handle = uploads.upload_with_key(image_id, content)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(
        "Blog image upload accepted",
        extra={"key": handle.key, "size_bytes": len(content)}
    )

    return UploadAcceptedResponse(
        key=handle.key,
        bucket=uploads.bucket_name,
        size_bytes=len(content),
    )
