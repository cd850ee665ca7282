"""Router – zip and relay uploaded files."""

from fastapi import APIRouter, Request

from src.upload_relay.schemas.upload import ErrorResponse, UploadResponse
from src.upload_relay.services.relay_service import relay_upload

router = APIRouter(tags=["Upload"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Not multipart, malformed body or no files"},
    405: {"model": ErrorResponse, "description": "Method other than POST"},
    413: {"model": ErrorResponse, "description": "Upload too large"},
    500: {"model": ErrorResponse, "description": "Archive or internal failure"},
    502: {"model": ErrorResponse, "description": "File host rejected the upload"},
}


@router.post("/upload", response_model=UploadResponse, responses=_ERROR_RESPONSES)
@router.post("/api/upload", response_model=UploadResponse, responses=_ERROR_RESPONSES, include_in_schema=False)
async def upload_files(request: Request) -> UploadResponse:
    """
    Zip the uploaded files and return a one-time download link.

    Form fields
    -----------
    any file field : one or more files to package.
    names[]        : optional, repeated once per file, in file order.
    names          : optional, JSON array of names (used when ``names[]`` is
                     missing or its count does not match).

    Files without a usable requested name keep their original filename.
    """
    url = await relay_upload(request)
    return UploadResponse(url=url)
