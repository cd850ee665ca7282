from typing import Any

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Response schema for POST /upload."""
    url: str


class ErrorResponse(BaseModel):
    """Error envelope; diagnostic keys are only present for upstream failures."""
    error: str
    status: int | None = None
    contentType: str | None = None
    bodyPreview: str | None = None
    details: Any = None
    raw: Any = None
