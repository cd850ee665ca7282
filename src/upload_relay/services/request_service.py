"""Service layer – inbound request validation and multipart parsing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from src.upload_relay.config import settings
from src.upload_relay.exceptions import (
    CallerError,
    MethodNotAllowedError,
    ParseError,
    PayloadTooLargeError,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """One file part of the inbound request."""
    filename: str
    content: bytes
    content_type: str = ""


@dataclass
class ParsedForm:
    """Files in arrival order plus every text field (repeated keys kept)."""
    files: list[UploadedFile] = field(default_factory=list)
    fields: dict[str, list[str]] = field(default_factory=dict)


def validate_request(method: str, content_type: str | None) -> None:
    """Reject anything that is not a multipart POST, before the body is read."""
    if method.upper() != "POST":
        raise MethodNotAllowedError()
    if not (content_type or "").strip().lower().startswith("multipart/form-data"):
        raise CallerError("Expected multipart/form-data")


async def parse_multipart(request: Request) -> ParsedForm:
    """Read the multipart body of *request* into a :class:`ParsedForm`.

    File parts may use any field name. The total file payload is capped by
    ``settings.max_upload_size``.
    """
    parsed = ParsedForm()
    total_size = 0

    try:
        form = await request.form()
    except (MultiPartException, HTTPException, KeyError, ValueError) as exc:
        logger.warning("Rejecting malformed multipart body: %s", exc)
        raise ParseError() from exc

    try:
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                content = await value.read()
                total_size += len(content)
                if total_size > settings.max_upload_size:
                    raise PayloadTooLargeError(total_size, settings.max_upload_size)
                parsed.files.append(
                    UploadedFile(
                        filename=value.filename or "",
                        content=content,
                        content_type=value.content_type or "",
                    )
                )
            else:
                parsed.fields.setdefault(key, []).append(value)
    finally:
        await form.close()

    return parsed
