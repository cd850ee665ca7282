"""Service layer – the relay pipeline.

Validate → parse → resolve names → build archive → upload. The first
failure raises and short-circuits straight to the exception handlers.
"""

from __future__ import annotations

import logging

from starlette.requests import Request

from src.upload_relay.config import settings
from src.upload_relay.exceptions import CallerError, RelayException
from src.upload_relay.services.archive_service import build_archive
from src.upload_relay.services.filehost_service import upload_archive
from src.upload_relay.services.names_service import resolve_names
from src.upload_relay.services.request_service import parse_multipart, validate_request

logger = logging.getLogger(__name__)


async def relay_upload(request: Request) -> str:
    """Zip the files of *request* and return the file host's download link.

    Unexpected faults are re-raised as a generic :class:`RelayException` so
    they are answered by the same handler (and middleware stack) as every
    other failure.
    """
    try:
        return await _run_pipeline(request)
    except RelayException:
        raise
    except Exception as exc:
        logger.exception("Unhandled error while relaying upload")
        raise RelayException("Internal server error") from exc


async def _run_pipeline(request: Request) -> str:
    validate_request(request.method, request.headers.get("content-type"))

    parsed = await parse_multipart(request)
    if not parsed.files:
        raise CallerError("No files")
    logger.info("Received %d file(s) for relay", len(parsed.files))

    names = resolve_names(parsed.files, parsed.fields)
    archive = build_archive(
        parsed.files,
        names,
        compresslevel=settings.compression_level,
        dedupe=settings.dedupe_archive_names,
    )
    # originals are no longer needed once the archive exists
    parsed.files.clear()

    return await upload_archive(archive)
