"""Service layer – one-time link file host client.

The host answers with JSON on success but may send an HTML error page on
failure, so the body is always read as text before decoding is attempted.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from src.upload_relay.config import ARCHIVE_CONTENT_TYPE, settings
from src.upload_relay.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def create_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.upload_timeout)


def find_link(payload: Any) -> str | None:
    """Return the download link, top-level or nested under ``data``."""
    if not isinstance(payload, dict):
        return None
    for container in (payload, payload.get("data")):
        if isinstance(container, dict):
            link = container.get("link")
            if isinstance(link, str) and link:
                return link
    return None


def extract_link(response: httpx.Response) -> str:
    """Return the link from *response* or raise :class:`UpstreamError`."""
    text = response.text
    diagnostics = {
        "status": response.status_code,
        "contentType": response.headers.get("content-type", ""),
        "bodyPreview": text[: settings.body_preview_length],
    }

    if not response.is_success:
        raise UpstreamError("File host upload failed", diagnostics)

    try:
        payload = json.loads(text)
    except ValueError:
        raise UpstreamError("File host returned a non-JSON response", diagnostics) from None

    link = find_link(payload)
    if link is None:
        details: dict[str, Any] = {**diagnostics, "raw": payload}
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error")
            if isinstance(message, str):
                details["details"] = message
        raise UpstreamError("File host response did not include a link", details)

    return link


async def upload_archive(archive: bytes, *, client: httpx.AsyncClient | None = None) -> str:
    """POST *archive* to the file host and return the one-time download link."""
    files = {"file": (settings.archive_filename, archive, ARCHIVE_CONTENT_TYPE)}
    logger.info("Uploading %s (%d bytes) to %s", settings.archive_filename, len(archive), settings.upload_endpoint)

    try:
        if client is None:
            async with create_client() as owned:
                response = await owned.post(settings.upload_endpoint, files=files)
        else:
            response = await client.post(settings.upload_endpoint, files=files)
    except httpx.HTTPError as exc:
        logger.warning("File host request failed: %s", exc)
        raise UpstreamError("File host request failed", {"details": str(exc)}) from exc

    try:
        return extract_link(response)
    except UpstreamError as exc:
        logger.warning("%s (status %s)", exc.message, response.status_code)
        raise
