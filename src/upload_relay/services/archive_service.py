"""Service layer – in-memory ZIP construction."""

from __future__ import annotations

import io
import logging
import os
import warnings
import zipfile
import zlib
from collections.abc import Callable, Sequence

from src.upload_relay.exceptions import ArchiveError
from src.upload_relay.services.request_service import UploadedFile

logger = logging.getLogger(__name__)

WarningSink = Callable[[str], None]


def dedupe_names(names: Sequence[str]) -> list[str]:
    """Make every name unique by suffixing repeats: ``a.jpg``, ``a_2.jpg``, …"""
    seen: set[str] = set()
    unique: list[str] = []
    for name in names:
        stem, ext = os.path.splitext(name)
        candidate = name
        counter = 1
        while candidate in seen:
            counter += 1
            candidate = f"{stem}_{counter}{ext}"
        seen.add(candidate)
        unique.append(candidate)
    return unique


def build_archive(
    files: Sequence[UploadedFile],
    names: Sequence[str],
    *,
    compresslevel: int = 9,
    dedupe: bool = True,
    on_warning: WarningSink | None = None,
) -> bytes:
    """Write one DEFLATE entry per file, in input order, and return the ZIP bytes.

    Warnings raised by the archive writer (e.g. duplicate entry names) are
    passed to *on_warning* instead of the caller.
    """
    if len(files) != len(names):
        raise ValueError(f"Got {len(names)} names for {len(files)} files")

    sink = on_warning or logger.warning
    entry_names = dedupe_names(names) if dedupe else list(names)
    buffer = io.BytesIO()

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with zipfile.ZipFile(
                buffer,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=compresslevel,
            ) as zf:
                for name, upload in zip(entry_names, files):
                    zf.writestr(name, upload.content)
    except (zipfile.LargeZipFile, zlib.error, OSError, ValueError) as exc:
        raise ArchiveError(f"Failed to build archive: {exc}") from exc

    for warning in caught:
        sink(f"Archive warning: {warning.message}")

    archive = buffer.getvalue()
    logger.info("Built archive with %d entries (%d bytes)", len(entry_names), len(archive))
    return archive
