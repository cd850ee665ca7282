"""Service layer – archive entry naming.

Callers send the desired names in one of two shapes: a repeated ``names[]``
field or a single ``names`` field holding a JSON array. Neither is trusted:
a list is only used when its length matches the number of uploaded files,
otherwise the names are derived from the uploaded filenames.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Optional

from src.upload_relay.config import NAMES_JSON_FIELD, NAMES_LIST_FIELD, PLACEHOLDER_TEMPLATE
from src.upload_relay.services.request_service import UploadedFile

logger = logging.getLogger(__name__)

# ASCII alphanumerics, the Hebrew block, space, period, underscore, hyphen
_DISALLOWED = re.compile(r"[^0-9A-Za-z\u0590-\u05FF ._-]")
_SPACE_RUN = re.compile(r" {2,}")

NameSource = Callable[[Mapping[str, list[str]]], Optional[list[Any]]]


def sanitize(name: str | None) -> str:
    """Return *name* reduced to characters that are safe as an archive entry.

    Never fails; an input that is empty after trimming yields ``""``.
    """
    if not name:
        return ""
    cleaned = _DISALLOWED.sub("_", name.strip())
    return _SPACE_RUN.sub(" ", cleaned)


# ──────────────────────────────────────────────
# Name sources, in order of precedence
# ──────────────────────────────────────────────
def names_from_list_field(fields: Mapping[str, list[str]]) -> list[Any] | None:
    """Repeated ``names[]`` field, one value per file in arrival order."""
    values = fields.get(NAMES_LIST_FIELD)
    return list(values) if values else None


def names_from_json_field(fields: Mapping[str, list[str]]) -> list[Any] | None:
    """Single ``names`` field carrying a JSON array."""
    values = fields.get(NAMES_JSON_FIELD)
    if not values:
        return None
    try:
        parsed = json.loads(values[0])
    except (ValueError, RecursionError):
        logger.debug("Ignoring undecodable %r field", NAMES_JSON_FIELD)
        return None
    return parsed if isinstance(parsed, list) else None


NAME_SOURCES: tuple[tuple[str, NameSource], ...] = (
    (NAMES_LIST_FIELD, names_from_list_field),
    (NAMES_JSON_FIELD, names_from_json_field),
)


def _entry_name(requested: Any, upload: UploadedFile, index: int) -> str:
    for candidate in (requested, upload.filename):
        if isinstance(candidate, str):
            name = sanitize(candidate)
            if name:
                return name
    return PLACEHOLDER_TEMPLATE.format(index=index)


def resolve_names(
    files: Sequence[UploadedFile],
    fields: Mapping[str, list[str]],
) -> list[str]:
    """Return exactly one sanitized name per file.

    The first source whose list length equals ``len(files)`` wins; when none
    does, every name is derived from the file's own filename (or
    ``image_<n>.jpg`` when that is empty).
    """
    requested: list[Any] = [None] * len(files)
    for source_name, source in NAME_SOURCES:
        candidates = source(fields)
        if candidates is None:
            continue
        if len(candidates) == len(files):
            logger.debug("Using %d names from %r", len(candidates), source_name)
            requested = candidates
            break
        logger.info(
            "Ignoring %r: got %d names for %d files",
            source_name, len(candidates), len(files),
        )

    return [
        _entry_name(name, upload, index)
        for index, (name, upload) in enumerate(zip(requested, files), start=1)
    ]
