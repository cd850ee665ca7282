"""
Exceptions raised along the relay pipeline.

Each carries the HTTP status it maps to and an optional diagnostics dict
that the response handlers merge into the ``{"error": ...}`` envelope.
"""

from typing import Any, Dict, Optional

from fastapi import status


class RelayException(Exception):
    """Base exception for all relay errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class CallerError(RelayException):
    """The request itself is unusable; the caller must fix it."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=status_code, details=details)


class MethodNotAllowedError(CallerError):
    def __init__(self):
        super().__init__(
            message="Method Not Allowed",
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        )


class PayloadTooLargeError(CallerError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"Upload too large ({size} bytes). Maximum size: {limit} bytes.",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )


class ParseError(CallerError):
    """Raised when the multipart body cannot be parsed."""

    def __init__(self, message: str = "Malformed multipart body"):
        super().__init__(message=message)


class ArchiveError(RelayException):
    """Raised when the compression stream fails while building the archive."""

    def __init__(self, message: str):
        super().__init__(message=message)


class UpstreamError(RelayException):
    """Raised when the file host rejects the upload or answers unusably."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
        )
