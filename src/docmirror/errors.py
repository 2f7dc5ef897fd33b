"""Error codes and failure results.

Transport helpers raise ``DocMirrorError``. Each public operation converts it
into a ``Failure`` value at its boundary, so callers branch on return values
instead of catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ErrorCode(StrEnum):
    REVISION_UNAVAILABLE = "REVISION_UNAVAILABLE"
    ARCHIVE_DOWNLOAD_FAILED = "ARCHIVE_DOWNLOAD_FAILED"
    ARCHIVE_TIMEOUT = "ARCHIVE_TIMEOUT"
    ARCHIVE_EXTRACT_FAILED = "ARCHIVE_EXTRACT_FAILED"
    NO_DOCUMENTS = "NO_DOCUMENTS"


class DocMirrorError(Exception):
    """Raised by transport and storage helpers inside a single operation."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = True) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable


@dataclass(frozen=True)
class Failure:
    """Explicit failure result of a resolve, fetch or classify step."""

    code: ErrorCode
    message: str
    recoverable: bool = True

    @classmethod
    def from_error(cls, exc: DocMirrorError) -> Failure:
        return cls(code=exc.code, message=exc.message, recoverable=exc.recoverable)
