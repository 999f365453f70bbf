"""Custom exceptions for narfetch."""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Failure categories surfaced by the fetch pipeline."""

    NO_IDENTIFIER = "no_identifier"
    RESOLUTION_EXHAUSTED = "resolution_exhausted"
    ARCHIVE_NOT_AVAILABLE = "archive_not_available"
    TRANSPORT = "transport"
    FILESYSTEM = "filesystem"
    MALFORMED_REFERENCE = "malformed_reference"


class NarfetchError(Exception):
    """Base exception for narfetch operations."""

    kind: ErrorKind


class FetchError(NarfetchError):
    """Error while locating or downloading an archive."""


class ResolutionExhaustedError(FetchError):
    """No binary cache has a narinfo for the identifier."""

    kind = ErrorKind.RESOLUTION_EXHAUSTED

    def __init__(self, identifier: str, caches: tuple[str, ...]) -> None:
        self.identifier = identifier
        self.caches = caches
        super().__init__(
            f"{identifier} not found in any binary cache ({', '.join(caches)})"
        )


class ArchiveNotAvailableError(FetchError):
    """The resolved archive URL did not return a successful response."""

    kind = ErrorKind.ARCHIVE_NOT_AVAILABLE

    def __init__(self, url: str, status_code: int) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} when fetching archive {url}")


class TransportError(FetchError):
    """Network-level failure talking to a binary cache."""

    kind = ErrorKind.TRANSPORT


class FilesystemError(NarfetchError):
    """Directory creation or file write failed."""

    kind = ErrorKind.FILESYSTEM

    def __init__(self, message: str, *, path: Path, errno: int | None = None) -> None:
        self.path = path
        self.errno = errno
        super().__init__(message)


class MalformedReferenceError(NarfetchError):
    """Input that cannot be interpreted as a store reference or archive."""

    kind = ErrorKind.MALFORMED_REFERENCE


class NoIdentifierFoundError(MalformedReferenceError):
    """Input string does not contain a 32-character store hash."""

    kind = ErrorKind.NO_IDENTIFIER

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"No store hash found in {text!r}")


class InvalidNarInfoError(MalformedReferenceError):
    """A binary cache returned a narinfo that cannot be parsed."""


class ArchiveFormatError(MalformedReferenceError):
    """Decompressed data is not a valid NAR archive."""
