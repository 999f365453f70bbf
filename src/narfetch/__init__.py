"""narfetch: fetch Nix store paths from binary caches without Nix."""

from narfetch.exceptions import (
    ArchiveFormatError,
    ArchiveNotAvailableError,
    ErrorKind,
    FetchError,
    FilesystemError,
    InvalidNarInfoError,
    MalformedReferenceError,
    NarfetchError,
    NoIdentifierFoundError,
    ResolutionExhaustedError,
    TransportError,
)
from narfetch.identifiers import extract_identifier
from narfetch.pipeline import FetchOptions, NarFetcher, fetch_store_path
from narfetch.schemas import ArchiveLocation, NarInfo

__all__ = [
    "ArchiveFormatError",
    "ArchiveLocation",
    "ArchiveNotAvailableError",
    "ErrorKind",
    "FetchError",
    "FetchOptions",
    "FilesystemError",
    "InvalidNarInfoError",
    "MalformedReferenceError",
    "NarFetcher",
    "NarInfo",
    "NarfetchError",
    "NoIdentifierFoundError",
    "ResolutionExhaustedError",
    "TransportError",
    "extract_identifier",
    "fetch_store_path",
]
