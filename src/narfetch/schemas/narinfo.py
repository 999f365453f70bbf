"""Narinfo and archive location models."""

from __future__ import annotations

from pydantic import BaseModel, Field

_SUFFIX_COMPRESSION = {
    ".xz": "xz",
    ".bz2": "bzip2",
    ".zst": "zstd",
    ".nar": "none",
}
_DEFAULT_COMPRESSION = "xz"


class NarInfo(BaseModel):
    """Metadata published by a binary cache for one store path.

    Attributes:
        store_path: Full store path (``StorePath``).
        url: Archive path relative to the cache root (``URL``).
        compression: Archive codec name (``Compression``).
        file_hash: Hash of the compressed archive (``FileHash``).
        file_size: Size of the compressed archive (``FileSize``).
        nar_hash: Hash of the uncompressed NAR (``NarHash``).
        nar_size: Size of the uncompressed NAR (``NarSize``).
        references: Store paths referenced by this one (``References``).
        deriver: Derivation that produced the path (``Deriver``).
        sigs: Signatures (``Sig``, may repeat).
        extra: Any other keys, verbatim.
    """

    store_path: str | None = None
    url: str | None = None
    compression: str | None = None
    file_hash: str | None = None
    file_size: int | None = None
    nar_hash: str | None = None
    nar_size: int | None = None
    references: list[str] = Field(default_factory=list)
    deriver: str | None = None
    sigs: list[str] = Field(default_factory=list)
    extra: dict[str, str] = Field(default_factory=dict)


class ArchiveLocation(BaseModel):
    """Where the archive for an identifier can be downloaded.

    Attributes:
        identifier: The store hash that was resolved.
        cache: Base URL of the binary cache that answered.
        url: Fully qualified archive URL.
        narinfo: Parsed narinfo from the answering cache, if any.
    """

    identifier: str
    cache: str
    url: str
    narinfo: NarInfo | None = None

    @property
    def compression(self) -> str:
        if self.narinfo is not None and self.narinfo.compression:
            return self.narinfo.compression
        for suffix, codec in _SUFFIX_COMPRESSION.items():
            if self.url.endswith(suffix):
                return codec
        return _DEFAULT_COMPRESSION
