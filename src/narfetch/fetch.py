"""Stream, decompress and open NAR archives from a binary cache."""

from __future__ import annotations

import bz2
import io
import logging
import lzma
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

import httpx
import zstandard

from narfetch.exceptions import ArchiveFormatError, ArchiveNotAvailableError
from narfetch.http_utils import stream
from narfetch.nar import NarEntry, iter_entries
from narfetch.schemas import ArchiveLocation

logger = logging.getLogger(__name__)

_READ_BUFFER_SIZE = 64 * 1024


class Decompressor(Protocol):
    eof: bool

    def decompress(self, data: bytes) -> bytes: ...


DECOMPRESSORS: dict[str, Callable[[], Decompressor | None]] = {
    "xz": lzma.LZMADecompressor,
    "bzip2": bz2.BZ2Decompressor,
    "zstd": lambda: zstandard.ZstdDecompressor().decompressobj(),
    "none": lambda: None,
}


class DecompressingReader(io.RawIOBase):
    """File-like view of a chunk iterator passed through a decompressor.

    With ``decompressor=None`` the chunks are passed through unchanged.
    """

    def __init__(
        self, chunks: Iterator[bytes], decompressor: Decompressor | None
    ) -> None:
        super().__init__()
        self._chunks = chunks
        self._decompressor = decompressor
        self._buffer = b""
        self._offset = 0

    def readable(self) -> bool:
        return True

    def _fill(self) -> bool:
        while self._offset >= len(self._buffer):
            if self._decompressor is not None and self._decompressor.eof:
                return False
            try:
                chunk = next(self._chunks)
            except StopIteration:
                if self._decompressor is not None:
                    raise ArchiveFormatError(
                        "Compressed archive ended before end-of-stream marker"
                    ) from None
                return False
            if self._decompressor is None:
                self._buffer = chunk
            else:
                try:
                    self._buffer = self._decompressor.decompress(chunk)
                except (lzma.LZMAError, zstandard.ZstdError, OSError) as exc:
                    raise ArchiveFormatError(f"Cannot decompress archive: {exc}") from exc
            self._offset = 0
        return True

    def readinto(self, buffer) -> int:
        if not self._fill():
            return 0
        size = min(len(buffer), len(self._buffer) - self._offset)
        buffer[:size] = self._buffer[self._offset : self._offset + size]
        self._offset += size
        return size


def decompressed_stream(
    chunks: Iterator[bytes], compression: str
) -> io.BufferedReader:
    """Wrap ``chunks`` in a buffered reader decoding ``compression``.

    Raises:
        ArchiveFormatError: If the codec is not supported.
    """
    factory = DECOMPRESSORS.get(compression)
    if factory is None:
        raise ArchiveFormatError(f"Unsupported archive compression {compression!r}")
    raw = DecompressingReader(chunks, factory())
    return io.BufferedReader(raw, buffer_size=_READ_BUFFER_SIZE)


@contextmanager
def open_archive(
    location: ArchiveLocation, *, client: httpx.Client
) -> Iterator[Iterator[NarEntry]]:
    """Download ``location`` and yield its entries as a lazy iterator.

    The HTTP response stays open for the duration of the ``with`` block.

    Raises:
        ArchiveNotAvailableError: If the archive URL does not answer 2xx.
        TransportError: On network failure while connecting or reading.
        ArchiveFormatError: If the body cannot be decompressed or parsed.
    """
    with stream(location.url, client=client) as response:
        if not response.is_success:
            raise ArchiveNotAvailableError(location.url, response.status_code)

        logger.info("Downloading %s (%s)", location.url, location.compression)
        reader = decompressed_stream(
            response.iter_bytes(_READ_BUFFER_SIZE), location.compression
        )
        yield iter_entries(reader)
