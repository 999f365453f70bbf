"""Streaming reader for the Nix archive (NAR) format.

A NAR is a sequence of length-prefixed byte strings. Every string is
preceded by its length as a little-endian u64 and padded with zero bytes
to a multiple of eight. The archive starts with ``nix-archive-1`` followed
by exactly one node::

    ( type regular [executable ""] contents <bytes> )
    ( type symlink target <path> )
    ( type directory { entry ( name <name> node <node> ) }* )

``iter_entries`` walks that tree lazily and yields one ``NarEntry`` per
node, parents before children, without ever buffering file contents.
"""

from __future__ import annotations

import io
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Final

from narfetch.exceptions import ArchiveFormatError

NAR_MAGIC: Final[bytes] = b"nix-archive-1"

_ALIGNMENT = 8
_MAX_TOKEN_LENGTH = 4096
_DRAIN_CHUNK = 64 * 1024


class EntryKind(str, Enum):
    """Kinds of archive entries."""

    DIRECTORY = "directory"
    FILE = "file"
    EXECUTABLE = "executable"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass
class NarEntry:
    """A single archive entry.

    Attributes:
        name: Path relative to the archive root, ``""`` for the root node.
        kind: What the entry is.
        size: Content length for file entries.
        target: Link target for symlink entries.
        contents: Readable stream over the file contents. Only valid until
            the next entry is requested.
    """

    name: str
    kind: EntryKind
    size: int = 0
    target: str | None = None
    contents: BinaryIO | None = field(default=None, repr=False, compare=False)


class _ContentReader(io.RawIOBase):
    """Bounded view over the file contents of the current entry."""

    def __init__(self, stream: BinaryIO, size: int) -> None:
        super().__init__()
        self._stream = stream
        self._remaining = size

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._remaining <= 0:
            return 0
        wanted = min(len(buffer), self._remaining)
        data = self._stream.read(wanted)
        if not data:
            raise ArchiveFormatError("Archive truncated inside file contents")
        buffer[: len(data)] = data
        self._remaining -= len(data)
        return len(data)

    def drain(self) -> None:
        while self._remaining > 0:
            self.read(min(self._remaining, _DRAIN_CHUNK))


class _NarParser:
    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _read_exact(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                raise ArchiveFormatError("Unexpected end of archive")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _read_int(self) -> int:
        return int.from_bytes(self._read_exact(8), "little")

    def _skip_padding(self, size: int) -> None:
        padding = -size % _ALIGNMENT
        if padding and self._read_exact(padding) != b"\0" * padding:
            raise ArchiveFormatError("Non-zero padding in archive")

    def _read_token(self) -> bytes:
        size = self._read_int()
        if size > _MAX_TOKEN_LENGTH:
            raise ArchiveFormatError(f"Archive string too long ({size} bytes)")
        data = self._read_exact(size)
        self._skip_padding(size)
        return data

    def _expect(self, expected: bytes) -> None:
        token = self._read_token()
        if token != expected:
            raise ArchiveFormatError(f"Expected {expected!r} in archive, got {token!r}")

    def entries(self) -> Iterator[NarEntry]:
        try:
            magic = self._read_token()
        except ArchiveFormatError as exc:
            raise ArchiveFormatError("Not a NAR archive") from exc
        if magic != NAR_MAGIC:
            raise ArchiveFormatError(f"Not a NAR archive (magic {magic!r})")
        yield from self._node("")

    def _node(self, name: str) -> Iterator[NarEntry]:
        self._expect(b"(")
        self._expect(b"type")
        node_type = self._read_token()

        if node_type == b"regular":
            yield from self._regular(name)
        elif node_type == b"symlink":
            self._expect(b"target")
            raw_target = self._read_token()
            try:
                target = raw_target.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ArchiveFormatError(
                    f"Symlink target of {name!r} is not valid UTF-8"
                ) from exc
            self._expect(b")")
            yield NarEntry(name=name, kind=EntryKind.SYMLINK, target=target)
        elif node_type == b"directory":
            yield NarEntry(name=name, kind=EntryKind.DIRECTORY)
            yield from self._directory(name)
        else:
            raise ArchiveFormatError(f"Unknown node type {node_type!r}")

    def _regular(self, name: str) -> Iterator[NarEntry]:
        kind = EntryKind.FILE
        tag = self._read_token()
        if tag == b"executable":
            self._expect(b"")
            kind = EntryKind.EXECUTABLE
            tag = self._read_token()
        if tag != b"contents":
            raise ArchiveFormatError(f"Expected b'contents' in archive, got {tag!r}")

        size = self._read_int()
        contents = _ContentReader(self._stream, size)
        yield NarEntry(name=name, kind=kind, size=size, contents=contents)
        contents.drain()
        self._skip_padding(size)
        self._expect(b")")

    def _directory(self, name: str) -> Iterator[NarEntry]:
        while True:
            tag = self._read_token()
            if tag == b")":
                return
            if tag != b"entry":
                raise ArchiveFormatError(f"Expected b'entry' in archive, got {tag!r}")
            self._expect(b"(")
            self._expect(b"name")
            child = _decode_name(self._read_token())
            self._expect(b"node")
            yield from self._node(f"{name}/{child}" if name else child)
            self._expect(b")")


def _decode_name(raw: bytes) -> str:
    if raw in (b"", b".", b"..") or b"/" in raw or b"\0" in raw:
        raise ArchiveFormatError(f"Unsafe entry name {raw!r} in archive")
    return os.fsdecode(raw)


def iter_entries(stream: BinaryIO) -> Iterator[NarEntry]:
    """Lazily yield the entries of the NAR read from ``stream``.

    The iterator is single-pass. File contents must be read from
    ``NarEntry.contents`` before advancing; anything left unread is skipped.

    NAR has only regular, symlink and directory nodes. Any other node type
    is fatal, so this reader never yields ``EntryKind.OTHER``; that kind is
    only for entries built by other producers.

    Raises:
        ArchiveFormatError: If the stream is not a well-formed NAR, including
            an unknown node type.
    """
    return _NarParser(stream).entries()
