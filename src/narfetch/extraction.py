"""Materialize archive entries on disk."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from narfetch.exceptions import FilesystemError
from narfetch.nar import EntryKind, NarEntry

logger = logging.getLogger(__name__)

_EXECUTABLE_MODE = 0o755


@dataclass
class ExtractionStats:
    """Counts of what an extraction did.

    Attributes:
        directories: Directory entries created.
        files: File and executable entries written.
        references: Symlink entries followed into other archives.
        skipped: Entries of unknown kind that were ignored.
    """

    directories: int = 0
    files: int = 0
    references: int = 0
    skipped: int = 0


def ensure_directory(path: Path) -> None:
    """Create ``path`` and its parents unless it already is a directory.

    Raises:
        FilesystemError: If ``path`` exists as something other than a
            directory, or cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(
            f"{exc.strerror or exc} when creating dir {path}",
            path=path,
            errno=exc.errno,
        ) from exc


def write_file(path: Path, entry: NarEntry) -> None:
    """Write the contents of a file entry to ``path`` in one pass."""
    try:
        with path.open("wb") as handle:
            if entry.contents is not None:
                shutil.copyfileobj(entry.contents, handle)
        if entry.kind is EntryKind.EXECUTABLE:
            path.chmod(_EXECUTABLE_MODE)
    except OSError as exc:
        raise FilesystemError(
            f"{exc.strerror or exc} when writing file {path}",
            path=path,
            errno=exc.errno,
        ) from exc


def extract_entries(
    entries: Iterable[NarEntry],
    destination: Path,
    *,
    follow_reference: Callable[[str], object],
) -> ExtractionStats:
    """Extract ``entries`` under ``destination`` in stream order.

    Symlinks are not recreated. Their target is handed to
    ``follow_reference``, which runs to completion before the next entry
    is read; its exceptions propagate unchanged.

    Args:
        entries: Single-pass entry iterator.
        destination: Root directory for this archive; created first.
        follow_reference: Called with the target of every symlink entry.

    Returns:
        Counts of the processed entries.
    """
    stats = ExtractionStats()
    ensure_directory(destination)

    for entry in entries:
        path = destination / entry.name if entry.name else destination

        if entry.kind is EntryKind.DIRECTORY:
            logger.info("Creating %s", path)
            ensure_directory(path)
            stats.directories += 1
        elif entry.kind in (EntryKind.FILE, EntryKind.EXECUTABLE):
            if not entry.name:
                # A store path that is a single file.
                path = destination / destination.name
            logger.info("Extracting file %s to %s", entry.name or "<root>", path)
            write_file(path, entry)
            stats.files += 1
        elif entry.kind is EntryKind.SYMLINK and entry.target is not None:
            logger.info("Symlink %s -> %s, following", entry.name or "<root>", entry.target)
            follow_reference(entry.target)
            stats.references += 1
        else:
            logger.warning(
                "Unknown entry type %s for %s, skipping",
                entry.kind.value,
                entry.name or "<root>",
            )
            stats.skipped += 1

    return stats
