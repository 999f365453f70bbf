"""Resolve, download and extract store paths, following symlinked references."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import httpx

from narfetch.config import BINARY_CACHES, NARFETCH_RESULTS_PATH
from narfetch.exceptions import NoIdentifierFoundError
from narfetch.extraction import extract_entries
from narfetch.fetch import open_archive
from narfetch.http_utils import build_client
from narfetch.identifiers import extract_identifier
from narfetch.resolver import CacheResolver

logger = logging.getLogger(__name__)


@dataclass
class FetchOptions:
    """Options for fetching store paths.

    Attributes:
        strict_references: If True, a symlink whose target holds no store
            hash aborts the extraction. If False it is logged and skipped.
    """

    strict_references: bool = True


class NarFetcher:
    """Run the resolve/download/extract pipeline for store references.

    Symlink entries re-enter ``fetch`` for their target, depth first, so a
    single call materializes the whole chain of referenced archives. Each
    archive is extracted into its own ``<results_dir>/<hash>`` directory.
    """

    def __init__(
        self,
        *,
        client: httpx.Client,
        caches: Sequence[str] = BINARY_CACHES,
        results_dir: Path | None = None,
        options: FetchOptions | None = None,
    ) -> None:
        self._client = client
        self._resolver = CacheResolver(caches, client=client)
        self._results_dir = results_dir if results_dir is not None else NARFETCH_RESULTS_PATH
        self._options = options or FetchOptions()
        # Hashes currently being extracted further up the recursion.
        self._in_progress: list[str] = []

    @property
    def results_dir(self) -> Path:
        return self._results_dir

    def fetch(self, path_or_hash: str) -> Path:
        """Fetch the archive named by ``path_or_hash`` and extract it.

        Returns:
            The destination directory of this archive.

        Raises:
            NarfetchError: Any failure in this archive or in an archive
                reached through its symlinks.
        """
        identifier = extract_identifier(path_or_hash)
        destination = self._results_dir / identifier

        if identifier in self._in_progress:
            logger.warning(
                "Reference cycle through %s (chain %s), not re-entering",
                identifier,
                " -> ".join(self._in_progress),
            )
            return destination

        self._in_progress.append(identifier)
        try:
            location = self._resolver.resolve(identifier)
            with open_archive(location, client=self._client) as entries:
                stats = extract_entries(
                    entries, destination, follow_reference=self._follow_reference
                )
        finally:
            self._in_progress.pop()

        logger.info(
            "Extracted %s to %s (%d directories, %d files, %d references, %d skipped)",
            identifier,
            destination,
            stats.directories,
            stats.files,
            stats.references,
            stats.skipped,
        )
        return destination

    def _follow_reference(self, target: str) -> None:
        if not self._options.strict_references:
            try:
                extract_identifier(target)
            except NoIdentifierFoundError:
                logger.warning("Symlink target %r names no store path, skipping", target)
                return
        self.fetch(target)


def fetch_store_path(
    path_or_hash: str,
    *,
    caches: Sequence[str] = BINARY_CACHES,
    results_dir: Path | None = None,
    options: FetchOptions | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Path:
    """Fetch and extract ``path_or_hash`` and everything its symlinks reference.

    Args:
        path_or_hash: Store path or bare 32-character hash.
        caches: Binary cache base URLs, in priority order.
        results_dir: Parent of the per-hash destination directories.
        options: Fetch options. Uses defaults if None.
        transport: Optional httpx transport override.

    Returns:
        The destination directory of the root archive.
    """
    with build_client(transport=transport) as client:
        fetcher = NarFetcher(
            client=client, caches=caches, results_dir=results_dir, options=options
        )
        return fetcher.fetch(path_or_hash)
