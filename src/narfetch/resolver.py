"""Locate NAR archives in an ordered list of binary caches."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from narfetch.exceptions import InvalidNarInfoError, ResolutionExhaustedError
from narfetch.http_utils import get
from narfetch.schemas import ArchiveLocation, NarInfo

logger = logging.getLogger(__name__)

_SEPARATOR = ": "

_FIELD_NAMES = {
    "StorePath": "store_path",
    "URL": "url",
    "Compression": "compression",
    "FileHash": "file_hash",
    "FileSize": "file_size",
    "NarHash": "nar_hash",
    "NarSize": "nar_size",
    "Deriver": "deriver",
}


def parse_narinfo(text: str) -> NarInfo:
    """Parse every ``key: value`` line of a narinfo document.

    Lines without a ``": "`` separator are ignored. Unrecognized keys are
    kept verbatim in ``NarInfo.extra``.
    """
    fields: dict[str, object] = {}
    references: list[str] = []
    sigs: list[str] = []
    extra: dict[str, str] = {}

    for line in text.splitlines():
        key, sep, value = line.partition(_SEPARATOR)
        if not sep:
            continue
        if key == "References":
            references.extend(value.split())
        elif key == "Sig":
            sigs.append(value)
        elif key in _FIELD_NAMES:
            fields[_FIELD_NAMES[key]] = value
        else:
            extra[key] = value

    try:
        return NarInfo(**fields, references=references, sigs=sigs, extra=extra)
    except ValueError as exc:
        raise InvalidNarInfoError(f"Invalid narinfo: {exc}") from exc


def archive_path_from_narinfo(text: str) -> str:
    """Return the archive path carried on the second narinfo line.

    Raises:
        InvalidNarInfoError: If the second line is missing or has no
            ``": "`` separator.
    """
    lines = text.split("\n")
    if len(lines) < 2:
        raise InvalidNarInfoError("narinfo has fewer than two lines")
    _, sep, value = lines[1].partition(_SEPARATOR)
    if not sep:
        raise InvalidNarInfoError(f"Malformed narinfo line: {lines[1]!r}")
    return value.strip()


class CacheResolver:
    """Resolve store hashes against binary caches, first hit wins."""

    def __init__(self, caches: Sequence[str], *, client: httpx.Client) -> None:
        self._caches = tuple(caches)
        self._client = client

    @property
    def caches(self) -> tuple[str, ...]:
        return self._caches

    def resolve(self, identifier: str) -> ArchiveLocation:
        """Find the archive URL for ``identifier``.

        Caches are queried in order and the first 2xx narinfo answer is used;
        later caches are not contacted.

        Raises:
            ResolutionExhaustedError: If no cache has the narinfo.
            TransportError: If a request fails at the network level. The
                remaining caches are not tried.
            InvalidNarInfoError: If the answering cache sent no usable
                archive path on the second line.
        """
        for cache in self._caches:
            narinfo_url = f"{cache}{identifier}.narinfo"
            response = get(narinfo_url, client=self._client)

            if not response.is_success:
                logger.debug(
                    "Cache miss for %s (HTTP %d)", narinfo_url, response.status_code
                )
                continue

            text = response.text
            archive_url = cache + archive_path_from_narinfo(text)
            try:
                narinfo: NarInfo | None = parse_narinfo(text)
            except InvalidNarInfoError as exc:
                # Only the archive path is required; the rest is informational.
                logger.warning("Ignoring unparsable fields in %s: %s", narinfo_url, exc)
                narinfo = None

            location = ArchiveLocation(
                identifier=identifier,
                cache=cache,
                url=archive_url,
                narinfo=narinfo,
            )
            logger.info("Found %s in %s: %s", identifier, cache, location.url)
            return location

        raise ResolutionExhaustedError(identifier, self._caches)
