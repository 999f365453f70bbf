"""HTTP utilities shared by the resolver and the archive fetcher."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Final

import httpx

from narfetch.config import NARFETCH_FETCH_TIMEOUT_S, NARFETCH_USER_AGENT
from narfetch.exceptions import TransportError

_MAX_REDIRECTS: Final[int] = 5


def build_client(*, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Create the client used for every request of one fetch run.

    Args:
        transport: Optional transport override, mainly for tests.
    """
    return httpx.Client(
        timeout=httpx.Timeout(NARFETCH_FETCH_TIMEOUT_S),
        headers={"User-Agent": NARFETCH_USER_AGENT},
        follow_redirects=True,
        max_redirects=_MAX_REDIRECTS,
        transport=transport,
    )


def get(url: str, *, client: httpx.Client) -> httpx.Response:
    """GET ``url`` and return the response whatever its status.

    Raises:
        TransportError: On any network-level failure. Nothing is retried.
    """
    try:
        return client.get(url)
    except httpx.HTTPError as exc:
        raise TransportError(f"Request to {url} failed: {exc}") from exc


@contextmanager
def stream(url: str, *, client: httpx.Client) -> Iterator[httpx.Response]:
    """Open a streaming GET; the response is closed when the block exits.

    Transport failures while connecting or while reading the body are
    raised as ``TransportError``.
    """
    try:
        with client.stream("GET", url) as response:
            yield response
    except httpx.HTTPError as exc:
        raise TransportError(f"Streaming {url} failed: {exc}") from exc
