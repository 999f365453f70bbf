"""Extract store hashes from paths and bare hashes."""

from __future__ import annotations

import re
from typing import Final

from narfetch.exceptions import NoIdentifierFoundError

HASH_LENGTH: Final[int] = 32

# The leading ``.*`` is greedy, so the last 32-character run in the string wins.
_HASH_RE = re.compile(rf".*/?(?P<hash>[a-zA-Z0-9]{{{HASH_LENGTH}}})-?.*")


def extract_identifier(text: str) -> str:
    """Return the store hash contained in ``text``.

    Accepts bare hashes (``0c0bdy8k...``), store paths
    (``/nix/store/0c0bdy8k...-hello-2.12``) and anything in between.

    Raises:
        NoIdentifierFoundError: If ``text`` holds no 32-character run.
    """
    match = _HASH_RE.search(text)
    if match is None:
        raise NoIdentifierFoundError(text)
    return match.group("hash")
