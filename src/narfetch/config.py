"""Local configuration for narfetch."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

DEFAULT_RESULTS_DIR = "result"
DEFAULT_FETCH_TIMEOUT_S = 30.0
DEFAULT_USER_AGENT = "narfetch/0.1"
DEFAULT_LOG_LEVEL = "INFO"

# Queried in order; the first cache with a narinfo wins.
BINARY_CACHES: Final[tuple[str, ...]] = (
    "https://cache.nixos.org/",
    "https://sisyphe.cachix.org/",
    "https://bincache.grunblatt.org/",
)

# Extracted archives land in <results>/<hash>, relative to the working directory.
NARFETCH_RESULTS_PATH = Path(os.getenv("NARFETCH_RESULTS_PATH", DEFAULT_RESULTS_DIR)).expanduser()
NARFETCH_FETCH_TIMEOUT_S = float(os.getenv("NARFETCH_FETCH_TIMEOUT_S", str(DEFAULT_FETCH_TIMEOUT_S)))
NARFETCH_USER_AGENT = os.getenv("NARFETCH_USER_AGENT", DEFAULT_USER_AGENT)
NARFETCH_LOG_LEVEL = os.getenv("NARFETCH_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
