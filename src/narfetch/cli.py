"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from narfetch.config import NARFETCH_LOG_LEVEL
from narfetch.exceptions import NarfetchError
from narfetch.pipeline import fetch_store_path

logger = logging.getLogger("narfetch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="narfetch",
        description="Download a Nix store path from binary caches and extract it.",
    )
    parser.add_argument(
        "path_or_hash",
        help="Store path (e.g. /nix/store/<hash>-name) or bare 32-character hash",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=NARFETCH_LOG_LEVEL, format="%(message)s")

    try:
        destination = fetch_store_path(args.path_or_hash)
    except NarfetchError as exc:
        logger.error("narfetch: %s", exc)
        return 1

    logger.info("Done: %s", destination)
    return 0
