"""Tests for store hash extraction."""

from __future__ import annotations

import pytest

from narfetch.exceptions import MalformedReferenceError, NoIdentifierFoundError
from narfetch.identifiers import HASH_LENGTH, extract_identifier

HASH_A = "7a2b9kqlzsxpvdgrcwy0f3n4m5j6h8i1"
HASH_B = "p0q1r2s3t4u5v6w7x8y9z0a1b2c3d4e5"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (HASH_A, HASH_A),
        (f"/nix/store/{HASH_A}-hello-2.12", HASH_A),
        (f"{HASH_A}-hello", HASH_A),
        (f"../../{HASH_A}-glibc-2.38/lib/libc.so.6", HASH_A),
        (f"/nix/store/{HASH_A}", HASH_A),
    ],
)
def test_extracts_hash(text: str, expected: str) -> None:
    assert extract_identifier(text) == expected


def test_hash_constant_length() -> None:
    assert HASH_LENGTH == 32
    assert len(HASH_A) == HASH_LENGTH


def test_last_run_wins() -> None:
    """The greedy prefix makes the last eligible run the hash."""
    assert extract_identifier(f"/nix/store/{HASH_A}-{HASH_B}") == HASH_B


def test_longer_run_yields_trailing_32_characters() -> None:
    assert extract_identifier("abcdefgh" + HASH_A) == HASH_A


def test_is_case_sensitive() -> None:
    mixed = "AbCdEfGhIjKlMnOpQrStUvWxYz012345"
    assert extract_identifier(f"/nix/store/{mixed}-x") == mixed


@pytest.mark.parametrize(
    "text",
    ["not-a-hash", "", "/nix/store/", "a" * 31, f"/nix/store/{HASH_A[:20]}-short"],
)
def test_rejects_input_without_hash(text: str) -> None:
    with pytest.raises(NoIdentifierFoundError, match="No store hash"):
        extract_identifier(text)


def test_no_identifier_is_a_malformed_reference() -> None:
    with pytest.raises(MalformedReferenceError) as exc_info:
        extract_identifier("not-a-hash")
    assert exc_info.value.text == "not-a-hash"
