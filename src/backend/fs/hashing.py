"""
Content hashing utilities for media deduplication.

Uses SHA-256 for content hashing. Digests are always 64 lowercase hex
characters and are what `manifest.json` records under `sha256`.
"""

from __future__ import annotations

import hashlib


# Hash algorithm to use
HASH_ALGORITHM = "sha256"

# Length of a hex digest produced by HASH_ALGORITHM
HASH_HEX_LENGTH = 64


def compute_bytes_hash(data: bytes) -> str:
    """
    Compute the SHA-256 hash of bytes.

    Args:
        data: The bytes to hash.

    Returns:
        Lowercase hexadecimal hash string.
    """
    return hashlib.new(HASH_ALGORITHM, data).hexdigest()


def is_valid_hash(value: object) -> bool:
    """True if value looks like a SHA-256 hex digest (any case)."""
    if not isinstance(value, str) or len(value) != HASH_HEX_LENGTH:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True
