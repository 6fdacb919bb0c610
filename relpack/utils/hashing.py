# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for relpack.

Every archive ships with a SHA-256 checksum, so these helpers are used both
when writing the checksum file and when verifying an archive later.
"""

import hashlib
import re
from pathlib import Path

_CHUNK_SIZE = 64 * 1024
_SHA256_HEX = re.compile(r"[0-9a-fA-F]{64}")


def compute_sha256(file_path: Path) -> str:
    """
    Lowercase hex SHA256 of a file, read in fixed-size chunks.

    Raises:
        OSError: The file is missing or unreadable.
    """
    digest = hashlib.sha256()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def is_sha256_hex(value: str) -> bool:
    """True if value is exactly 64 hex digits, either case."""
    return _SHA256_HEX.fullmatch(value) is not None
