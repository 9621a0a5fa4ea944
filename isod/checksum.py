"""File checksum calculation and verification."""

from __future__ import annotations

import hashlib
from enum import Enum
from pathlib import Path

_CHUNK_SIZE = 8192


class ChecksumType(Enum):
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"


def calculate_checksum(file_path: str | Path, checksum_type: ChecksumType) -> str:
    """Return the lowercase hex digest of a file."""
    hasher = hashlib.new(checksum_type.value)
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def verify_file(
    file_path: str | Path, expected_checksum: str, checksum_type: ChecksumType
) -> bool:
    """Compare a file's digest with an expected one, ignoring case."""
    actual = calculate_checksum(file_path, checksum_type)
    return actual.lower() == expected_checksum.lower()