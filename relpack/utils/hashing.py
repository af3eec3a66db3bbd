# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for relpack.

Release artifacts are described in the manifest by a base64-encoded SHA-512
digest and a byte size. These helpers compute both. They are pure reads:
nothing is cached and nothing is compared against previous releases.
"""

import base64
import hashlib
from pathlib import Path

HASH_ALGORITHM = "sha512"
HASH_BUFFER_SIZE = 65536  # 64 KiB


def compute_sha512_base64(file_path: Path) -> str:
    """
    Compute the base64-encoded SHA-512 digest of a file.

    Reads the file in 64 KiB chunks so large archives never have to fit in
    memory. The result is always 88 characters long (64 raw bytes, padded).

    Args:
        file_path: Path to the file to hash.

    Returns:
        Standard base64 string of the SHA-512 digest.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If the file can't be read.
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(HASH_BUFFER_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return base64.b64encode(hasher.digest()).decode("ascii")


def file_size(file_path: Path) -> int:
    """Return the size of a file in bytes."""
    return file_path.stat().st_size
