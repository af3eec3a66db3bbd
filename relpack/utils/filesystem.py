# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers for relpack.

The manifest is the single source of truth for what was published, so it is
written atomically: a crash mid-write leaves a stray temp file behind, never a
truncated info.json.
"""

import os
import tempfile
from pathlib import Path

_DEFAULT_FILE_MODE = 0o666


def _current_umask() -> int:
    # os.umask can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return mask


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write content to a file atomically.

    The content goes to a temp file in the target's directory first and is
    then renamed over the target. Rename within one filesystem is atomic on
    POSIX, and writing next to the target guarantees the same filesystem.

    The final file gets the same permissions a plain open() would give it
    (0o666 minus the umask), not the owner-only mode of the temp file.

    Args:
        target_path: Where the final file should end up.
        content: The string content to write.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False so the file survives close() and can be renamed.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=".relpack_tmp_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        os.chmod(temp_path, _DEFAULT_FILE_MODE & ~_current_umask())
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise
