# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Archiver: compresses one component folder into a zip file.

Entries are stored relative to the folder itself (no wrapping directory), so
extracting core.zip puts core's contents straight into the target directory.

The archive is deterministic: entries are written in sorted order with a fixed
timestamp, so zipping the same tree twice gives byte-identical files and
therefore identical SHA-512 values in the manifest.
"""

import logging
import os
import zipfile
from pathlib import Path

from relpack.release.exceptions import ArchiveError

_logger: logging.Logger = logging.getLogger(__name__)

COMPRESSION = zipfile.ZIP_DEFLATED
COMPRESS_LEVEL = 9

# Earliest timestamp the zip format can represent.
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _iter_entries(source_dir: Path) -> list[Path]:
    """Every file and directory under source_dir, sorted by relative POSIX path."""
    return sorted(source_dir.rglob("*"), key=lambda p: p.relative_to(source_dir).as_posix())


def _zip_info(arcname: str, mode: int, is_dir: bool) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(arcname, date_time=FIXED_DATE_TIME)
    info.create_system = 3  # unix, so external_attr carries st_mode
    if is_dir:
        info.external_attr = ((0o40000 | (mode & 0o7777)) << 16) | 0x10
        info.compress_type = zipfile.ZIP_STORED
    else:
        info.external_attr = (0o100000 | (mode & 0o7777)) << 16
        info.compress_type = COMPRESSION
    return info


def _write_entries(archive: zipfile.ZipFile, source_dir: Path) -> int:
    count = 0
    for entry in _iter_entries(source_dir):
        rel = entry.relative_to(source_dir).as_posix()
        mode = entry.stat().st_mode

        if entry.is_dir():
            archive.writestr(_zip_info(rel + "/", mode, is_dir=True), b"")
        elif entry.is_file():
            # writestr applies compresslevel to a caller-built ZipInfo; open(info, "w") does not.
            archive.writestr(
                _zip_info(rel, mode, is_dir=False),
                entry.read_bytes(),
                compress_type=COMPRESSION,
                compresslevel=COMPRESS_LEVEL,
            )
        else:
            _logger.warning("Skipping special file", extra={"path": str(entry)})
            continue
        count += 1
    return count


def zip_folder(source_dir: Path, output_path: Path) -> Path:
    """
    Compress a directory tree into a zip at maximum DEFLATE compression.

    Returns only after the archive has been fully written and closed.

    Args:
        source_dir: Folder whose contents become the archive's root.
        output_path: Destination zip file. Overwritten if it exists.

    Returns:
        output_path, for chaining.

    Raises:
        ArchiveError: If the source isn't a directory or any read/write fails.
            A partially written output_path may be left behind.
    """
    if not source_dir.is_dir():
        raise ArchiveError(f"Source directory not found: {source_dir}")

    try:
        with zipfile.ZipFile(
            output_path, "w", compression=COMPRESSION, compresslevel=COMPRESS_LEVEL
        ) as archive:
            entry_count = _write_entries(archive, source_dir)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as err:
        raise ArchiveError(f"Failed to archive {source_dir} into {output_path}: {err}") from err

    _logger.info(
        "Archive created",
        extra={
            "source": os.fspath(source_dir),
            "archive": output_path.name,
            "entries": entry_count,
        },
    )
    return output_path
