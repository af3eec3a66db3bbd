# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for folder archiving.

The important property is the round trip: extracting the zip must reproduce
the source tree exactly, with no wrapping directory.
"""

import zipfile
from pathlib import Path

import pytest

from relpack.release.archiver import COMPRESS_LEVEL, zip_folder
from relpack.release.exceptions import ArchiveError


def _tree(root: Path) -> dict[str, bytes | None]:
    """Relative path -> bytes for files, None for directories."""
    result: dict[str, bytes | None] = {}
    for path in root.rglob("*"):
        rel = path.relative_to(root).as_posix()
        result[rel] = path.read_bytes() if path.is_file() else None
    return result


def test_round_trip_reproduces_source_tree(release_project: Path, tmp_path: Path):
    source = release_project / "src" / "files" / "core"
    archive = zip_folder(source, tmp_path / "core.zip")

    extracted = tmp_path / "extracted"
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(extracted)

    assert _tree(extracted) == _tree(source)


def test_entries_have_no_wrapper_directory(release_project: Path, tmp_path: Path):
    source = release_project / "src" / "files" / "core"
    archive = zip_folder(source, tmp_path / "core.zip")

    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()

    assert "manifest.txt" in names
    assert "lib/engine.bin" in names
    assert "empty/" in names
    assert not any(name.startswith("core/") for name in names)


def test_files_use_deflate(release_project: Path, tmp_path: Path):
    source = release_project / "src" / "files" / "core"
    archive = zip_folder(source, tmp_path / "core.zip")

    with zipfile.ZipFile(archive) as zf:
        info = zf.getinfo("lib/engine.bin")

    assert info.compress_type == zipfile.ZIP_DEFLATED
    # 16 KiB of a repeating 256-byte pattern compresses to a small fraction
    assert info.compress_size < info.file_size // 10
    assert COMPRESS_LEVEL == 9


def test_same_tree_gives_identical_bytes(release_project: Path, tmp_path: Path):
    source = release_project / "src" / "files" / "core"
    first = zip_folder(source, tmp_path / "a.zip")
    second = zip_folder(source, tmp_path / "b.zip")
    assert first.read_bytes() == second.read_bytes()


def test_entries_are_sorted(tmp_path: Path):
    source = tmp_path / "src"
    source.mkdir()
    for name in ["zeta.txt", "alpha.txt", "mid.txt"]:
        (source / name).write_text(name)

    archive = zip_folder(source, tmp_path / "out.zip")
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["alpha.txt", "mid.txt", "zeta.txt"]


def test_existing_output_is_overwritten(release_project: Path, tmp_path: Path):
    output = tmp_path / "plugin-a.zip"
    output.write_bytes(b"stale")

    zip_folder(release_project / "src" / "files" / "plugin-a", output)

    with zipfile.ZipFile(output) as zf:
        assert zf.namelist() == ["plugin.json"]


def test_missing_source_raises_archive_error(tmp_path: Path):
    with pytest.raises(ArchiveError, match="not found"):
        zip_folder(tmp_path / "missing", tmp_path / "out.zip")


def test_unwritable_destination_raises_archive_error(release_project: Path, tmp_path: Path):
    with pytest.raises(ArchiveError):
        zip_folder(release_project / "src" / "files" / "core", tmp_path / "no" / "such" / "dir.zip")
