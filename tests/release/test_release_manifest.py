# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for building, writing and loading info.json.
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from relpack.release.manifest import (
    ReleaseArtifact,
    build_manifest,
    format_timestamp,
    load_manifest,
    manifest_to_dict,
    write_manifest,
)

_ARTIFACTS = [
    ReleaseArtifact(name="core.zip", sha512="A" * 86 + "==", size_bytes=2048),
    ReleaseArtifact(name="plugin-a.zip", sha512="B" * 86 + "==", size_bytes=512),
]


def test_build_manifest_keeps_artifact_order():
    now = datetime(2026, 10, 17, 8, 30, 0, 123456, tzinfo=timezone.utc)
    manifest = build_manifest("1.2.0", _ARTIFACTS, now=now)

    assert manifest.version == "1.2.0"
    assert [a.name for a in manifest.files] == ["core.zip", "plugin-a.zip"]
    assert manifest.release_date == "2026-10-17T08:30:00.123Z"


def test_build_manifest_defaults_to_current_time():
    before = datetime.now(tz=timezone.utc).replace(microsecond=0)
    manifest = build_manifest("1.2.0", _ARTIFACTS)
    stamp = datetime.strptime(manifest.release_date, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)
    assert before <= stamp <= datetime.now(tz=timezone.utc)


def test_timestamp_is_normalized_to_utc():
    moment = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=8)))
    assert format_timestamp(moment) == "2026-01-01T04:00:00.000Z"


def test_naive_timestamp_is_treated_as_utc():
    assert format_timestamp(datetime(2026, 1, 1)) == "2026-01-01T00:00:00.000Z"


def test_dict_shape_matches_info_json_format():
    manifest = build_manifest("1.2.0", _ARTIFACTS[:1], now=datetime(2026, 1, 1, tzinfo=timezone.utc))
    assert manifest_to_dict(manifest) == {
        "version": "1.2.0",
        "files": [{"url": "core.zip", "sha512": "A" * 86 + "==", "size": 2048}],
        "releaseDate": "2026-01-01T00:00:00.000Z",
    }


def test_write_manifest_produces_indented_json(tmp_path: Path):
    manifest = build_manifest("1.2.0", _ARTIFACTS)
    path = write_manifest(manifest, tmp_path / "info.json")

    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "version": "1.2.0"')
    data = json.loads(text)
    assert list(data.keys()) == ["version", "files", "releaseDate"]
    assert data["files"][1] == {"url": "plugin-a.zip", "sha512": "B" * 86 + "==", "size": 512}
    assert not list(tmp_path.glob(".relpack_tmp_*"))


def test_load_manifest_reads_back_written_file(tmp_path: Path):
    manifest = build_manifest("1.2.0", _ARTIFACTS)
    write_manifest(manifest, tmp_path / "info.json")
    assert load_manifest(tmp_path / "info.json") == manifest


def test_load_manifest_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_manifest(tmp_path / "info.json")


def test_load_manifest_missing_fields(tmp_path: Path):
    path = tmp_path / "info.json"
    path.write_text(json.dumps({"version": "1.0.0", "files": []}), encoding="utf-8")
    with pytest.raises(ValueError, match="releaseDate"):
        load_manifest(path)


def test_load_manifest_incomplete_file_entry(tmp_path: Path):
    path = tmp_path / "info.json"
    path.write_text(
        json.dumps({"version": "1.0.0", "files": [{"url": "a.zip"}], "releaseDate": "x"}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match="entry 0"):
        load_manifest(path)


@pytest.mark.parametrize(
    "files, message",
    [
        (5, "must be a list"),
        (["core.zip"], "entry 0 must be an object"),
        ([{"url": "a.zip", "sha512": "x", "size": "big"}], "non-integer size"),
    ],
)
def test_load_manifest_rejects_malformed_files(tmp_path: Path, files, message):
    path = tmp_path / "info.json"
    path.write_text(
        json.dumps({"version": "1.0.0", "files": files, "releaseDate": "x"}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError, match=message):
        load_manifest(path)
