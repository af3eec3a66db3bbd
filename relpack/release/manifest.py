# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release manifest generation.

The manifest (info.json) is the single record of what a release contains.
Downstream updaters read it to find each archive and check its integrity:

    {
      "version": "1.2.0",
      "files": [
        {"url": "core.zip", "sha512": "<base64>", "size": 12345}
      ],
      "releaseDate": "2026-10-17T08:30:00.000Z"
    }

`files` keeps the order in which folders were archived. Building the manifest
is pure: it trusts the artifacts it is given and never touches the disk.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from relpack.utils.filesystem import atomic_write

_logger: logging.Logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "info.json"

_REQUIRED_MANIFEST_FIELDS: frozenset[str] = frozenset({"version", "files", "releaseDate"})
_REQUIRED_FILE_FIELDS: frozenset[str] = frozenset({"url", "sha512", "size"})


@dataclass(frozen=True)
class ReleaseArtifact:
    """One compressed component: its file name, base64 SHA-512 and size in bytes."""

    name: str
    sha512: str
    size_bytes: int


@dataclass(frozen=True)
class ReleaseManifest:
    """Everything a release contains, plus when it was built."""

    version: str
    files: tuple[ReleaseArtifact, ...]
    release_date: str


def format_timestamp(moment: datetime) -> str:
    """
    ISO 8601 in UTC with millisecond precision and a trailing "Z".

    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_manifest(
    version: str,
    artifacts: Sequence[ReleaseArtifact],
    now: Optional[datetime] = None,
) -> ReleaseManifest:
    """
    Assemble the manifest for a release.

    Args:
        version: Release version string.
        artifacts: Artifacts in the order they were produced.
        now: Release timestamp. Defaults to the current UTC time.

    Returns:
        Frozen ReleaseManifest.
    """
    if now is None:
        now = datetime.now(tz=timezone.utc)

    return ReleaseManifest(
        version=version,
        files=tuple(artifacts),
        release_date=format_timestamp(now),
    )


def manifest_to_dict(manifest: ReleaseManifest) -> dict[str, Any]:
    """Convert a manifest to the exact JSON shape consumers expect."""
    return {
        "version": manifest.version,
        "files": [
            {"url": artifact.name, "sha512": artifact.sha512, "size": artifact.size_bytes}
            for artifact in manifest.files
        ],
        "releaseDate": manifest.release_date,
    }


def write_manifest(manifest: ReleaseManifest, path: Path) -> Path:
    """
    Serialize a manifest to JSON (2-space indent) and write it atomically.

    Returns:
        The path written, for chaining.
    """
    content = json.dumps(manifest_to_dict(manifest), indent=2)
    atomic_write(path, content)

    _logger.info(
        "Manifest written",
        extra={"path": str(path), "version": manifest.version, "file_count": len(manifest.files)},
    )
    return path


def load_manifest(path: Path) -> ReleaseManifest:
    """
    Load a manifest previously written by write_manifest.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON is invalid or required fields are missing.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Manifest file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as err:
        raise ValueError(f"Invalid JSON in manifest {path}: {err}") from err

    if not isinstance(data, dict):
        raise ValueError(f"Manifest {path} must contain a JSON object")

    missing = _REQUIRED_MANIFEST_FIELDS - set(data.keys())
    if missing:
        raise ValueError(f"Manifest is missing required fields: {', '.join(sorted(missing))}")

    if not isinstance(data["files"], list):
        raise ValueError(f"Manifest {path}: 'files' must be a list")

    artifacts: list[ReleaseArtifact] = []
    for index, entry in enumerate(data["files"]):
        if not isinstance(entry, dict):
            raise ValueError(f"Manifest entry {index} must be an object")
        missing = _REQUIRED_FILE_FIELDS - set(entry.keys())
        if missing:
            raise ValueError(
                f"Manifest entry {index} is missing fields: {', '.join(sorted(missing))}"
            )
        try:
            size_bytes = int(entry["size"])
        except (TypeError, ValueError) as err:
            raise ValueError(f"Manifest entry {index} has a non-integer size: {entry['size']!r}") from err
        artifacts.append(
            ReleaseArtifact(
                name=str(entry["url"]),
                sha512=str(entry["sha512"]),
                size_bytes=size_bytes,
            )
        )

    return ReleaseManifest(
        version=str(data["version"]),
        files=tuple(artifacts),
        release_date=str(data["releaseDate"]),
    )
