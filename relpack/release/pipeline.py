# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release pipeline: the end-to-end packaging run.

    resolve version
      → create <dist_root>/<version>/
      → for each folder under <source_root>, in name order:
            zip it, hash it, measure it
      → write info.json
      → hand everything to the publisher (if any)

Folders are processed one at a time; each archive is closed before the next
one starts. Any local failure (bad metadata, nothing to package, a broken
archive) propagates to the caller and ends the run. The publisher handles its
own failures, so once this function reaches the publishing step the local
release is already final.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from relpack.release.archiver import zip_folder
from relpack.release.exceptions import NoSourceFoldersError
from relpack.release.manifest import (
    MANIFEST_FILENAME,
    ReleaseArtifact,
    ReleaseManifest,
    build_manifest,
    write_manifest,
)
from relpack.release.publisher import Publisher, RemoteRelease
from relpack.release.version import resolve_version
from relpack.utils.filesystem import ensure_directory
from relpack.utils.hashing import compute_sha512_base64, file_size

_logger: logging.Logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class ReleaseSettings:
    """Filesystem layout for one run, all paths already resolved."""

    metadata_file: Path = Path("package.json")
    source_root: Path = Path("src/files")
    dist_root: Path = Path("dist")
    manifest_name: str = MANIFEST_FILENAME


@dataclass(frozen=True)
class ReleaseResult:
    """Outcome of a successful run."""

    version: str
    output_dir: Path
    manifest_path: Path
    manifest: ReleaseManifest
    remote_release: Optional[RemoteRelease] = None

    @property
    def published(self) -> bool:
        return self.remote_release is not None


def discover_folders(source_root: Path) -> list[Path]:
    """
    List the component folders to package: immediate subdirectories, sorted by name.

    Raises:
        NoSourceFoldersError: If source_root is missing or has no subdirectories.
    """
    if not source_root.is_dir():
        raise NoSourceFoldersError(f"Source directory not found: {source_root}")

    folders = sorted((p for p in source_root.iterdir() if p.is_dir()), key=lambda p: p.name)
    if not folders:
        raise NoSourceFoldersError(f"No folders found in {source_root}, nothing to release")
    return folders


def output_dir_for(settings: ReleaseSettings, version: str) -> Path:
    return settings.dist_root / version


def package_folder(source_dir: Path, output_dir: Path) -> ReleaseArtifact:
    """Zip one component folder into output_dir and describe the result."""
    archive_name = f"{source_dir.name}.zip"
    archive_path = zip_folder(source_dir, output_dir / archive_name)

    artifact = ReleaseArtifact(
        name=archive_name,
        sha512=compute_sha512_base64(archive_path),
        size_bytes=file_size(archive_path),
    )
    _logger.info(
        "Artifact ready",
        extra={
            "file": artifact.name,
            "size_bytes": artifact.size_bytes,
            "size_mb": round(artifact.size_bytes / _BYTES_PER_MB, 2),
            "sha512": artifact.sha512,
        },
    )
    return artifact


def run_release(settings: ReleaseSettings, publisher: Optional[Publisher] = None) -> ReleaseResult:
    """
    Package every component folder and write the release manifest.

    Args:
        settings: Input and output locations.
        publisher: Optional publisher invoked after the manifest is written.

    Returns:
        ReleaseResult describing what was written and where it was published.

    Raises:
        VersionResolutionError: If the metadata file is unusable.
        NoSourceFoldersError: If there is nothing to package. No output
            directory is created in this case.
        ArchiveError: If any folder fails to compress.
    """
    version = resolve_version(settings.metadata_file)
    _logger.info("Starting release", extra={"version": version})

    folders = discover_folders(settings.source_root)
    _logger.info(
        "Found component folders",
        extra={"count": len(folders), "folders": [f.name for f in folders]},
    )

    output_dir = ensure_directory(output_dir_for(settings, version))

    artifacts: list[ReleaseArtifact] = []
    for folder in folders:
        _logger.info("Compressing folder", extra={"folder": folder.name})
        artifacts.append(package_folder(folder, output_dir))

    manifest = build_manifest(version, artifacts)
    manifest_path = write_manifest(manifest, output_dir / settings.manifest_name)

    _logger.info(
        "Release packaged",
        extra={
            "version": version,
            "output_dir": str(output_dir),
            "files": [a.name for a in artifacts] + [settings.manifest_name],
        },
    )

    remote_release = None
    if publisher is not None:
        remote_release = publisher.publish(version, artifacts, output_dir, settings.manifest_name)

    return ReleaseResult(
        version=version,
        output_dir=output_dir,
        manifest_path=manifest_path,
        manifest=manifest,
        remote_release=remote_release,
    )
