# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Version resolver: reads the release version from the project metadata file.

The metadata file is a JSON object (normally package.json) with a string
`version` field. Every output path and the remote tag are derived from it, so
anything unexpected here is fatal.
"""

import json
import logging
from pathlib import Path

from relpack.release.exceptions import VersionResolutionError

_logger: logging.Logger = logging.getLogger(__name__)


def release_tag(version: str) -> str:
    """The git tag a version is published under, e.g. "1.2.0" -> "v1.2.0"."""
    return f"v{version}"


def resolve_version(metadata_path: Path) -> str:
    """
    Read the `version` field from a JSON metadata file.

    Args:
        metadata_path: Path to the metadata file (e.g. package.json).

    Returns:
        The version string, stripped of surrounding whitespace.

    Raises:
        VersionResolutionError: If the file is missing or unreadable, isn't a
            JSON object, or has no non-empty string `version`.
    """
    if not metadata_path.is_file():
        raise VersionResolutionError(f"Metadata file not found: {metadata_path}")

    try:
        data = json.loads(metadata_path.read_text(encoding="utf-8"))
    except OSError as err:
        raise VersionResolutionError(f"Cannot read metadata file {metadata_path}: {err}") from err
    except json.JSONDecodeError as err:
        raise VersionResolutionError(f"Invalid JSON in {metadata_path}: {err}") from err

    if not isinstance(data, dict):
        raise VersionResolutionError(
            f"Metadata file must contain a JSON object, got {type(data).__name__}"
        )

    version = data.get("version")
    if not isinstance(version, str) or not version.strip():
        raise VersionResolutionError(
            f"Metadata file {metadata_path} has no usable 'version' field (got {version!r})"
        )

    version = version.strip()
    if "/" in version or "\\" in version or version in {".", ".."}:
        raise VersionResolutionError(f"Version {version!r} cannot be used as a directory name")

    _logger.debug("Version resolved", extra={"version": version, "source": str(metadata_path)})
    return version
