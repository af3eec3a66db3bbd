# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for relpack.

Each config section is a frozen pydantic model:
  - frozen=True: immutable after construction
  - extra="forbid": unknown fields fail immediately (typos don't go unnoticed)
  - validate_default=True: defaults get type-checked too

Every field has a default. Running without a config file gives the standard
layout: versions from package.json, components under src/files, output under
dist/<version>/, publishing driven by the GH_TOKEN environment variable.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ReleaseConfig(BaseModel):
    """Where inputs come from and where artifacts land, relative to the working directory."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    metadata_file: str = Field(
        default="package.json",
        description="JSON file holding the project's `version` field",
    )
    source_root: str = Field(
        default="src/files",
        description="Directory whose immediate subdirectories become artifacts",
    )
    dist_root: str = Field(
        default="dist",
        description="Artifacts are written to <dist_root>/<version>/",
    )
    manifest_name: str = Field(
        default="info.json",
        min_length=1,
        description="File name of the manifest inside the version directory",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_VALID_LOG_LEVELS)}")
        return upper


class PublishConfig(BaseModel):
    """
    GitHub release publishing.

    The token itself never lives in the config file. Only the name of the
    environment variable that holds it does.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    enabled: bool = Field(default=True, description="Set false to never publish")
    token_env: str = Field(
        default="GH_TOKEN",
        min_length=1,
        description="Environment variable holding the GitHub token",
    )
    git_remote: str = Field(
        default="origin",
        description="Git remote whose URL identifies the GitHub repository",
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    draft: bool = Field(default=True, description="Create new releases as drafts")
    prerelease: bool = Field(default=False, description="Mark new releases as prereleases")
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Per-request HTTP timeout",
    )


class RelpackConfig(BaseModel):
    """
    Top-level config container.

    A YAML file may contain either section or both. Missing sections fall back
    to their defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
