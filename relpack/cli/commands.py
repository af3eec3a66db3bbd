# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the relpack CLI.

Each handler takes the parsed argparse namespace and returns an exit code.
This is the only layer that reads the process environment: the publish token
is looked up here and passed down explicitly.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from relpack.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR
from relpack.config.exceptions import ConfigError
from relpack.config.loader import load_config
from relpack.config.schema import RelpackConfig
from relpack.logging.logger import configure_logging
from relpack.release.exceptions import NoSourceFoldersError, ReleaseError
from relpack.release.pipeline import ReleaseSettings, discover_folders, output_dir_for, run_release
from relpack.release.publisher import Publisher, PublishSettings
from relpack.release.version import release_tag, resolve_version
from relpack.runtime.environment import check_minimum_python


def _report_fatal(message: str) -> None:
    sys.stderr.write(f"relpack: {message}\n")


def _load_and_configure(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[RelpackConfig], logging.Logger]:
    """
    Shared setup for every command: load config, then configure logging.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS, the
    caller returns it immediately.
    """
    fallback_level = args.log_level or "INFO"

    try:
        config = load_config(Path(args.config) if args.config is not None else None)
    except ConfigError as err:
        configure_logging(fallback_level)
        logger = logging.getLogger(f"relpack.cli.{command_name}")
        logger.error("Configuration error", extra={"command": command_name, "error": str(err)})
        _report_fatal(str(err))
        return CONFIG_ERROR, None, logger

    log_file = Path(config.release.log_file) if config.release.log_file is not None else None
    configure_logging(args.log_level or config.release.log_level, log_file=log_file)
    logger = logging.getLogger(f"relpack.cli.{command_name}")

    check_minimum_python()
    return SUCCESS, config, logger


def build_release_settings(config: RelpackConfig, args: argparse.Namespace) -> ReleaseSettings:
    """Merge the config file's layout with any CLI overrides."""
    section = config.release
    return ReleaseSettings(
        metadata_file=Path(getattr(args, "metadata", None) or section.metadata_file),
        source_root=Path(getattr(args, "source_root", None) or section.source_root),
        dist_root=Path(getattr(args, "dist_root", None) or section.dist_root),
        manifest_name=section.manifest_name,
    )


def build_publish_settings(
    config: RelpackConfig,
    environ: Mapping[str, str] = os.environ,
) -> PublishSettings:
    """Resolve the publish token from the environment. An empty variable counts as unset."""
    section = config.publish
    token = environ.get(section.token_env, "").strip() or None
    return PublishSettings(
        token=token,
        api_url=section.api_url,
        git_remote=section.git_remote,
        draft=section.draft,
        prerelease=section.prerelease,
        timeout_seconds=section.timeout_seconds,
    )


def _dry_run(settings: ReleaseSettings, logger: logging.Logger) -> int:
    version = resolve_version(settings.metadata_file)
    folders = discover_folders(settings.source_root)
    output_dir = output_dir_for(settings, version)
    logger.info(
        "Dry run, nothing written",
        extra={
            "version": version,
            "tag": release_tag(version),
            "output_dir": str(output_dir),
            "archives": [f"{f.name}.zip" for f in folders],
            "manifest": str(output_dir / settings.manifest_name),
        },
    )
    return SUCCESS


def handle_release(args: argparse.Namespace) -> int:
    """Package every component folder, write the manifest, and publish."""
    exit_code, config, logger = _load_and_configure(args, "release")
    if exit_code != SUCCESS or config is None:
        return exit_code

    settings = build_release_settings(config, args)

    try:
        if args.dry_run:
            return _dry_run(settings, logger)

        publisher = None
        if config.publish.enabled and not args.no_publish:
            publisher = Publisher(build_publish_settings(config))
        else:
            logger.info("Publishing disabled for this run")

        result = run_release(settings, publisher)
        logger.info(
            "Release complete",
            extra={
                "version": result.version,
                "output_dir": str(result.output_dir),
                "manifest": str(result.manifest_path),
                "published": result.published,
            },
        )
        return SUCCESS

    except NoSourceFoldersError as err:
        logger.error("Nothing to release", extra={"error": str(err)})
        _report_fatal(str(err))
        return USER_ERROR
    except ReleaseError as err:
        logger.error("Release failed", extra={"error": str(err)})
        _report_fatal(str(err))
        return RUNTIME_ERROR
    except Exception as err:
        logger.error("Release failed", extra={"error": str(err)}, exc_info=True)
        _report_fatal(str(err))
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Report the environment, the resolved version and what a release would contain."""
    exit_code, config, logger = _load_and_configure(args, "info")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from relpack import __version__
    from relpack.release.manifest import load_manifest
    from relpack.runtime.environment import get_system_info

    system_info = get_system_info()
    settings = build_release_settings(config, args)
    publish_settings = build_publish_settings(config)

    details: dict[str, object] = {
        "relpack_version": __version__,
        "python_version": system_info.python_version,
        "platform": system_info.platform,
        "architecture": system_info.architecture,
        "git_available": system_info.git_available,
        "config": args.config,
        "publish_enabled": config.publish.enabled,
        "token_present": publish_settings.token is not None,
    }

    try:
        version = resolve_version(settings.metadata_file)
        details["version"] = version
        details["folders"] = [f.name for f in discover_folders(settings.source_root)]

        manifest_path = output_dir_for(settings, version) / settings.manifest_name
        if manifest_path.is_file():
            manifest = load_manifest(manifest_path)
            details["packaged_at"] = manifest.release_date
            details["packaged_files"] = [a.name for a in manifest.files]
    except (ReleaseError, ValueError) as err:
        details["problem"] = str(err)

    logger.info("relpack information", extra=details)
    return SUCCESS
