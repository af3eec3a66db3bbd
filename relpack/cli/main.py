# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for relpack.

Global options (--config, --log-level) are shared by every subcommand
through argparse's parent parser mechanism. --dry-run belongs to `release`.

Usage:
    relpack release
    relpack release --no-publish --source-root src/files --dist-root dist
    relpack release --dry-run
    relpack info --config relpack.yaml
"""

import argparse
import sys

from relpack.cli.commands import handle_info, handle_release
from relpack.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False keeps its -h from colliding with the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config file).",
    )
    return parent


def _add_layout_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--metadata",
        type=str,
        default=None,
        help="JSON file holding the version (default: package.json).",
    )
    parser.add_argument(
        "--source-root",
        type=str,
        default=None,
        dest="source_root",
        help="Directory whose subfolders are packaged (default: src/files).",
    )
    parser.add_argument(
        "--dist-root",
        type=str,
        default=None,
        dest="dist_root",
        help="Output root; artifacts go to <dist-root>/<version>/ (default: dist).",
    )


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    release_parser = subparsers.add_parser(
        "release",
        parents=[parent],
        help="Zip component folders, write info.json and publish to GitHub.",
    )
    _add_layout_options(release_parser)
    release_parser.add_argument(
        "--no-publish",
        action="store_true",
        default=False,
        dest="no_publish",
        help="Build local artifacts only, even if a token is set.",
    )
    release_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Show what would be packaged without writing anything.",
    )
    release_parser.set_defaults(func=handle_release)

    info_parser = subparsers.add_parser(
        "info",
        parents=[parent],
        help="Display environment, version and release layout.",
    )
    _add_layout_options(info_parser)
    info_parser.set_defaults(func=handle_info)


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    With no subcommand, prints help and exits with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="relpack",
        description="relpack: package component folders into versioned release archives.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
