# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Environment checks for relpack.

Fail on an unsupported interpreter before any archive is written, and gather
the facts the `info` command reports. Publishing resolves the GitHub
repository through `git remote get-url`, so whether git is on PATH is part of
that picture.
"""

import platform
import shutil
import sys
from typing import NamedTuple, Optional

MINIMUM_PYTHON = (3, 10)


class SystemInfo(NamedTuple):
    python_version: str
    platform: str
    architecture: str
    git_executable: Optional[str]

    @property
    def git_available(self) -> bool:
        return self.git_executable is not None


def check_minimum_python(version_info: Optional[tuple[int, ...]] = None) -> None:
    """
    Verify we're running on a supported Python (the current one by default).

    Raises:
        RuntimeError: If the interpreter is older than MINIMUM_PYTHON.
    """
    if version_info is None:
        version_info = tuple(sys.version_info[:2])
    if tuple(version_info[:2]) < MINIMUM_PYTHON:
        required = ".".join(str(part) for part in MINIMUM_PYTHON)
        running = ".".join(str(part) for part in version_info[:2])
        raise RuntimeError(f"relpack requires Python >= {required}, but this is {running}")


def get_system_info() -> SystemInfo:
    """Collect what `relpack info` reports about the host."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        git_executable=shutil.which("git"),
    )
