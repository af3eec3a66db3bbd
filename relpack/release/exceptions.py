# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the release pipeline.

Everything except PublishError aborts a run. PublishError never leaves the
publisher: it is caught there and logged so a remote outage cannot discard a
valid local build.
"""


class ReleaseError(Exception):
    """Base for all release pipeline errors."""


class VersionResolutionError(ReleaseError):
    """Raised when the project metadata is missing, unparseable, or has no usable version."""


class NoSourceFoldersError(ReleaseError):
    """Raised when the source root holds no component folders, so there is nothing to release."""


class ArchiveError(ReleaseError):
    """
    Raised when a component folder cannot be compressed.

    The output file may have been partially written and must be treated as invalid.
    """


class PublishError(ReleaseError):
    """Raised for failures while pushing artifacts to the remote release."""


class RemoteResolutionError(PublishError):
    """Raised when the git remote URL cannot be turned into GitHub coordinates."""
