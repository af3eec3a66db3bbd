# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
GitHub release publisher.

Attaches the packaged archives and info.json to a GitHub release tagged
v<version>, creating the release as a draft if it doesn't exist yet.

Publishing is best-effort. By the time it runs, the local artifacts are
already complete and valid, so no remote failure (network, auth, rate limit,
upload rejection) is allowed to escape `Publisher.publish`. Failures are
logged and the run still succeeds.

Nothing here reads global state. The token, API URL and git remote name come
in through PublishSettings, the repository lookup is an injectable callable,
and the HTTP transport can be swapped for an httpx.MockTransport in tests.

Remote protocol (GitHub REST v3):
    GET  /repos/{owner}/{repo}/releases/tags/{tag}     find existing release
    POST /repos/{owner}/{repo}/releases                create draft release
    POST {upload_url}?name={asset}                     upload asset bytes
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import httpx

from relpack import __version__
from relpack.release.exceptions import PublishError, RemoteResolutionError
from relpack.release.manifest import ReleaseArtifact
from relpack.release.version import release_tag

_logger: logging.Logger = logging.getLogger(__name__)

_GITHUB_API_VERSION = "2022-11-28"
_USER_AGENT = f"relpack/{__version__}"

_GITHUB_REMOTE_PATTERN = re.compile(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$")

_CONTENT_TYPES: dict[str, str] = {
    ".zip": "application/zip",
    ".json": "application/json",
}


@dataclass(frozen=True)
class PublishSettings:
    """Everything the publisher needs, resolved up front by the caller."""

    token: Optional[str]
    api_url: str = "https://api.github.com"
    git_remote: str = "origin"
    draft: bool = True
    prerelease: bool = False
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class GitHubRepository:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RemoteRelease:
    """Handle to a release record on GitHub."""

    id: int
    tag_name: str
    html_url: str
    upload_url: str
    draft: bool

    @classmethod
    def from_api(cls, payload: Any) -> RemoteRelease:
        """
        Build a handle from a GitHub release object.

        Raises:
            PublishError: If the payload isn't a release object.
        """
        if not isinstance(payload, dict):
            raise PublishError(f"Expected a release object from GitHub, got {type(payload).__name__}")
        try:
            # upload_url is an RFC 6570 template like ".../assets{?name,label}"
            upload_url = str(payload["upload_url"]).split("{", 1)[0]
            release_id = int(payload["id"])
        except (KeyError, TypeError, ValueError) as err:
            raise PublishError(f"Malformed release object from GitHub: {err!r}") from err
        return cls(
            id=release_id,
            tag_name=str(payload.get("tag_name", "")),
            html_url=str(payload.get("html_url", "")),
            upload_url=upload_url,
            draft=bool(payload.get("draft", False)),
        )


def parse_github_remote(remote_url: str) -> GitHubRepository:
    """
    Extract owner and repository name from a GitHub remote URL.

    Accepts both forms git uses:
        https://github.com/owner/repo.git
        git@github.com:owner/repo.git

    Raises:
        RemoteResolutionError: If the URL doesn't point at github.com.
    """
    match = _GITHUB_REMOTE_PATTERN.search(remote_url.strip())
    if match is None:
        raise RemoteResolutionError(f"Cannot parse GitHub repository from remote URL: {remote_url!r}")
    return GitHubRepository(owner=match.group(1), repo=match.group(2))


def git_remote_url(remote: str = "origin") -> str:
    """
    Return the URL configured for a git remote in the current working directory.

    Raises:
        RemoteResolutionError: If git is missing or the remote isn't configured.
    """
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as err:
        raise RemoteResolutionError(f"Could not run git to resolve remote '{remote}': {err}") from err

    if result.returncode != 0:
        raise RemoteResolutionError(
            f"git remote get-url {remote} failed: {result.stderr.strip() or 'unknown error'}"
        )
    return result.stdout.strip()


def _content_type_for(path: Path) -> str:
    return _CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")


class GitHubReleaseClient:
    """
    Thin wrapper over the three GitHub release endpoints relpack uses.

    Errors are raised as httpx.HTTPStatusError so callers can look at the
    status code. Use as a context manager to close the underlying client.
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": _USER_AGENT,
                "X-GitHub-Api-Version": _GITHUB_API_VERSION,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GitHubReleaseClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_release_by_tag(self, repository: GitHubRepository, tag: str) -> Optional[RemoteRelease]:
        """Return the release for `tag`, or None if GitHub answers 404."""
        response = self._http.get(f"/repos/{repository.owner}/{repository.repo}/releases/tags/{tag}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return RemoteRelease.from_api(response.json())

    def create_release(
        self,
        repository: GitHubRepository,
        version: str,
        draft: bool = True,
        prerelease: bool = False,
    ) -> RemoteRelease:
        response = self._http.post(
            f"/repos/{repository.owner}/{repository.repo}/releases",
            json={
                "tag_name": release_tag(version),
                "name": version,
                "body": f"Release version {version}",
                "draft": draft,
                "prerelease": prerelease,
            },
        )
        response.raise_for_status()
        return RemoteRelease.from_api(response.json())

    def ensure_release(
        self,
        repository: GitHubRepository,
        version: str,
        draft: bool = True,
        prerelease: bool = False,
    ) -> RemoteRelease:
        """
        Fetch the release tagged v<version>, creating it if it doesn't exist.

        Running this twice for the same version never creates a second release.
        """
        tag = release_tag(version)
        release = self.get_release_by_tag(repository, tag)
        if release is not None:
            _logger.info("Found existing release", extra={"tag": tag, "url": release.html_url})
            return release

        release = self.create_release(repository, version, draft=draft, prerelease=prerelease)
        _logger.info(
            "Created release",
            extra={"tag": tag, "url": release.html_url, "draft": release.draft},
        )
        return release

    def upload_asset(self, release: RemoteRelease, file_path: Path, name: Optional[str] = None) -> None:
        """Upload a file as a named asset of `release`. The response body is not read."""
        asset_name = name or file_path.name
        response = self._http.post(
            release.upload_url,
            params={"name": asset_name},
            content=file_path.read_bytes(),
            headers={"Content-Type": _content_type_for(file_path)},
        )
        response.raise_for_status()


RemoteResolver = Callable[[str], GitHubRepository]


def resolve_repository_from_git(remote: str) -> GitHubRepository:
    """Default remote resolver: ask git for the remote URL and parse it."""
    return parse_github_remote(git_remote_url(remote))


class Publisher:
    """
    Pushes a packaged release to GitHub.

    Args:
        settings: Token and API options. A missing token turns publish() into a no-op.
        remote_resolver: Maps a git remote name to GitHub coordinates.
        transport: Optional httpx transport, used by tests to fake the API.
    """

    def __init__(
        self,
        settings: PublishSettings,
        remote_resolver: RemoteResolver = resolve_repository_from_git,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._remote_resolver = remote_resolver
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._settings.token)

    def publish(
        self,
        version: str,
        artifacts: Sequence[ReleaseArtifact],
        output_dir: Path,
        manifest_name: str = "info.json",
    ) -> Optional[RemoteRelease]:
        """
        Upload every artifact and the manifest to the release for `version`.

        Returns:
            The release the assets went to, or None if publishing was skipped
            or failed. Never raises for remote errors.
        """
        if not self.enabled:
            _logger.warning("No GitHub token configured, skipping release publishing")
            return None

        try:
            return self._publish(self._settings.token, version, artifacts, output_dir, manifest_name)
        except httpx.HTTPStatusError as err:
            status = err.response.status_code
            _logger.error(
                "GitHub release publishing failed",
                extra={"status": status, "error": str(err)},
            )
            if status == 401:
                _logger.error("GitHub rejected the token; check that it is set correctly and not expired")
        except (httpx.HTTPError, PublishError, OSError, ValueError) as err:
            _logger.error("GitHub release publishing failed", extra={"error": str(err)})
        return None

    def _publish(
        self,
        token: str,
        version: str,
        artifacts: Sequence[ReleaseArtifact],
        output_dir: Path,
        manifest_name: str,
    ) -> RemoteRelease:
        repository = self._remote_resolver(self._settings.git_remote)
        _logger.info("Resolved GitHub repository", extra={"repository": repository.full_name})

        with GitHubReleaseClient(
            token=token,
            api_url=self._settings.api_url,
            timeout_seconds=self._settings.timeout_seconds,
            transport=self._transport,
        ) as client:
            release = client.ensure_release(
                repository,
                version,
                draft=self._settings.draft,
                prerelease=self._settings.prerelease,
            )

            for artifact in artifacts:
                file_path = output_dir / artifact.name
                if not file_path.is_file():
                    # TODO: fail the publish instead once partial archives are cleaned up on error
                    _logger.warning(
                        "Artifact missing on disk, not uploading",
                        extra={"file": artifact.name, "path": str(file_path)},
                    )
                    continue
                self._upload(client, release, file_path)

            manifest_path = output_dir / manifest_name
            if manifest_path.is_file():
                self._upload(client, release, manifest_path)

        _logger.info("Release publishing complete", extra={"url": release.html_url})
        return release

    @staticmethod
    def _upload(client: GitHubReleaseClient, release: RemoteRelease, file_path: Path) -> None:
        _logger.info("Uploading asset", extra={"file": file_path.name, "release_id": release.id})
        client.upload_asset(release, file_path)
        _logger.info("Upload complete", extra={"file": file_path.name})
