# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for relpack tests.

`release_project` builds the standard layout (package.json + src/files/<component>)
inside tmp_path. `fake_github` is an in-memory stand-in for the GitHub release
API, served through httpx.MockTransport so no test ever touches the network.
"""

import json
import logging
import textwrap
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from relpack.release.pipeline import ReleaseSettings
from relpack.release.publisher import GitHubRepository


@pytest.fixture()
def release_project(tmp_path: Path) -> Path:
    """A project at version 1.2.0 with two components, `core` and `plugin-a`."""
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "demo", "version": "1.2.0"}), encoding="utf-8"
    )

    core = tmp_path / "src" / "files" / "core"
    (core / "lib").mkdir(parents=True)
    (core / "manifest.txt").write_text("core component\n", encoding="utf-8")
    (core / "lib" / "engine.bin").write_bytes(bytes(range(256)) * 64)
    (core / "empty").mkdir()

    plugin = tmp_path / "src" / "files" / "plugin-a"
    plugin.mkdir(parents=True)
    (plugin / "plugin.json").write_text('{"id": "plugin-a"}', encoding="utf-8")

    return tmp_path


@pytest.fixture()
def release_settings(release_project: Path) -> ReleaseSettings:
    return ReleaseSettings(
        metadata_file=release_project / "package.json",
        source_root=release_project / "src" / "files",
        dist_root=release_project / "dist",
    )


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """A small valid config that overrides a few defaults."""
    config_content = textwrap.dedent("""\
        release:
          source_root: "components"
          dist_root: "out"
          log_level: "debug"
        publish:
          token_env: "RELPACK_TEST_TOKEN"
          draft: false
    """)
    config_file = tmp_path / "relpack.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


class FakeGitHub:
    """
    Minimal GitHub release API.

    Holds releases keyed by tag, records every request, and can be told to
    fail any request with a given status code.
    """

    def __init__(self) -> None:
        self.releases: dict[str, dict[str, Any]] = {}
        self.uploads: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.created: list[dict[str, Any]] = []
        self.fail_with: Optional[int] = None
        self._next_id = 1000

    def add_release(self, tag: str, draft: bool = False) -> dict[str, Any]:
        release = self._make_release(tag, draft)
        self.releases[tag] = release
        return release

    def _make_release(self, tag: str, draft: bool) -> dict[str, Any]:
        self._next_id += 1
        release_id = self._next_id
        return {
            "id": release_id,
            "tag_name": tag,
            "draft": draft,
            "html_url": f"https://github.com/acme/widgets/releases/tag/{tag}",
            "upload_url": (
                f"https://uploads.github.com/repos/acme/widgets/releases/{release_id}/assets{{?name,label}}"
            ),
        }

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "failure"})

        path = request.url.path
        if request.method == "GET" and "/releases/tags/" in path:
            tag = path.rsplit("/", 1)[-1]
            if tag in self.releases:
                return httpx.Response(200, json=self.releases[tag])
            return httpx.Response(404, json={"message": "Not Found"})

        if request.method == "POST" and path.endswith("/releases"):
            body = json.loads(request.content)
            self.created.append(body)
            release = self._make_release(body["tag_name"], body["draft"])
            self.releases[body["tag_name"]] = release
            return httpx.Response(201, json=release)

        if request.method == "POST" and request.url.host == "uploads.github.com":
            release_id = int(path.split("/")[-2])
            self.uploads.append(
                {
                    "release_id": release_id,
                    "name": request.url.params["name"],
                    "content_type": request.headers["content-type"],
                    "data": request.content,
                }
            )
            return httpx.Response(201, json={"id": len(self.uploads), "name": request.url.params["name"]})

        return httpx.Response(500, json={"message": f"unexpected {request.method} {path}"})


@pytest.fixture()
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def github_repository() -> GitHubRepository:
    return GitHubRepository(owner="acme", repo="widgets")


@pytest.fixture(autouse=True)
def _reset_relpack_logger():
    """
    Undo configure_logging between tests so handlers bound to an old captured
    stdout don't leak, and records keep propagating to caplog.
    """
    yield
    logger = logging.getLogger("relpack")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
