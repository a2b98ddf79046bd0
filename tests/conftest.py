"""Shared test fixtures for ghtarball.

Provides isolated config directories, a ready-made
:class:`~ghtarball.models.Environment`, a fake GitHub API backed by
:class:`httpx.MockTransport`, and a builder for GitHub-shaped tarballs.
"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from ghtarball.client import GitHubClient
from ghtarball.models import Environment, Source
from ghtarball.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    CliRunner swaps sys.stdout/sys.stderr; a manager created during one
    test would otherwise keep writing to closed streams in the next.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN output manager for tests that ignore output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG dirs at tmp_path, clear GHTARBALL_* and token env vars, chdir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("ghtarball.config._is_xdg_platform", lambda: True)

    for var in [
        "GHTARBALL_LOCAL",
        "GHTARBALL_CACHE_PATH",
        "GHTARBALL_VENDOR_CACHE",
        "GHTARBALL_INSTALL_PATH",
        "GITHUB_API_TOKEN",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def environment(tmp_path: Path) -> Environment:
    """An online Environment rooted in tmp_path."""
    return Environment(
        cache_path=tmp_path / "source",
        vendor_cache=tmp_path / "vendor",
        install_path=tmp_path / "modules",
    )


@pytest.fixture
def source(environment: Environment) -> Source:
    return Source(uri="acme/widget", environment=environment)


# ---------------------------------------------------------------------------
# Tarballs
# ---------------------------------------------------------------------------


def build_tarball(
    files: dict[str, str],
    top: str = "acme-widget-abc1234",
) -> bytes:
    """Return a gzip-compressed tar holding *files* under a single *top* directory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        top_info = tarfile.TarInfo(top)
        top_info.type = tarfile.DIRTYPE
        top_info.mode = 0o755
        tar.addfile(top_info)
        for rel, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{rel}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def tarball() -> Callable[..., bytes]:
    return build_tarball


# ---------------------------------------------------------------------------
# Fake GitHub API
# ---------------------------------------------------------------------------


class FakeGitHub:
    """In-memory GitHub serving tags pages and tarballs through MockTransport.

    ``tags`` maps a repo uri to its list of pages (each a list of tag
    records). ``tarballs`` maps ``(uri, version)`` to gzip bytes.
    ``requests`` records every request seen.
    """

    def __init__(self) -> None:
        self.tags: dict[str, list[list[dict[str, Any]]]] = {}
        self.tarballs: dict[tuple[str, str], bytes] = {}
        self.requests: list[httpx.Request] = []
        self.error: Optional[httpx.Response] = None

    def add_tags(self, uri: str, *names: str, per_page: int = 100) -> None:
        records = [{"name": n, "commit": {"sha": "0" * 40}} for n in names]
        pages = [records[i:i + per_page] for i in range(0, len(records), per_page)] or [[]]
        self.tags[uri] = pages

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            return self.error
        parts = request.url.path.strip("/").split("/")
        # repos/<owner>/<repo>/<kind>[/<version>]
        uri = f"{parts[1]}/{parts[2]}"
        if parts[3] == "tags":
            pages = self.tags.get(uri)
            if pages is None:
                return httpx.Response(404, json={"message": "Not Found"})
            page = int(request.url.params.get("page", "1"))
            headers = {}
            if page < len(pages):
                next_url = f"https://api.github.com/repos/{uri}/tags?per_page=100&page={page + 1}"
                headers["link"] = (
                    f'<{next_url}>; rel="next", '
                    f'<https://api.github.com/repos/{uri}/tags?per_page=100&page={len(pages)}>; rel="last"'
                )
            return httpx.Response(200, json=pages[page - 1], headers=headers)
        if parts[3] == "tarball":
            data = self.tarballs.get((uri, parts[4]))
            if data is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, content=data, headers={"content-type": "application/x-gzip"})
        return httpx.Response(404, json={"message": "Not Found"})

    def client_factory(self, environment: Environment) -> GitHubClient:
        return GitHubClient(environment, transport=httpx.MockTransport(self.handler))

    def count(self, kind: str) -> int:
        return sum(1 for r in self.requests if f"/{kind}" in r.url.path)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()
