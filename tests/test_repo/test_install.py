"""Tests for installing a version through the archive and unpack caches."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from ghtarball.exceptions import ApiError, ExtractionError, NotFoundError
from ghtarball.models import Environment, Source
from ghtarball.repo import Repo


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


@pytest.fixture()
def repo(source: Source, fake_github) -> Repo:
    return Repo(source, "widget", client_factory=fake_github.client_factory)


def _serve(fake_github, version: str, tarball, files: dict[str, str]) -> None:
    fake_github.tarballs[("acme/widget", version)] = tarball(files)


class TestInstallVersion:
    def test_downloads_unpacks_and_copies(self, repo: Repo, fake_github, tarball, tmp_path: Path) -> None:
        _serve(fake_github, "1.0", tarball, {"manifests/init.pp": "class widget {}"})
        dest = tmp_path / "modules" / "widget"

        assert repo.install_version("1.0", dest) == dest

        assert (dest / "manifests" / "init.pp").read_text() == "class widget {}"
        assert repo.is_vendored("1.0")
        assert repo.version_unpacked_cache_path("1.0").is_dir()
        assert fake_github.count("tarball") == 1

    def test_vendored_archive_is_not_downloaded_again(
        self, repo: Repo, fake_github, tarball, tmp_path: Path
    ) -> None:
        archive = repo.archives.vendored_path("acme/widget", "1.0")
        archive.write_bytes(tarball({"README": "vendored"}))

        repo.install_version("1.0", tmp_path / "dest")

        assert fake_github.requests == []
        assert (tmp_path / "dest" / "README").read_text() == "vendored"

    def test_unpacked_version_skips_download_and_extraction(
        self, repo: Repo, fake_github, tmp_path: Path
    ) -> None:
        top = repo.version_unpacked_cache_path("1.0") / "acme-widget-abc1234"
        top.mkdir(parents=True)
        (top / "README").write_text("from cache")

        with patch("ghtarball.cache.unpack.subprocess.run") as run:
            repo.install_version("1.0", tmp_path / "dest")

        run.assert_not_called()
        assert fake_github.requests == []
        assert (tmp_path / "dest" / "README").read_text() == "from cache"

    def test_overwrites_existing_destination(self, repo: Repo, fake_github, tarball, tmp_path: Path) -> None:
        _serve(fake_github, "1.0", tarball, {"new.txt": "new"})
        dest = tmp_path / "dest"
        (dest / "sub").mkdir(parents=True)
        (dest / "old.txt").write_text("old")
        (dest / "sub" / "stale.txt").write_text("stale")

        repo.install_version("1.0", dest)

        assert sorted(p.name for p in dest.iterdir()) == ["new.txt"]

    def test_new_version_prunes_previous_archive(self, repo: Repo, fake_github, tarball, tmp_path: Path) -> None:
        _serve(fake_github, "1.0", tarball, {"v": "1"})
        _serve(fake_github, "2.0", tarball, {"v": "2"})

        repo.install_version("1.0", tmp_path / "dest")
        repo.install_version("2.0", tmp_path / "dest")

        assert [p.name for p in repo.archives.list_archives()] == ["acme-widget-2.0.tar.gz"]
        assert (tmp_path / "dest" / "v").read_text() == "2"
        # Both versions stay in the unpack cache.
        assert repo.unpacked.is_unpacked("1.0")
        assert repo.unpacked.is_unpacked("2.0")

    def test_download_error_propagates(self, repo: Repo, tmp_path: Path) -> None:
        with pytest.raises(ApiError, match="tarball/3.0"):
            repo.install_version("3.0", tmp_path / "dest")
        assert not repo.is_vendored("3.0")
        assert not (tmp_path / "dest").exists()

    def test_extraction_error_propagates(self, repo: Repo, fake_github, tmp_path: Path) -> None:
        fake_github.tarballs[("acme/widget", "1.0")] = b"not a tarball"
        with pytest.raises(ExtractionError):
            repo.install_version("1.0", tmp_path / "dest")
        assert not repo.unpacked.is_unpacked("1.0")

    def test_falls_back_to_archive_named_after_module(
        self, source: Source, fake_github, tarball, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "widget").write_bytes(tarball({"README": "local"}))
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)

        path = repo.cache_version_unpacked("1.0")

        assert (path / "acme-widget-abc1234" / "README").read_text() == "local"


class TestOfflineMode:
    @pytest.fixture()
    def offline_repo(self, environment: Environment, fake_github) -> Repo:
        offline = environment.model_copy(update={"local": True})
        return Repo(Source(uri="acme/widget", environment=offline), "widget", client_factory=fake_github.client_factory)

    def test_missing_archive_fails_before_network(self, offline_repo: Repo, fake_github, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError, match="Could not find a local copy of acme/widget at 1.0"):
            offline_repo.install_version("1.0", tmp_path / "dest")
        assert fake_github.requests == []

    def test_vendored_archive_installs_offline(self, offline_repo: Repo, fake_github, tarball, tmp_path: Path) -> None:
        archive = offline_repo.archives.vendored_path("acme/widget", "1.0")
        archive.write_bytes(tarball({"README": "offline"}))

        offline_repo.install_version("1.0", tmp_path / "dest")

        assert (tmp_path / "dest" / "README").read_text() == "offline"
        assert fake_github.requests == []
