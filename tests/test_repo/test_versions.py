"""Tests for version resolution."""

from __future__ import annotations

import pytest

from ghtarball.exceptions import NotFoundError
from ghtarball.models import Manifest, Source
from ghtarball.repo import Repo, resolve_versions


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


class TestResolveVersions:
    def test_strip_filter_and_sort_descending(self) -> None:
        tags = ["v1.2.0", "v1.10.0", "v2.0", "bogus", "v1.2.0rc1"]
        # "1.10.0" has a two-digit minor, which the pattern does not accept.
        assert resolve_versions(tags) == ["2.0", "1.2.0rc1", "1.2.0"]

    def test_string_order_not_numeric(self) -> None:
        assert resolve_versions(["9.0", "v1.0"]) == ["9.0", "1.0"]
        assert resolve_versions(["v2.9", "v2.1.5"]) == ["2.9", "2.1.5"]

    def test_only_one_leading_v_is_stripped(self) -> None:
        assert resolve_versions(["vv1.0", "v1.1"]) == ["1.1"]

    def test_patch_suffix_must_start_with_digit(self) -> None:
        assert resolve_versions(["1.0.x", "1.0.1-beta", "1.0."]) == ["1.0.1-beta"]

    def test_whole_string_must_match(self) -> None:
        assert resolve_versions(["release-1.0", "1.0-final", "1.0"]) == ["1.0"]

    def test_only_ascii_digits_count(self) -> None:
        assert resolve_versions(["١.٢", "1.0"]) == ["1.0"]

    def test_empty_and_missing_names_dropped(self) -> None:
        assert resolve_versions(["", None, "v", "1.0"]) == ["1.0"]


class TestRepoVersions:
    def test_versions_from_tags(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget", "v1.0", "v1.1", "v0.9", "latest")
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)
        assert repo.versions() == ["1.1", "1.0", "0.9"]

    def test_versions_across_pages(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget", *[f"v1.{i}" for i in range(10)], per_page=3)
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)
        assert repo.versions() == [f"1.{i}" for i in reversed(range(10))]
        assert fake_github.count("tags") == 4

    def test_memoized_for_instance_lifetime(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget", "v1.0", "v1.1", per_page=1)
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)

        first = repo.versions()
        calls_after_first = len(fake_github.requests)
        second = repo.versions()

        assert first == second == ["1.1", "1.0"]
        assert calls_after_first == 2
        assert len(fake_github.requests) == 2

    def test_new_instance_fetches_again(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget", "v1.0")
        Repo(source, "widget", client_factory=fake_github.client_factory).versions()
        Repo(source, "widget", client_factory=fake_github.client_factory).versions()
        assert fake_github.count("tags") == 2

    def test_no_tags_is_not_found(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget")
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)
        with pytest.raises(NotFoundError, match="acme/widget"):
            repo.versions()

    def test_tags_without_valid_versions_resolve_empty(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget", "nightly", "latest")
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)
        assert repo.versions() == []


class TestManifests:
    def test_one_manifest_per_version(self, source: Source, fake_github) -> None:
        fake_github.add_tags("acme/widget", "v1.0", "v2.0")
        repo = Repo(source, "widget", client_factory=fake_github.client_factory)

        manifests = repo.manifests()

        assert manifests == [
            Manifest(source=source, name="widget", version="2.0"),
            Manifest(source=source, name="widget", version="1.0"),
        ]
