"""Version resolution and installation for one module of a GitHub source.

A :class:`Repo` binds a :class:`~ghtarball.models.Source` to a module name.
It lists the repository's tags once per instance, turns them into version
strings, and installs a chosen version by chaining the two caches:

1. :class:`~ghtarball.cache.ArchiveCache` -- download the tarball unless it
   is already vendored (refused in offline mode).
2. :class:`~ghtarball.cache.UnpackCache` -- extract it unless that version
   is already unpacked.
3. Replace the install directory with a copy of the unpacked tree.

Versions are ordered by plain string comparison, newest first. ``"10.0"``
therefore sorts *after* ``"9.0"``; callers depend on that order, so it is
kept as is.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Callable, Iterable, Optional

from ghtarball.cache import ArchiveCache, UnpackCache
from ghtarball.client import GitHubClient
from ghtarball.exceptions import NotFoundError
from ghtarball.models import Environment, Manifest, Source
from ghtarball.output import get_output

VERSION_PATTERN = re.compile(r"\d\.\d(\.\d.*)?", re.ASCII)

ClientFactory = Callable[[Environment], GitHubClient]


def resolve_versions(tag_names: Iterable[Optional[str]]) -> list[str]:
    """Turn raw tag names into the canonical newest-first version list.

    A single leading ``v`` is stripped, the results are sorted in
    descending string order, and anything not shaped like
    ``major.minor[.patch...]`` is dropped.

    Example::

        >>> resolve_versions(["v1.2.0", "v2.0", "bogus", "v1.2.0rc1"])
        ['2.0', '1.2.0rc1', '1.2.0']
    """
    stripped = [re.sub(r"^v", "", name) for name in tag_names if name]
    return [v for v in sorted(stripped, reverse=True) if VERSION_PATTERN.fullmatch(v)]


class Repo:
    """One module served from a GitHub tarball source.

    Args:
        source: The repository the module's tags and tarballs come from.
        name: Module name as requested by the caller (also the fallback
            archive path when nothing is vendored).
        client_factory: Builds the :class:`~ghtarball.client.GitHubClient`
            used for network calls. Tests pass one wired to a mock transport.
    """

    def __init__(
        self,
        source: Source,
        name: str,
        client_factory: ClientFactory = GitHubClient,
    ) -> None:
        self._source = source
        self._name = name
        self._client_factory = client_factory
        self._versions: Optional[list[str]] = None
        self.archives = ArchiveCache(source.environment)
        self.unpacked = UnpackCache(self.cache_path)

    @property
    def source(self) -> Source:
        return self._source

    @property
    def name(self) -> str:
        return self._name

    @property
    def environment(self) -> Environment:
        return self._source.environment

    @property
    def cache_path(self) -> Path:
        return self._source.cache_path / self._name

    # ------------------------------------------------------------------ #
    # Versions
    # ------------------------------------------------------------------ #

    def versions(self) -> list[str]:
        """Return the module's versions, newest first.

        The tags listing is fetched on the first call only; later calls on
        the same instance return the memoized list.

        Raises:
            NotFoundError: If the repository has no tags.
        """
        if self._versions is not None:
            return self._versions

        uri = self._source.uri
        with self._client_factory(self.environment) as client:
            data = client.fetch_tags(uri)
        if not data:
            raise NotFoundError(f"Unable to find module '{uri}' on https://github.com")

        names = [record.get("name") for record in data if isinstance(record, dict)]
        self._versions = resolve_versions(names)
        get_output().debug(f"  Module {self._name} found versions: {', '.join(self._versions)}")
        return self._versions

    def manifests(self) -> list[Manifest]:
        return [
            Manifest(source=self._source, name=self._name, version=version)
            for version in self.versions()
        ]

    # ------------------------------------------------------------------ #
    # Install
    # ------------------------------------------------------------------ #

    def version_unpacked_cache_path(self, version: str) -> Path:
        return self.unpacked.path_for(version)

    def is_vendored(self, version: str) -> bool:
        return self.archives.is_vendored(self._source.uri, version)

    def install_version(self, version: str, install_path: Path) -> Path:
        """Install *version* into *install_path*, replacing what is there.

        Args:
            version: A version string as returned by :meth:`versions`.
            install_path: Destination directory. Removed first if it exists.

        Returns:
            *install_path*.

        Raises:
            NotFoundError: In offline mode when the archive is not vendored.
            ApiError: If the tarball download is refused.
            TransportError: If the tarball download fails on the network.
            ExtractionError: If the archive cannot be extracted.
        """
        uri = self._source.uri
        vendored = self.is_vendored(version)
        if self.environment.local and not vendored:
            raise NotFoundError(f"Could not find a local copy of {uri} at {version}.")

        if not vendored and not self.unpacked.is_unpacked(version):
            with self._client_factory(self.environment) as client:
                self.archives.ensure_vendored(uri, version, client)

        self.cache_version_unpacked(version)

        if install_path.is_symlink() or install_path.is_file():
            install_path.unlink()
        elif install_path.exists():
            shutil.rmtree(install_path)

        unpacked_path = self.unpacked.first_child(version)
        get_output().debug(f"Copying {unpacked_path} to {install_path}")
        shutil.copytree(unpacked_path, install_path, symlinks=True)
        return install_path

    def cache_version_unpacked(self, version: str) -> Path:
        """Make sure *version* is extracted into the unpack cache.

        Extracts from the vendored archive when there is one, otherwise from
        a file named after the module in the working directory.
        """
        if self.unpacked.is_unpacked(version):
            return self.unpacked.path_for(version)
        uri = self._source.uri
        if self.is_vendored(version):
            target: Path = self.archives.vendored_path(uri, version)
        else:
            target = Path(self._name)
        return self.unpacked.ensure_unpacked(version, target)
