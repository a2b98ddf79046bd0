"""The GitHub tarball source: one repository, one :class:`~ghtarball.repo.Repo` per module name.

A dependency manager asks a source for the manifests of a module, picks a
version, and hands the chosen :class:`~ghtarball.models.Manifest` back to
:meth:`GitHubTarballSource.install`, which installs it under the
environment's ``install_path``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from ghtarball.client import GitHubClient
from ghtarball.exceptions import InvalidUsageError, NotFoundError
from ghtarball.models import Environment, Manifest, Source
from ghtarball.output import get_output
from ghtarball.repo import ClientFactory, Repo


def module_name(name: str) -> str:
    """Directory name a module installs into.

    Drops everything up to the first ``/`` or ``-``, so both
    ``"puppetlabs/stdlib"`` and ``"puppetlabs-stdlib"`` become ``"stdlib"``.
    """
    return re.split(r"[/-]", name, maxsplit=1)[-1]


class GitHubTarballSource:
    """A GitHub repository used as a package source.

    Args:
        uri: Repository identifier, ``owner/repo``.
        environment: Resolved runtime environment.
        client_factory: Forwarded to every :class:`~ghtarball.repo.Repo`.

    Raises:
        InvalidUsageError: If *uri* is not of the form ``owner/repo``.
    """

    def __init__(
        self,
        uri: str,
        environment: Environment,
        client_factory: ClientFactory = GitHubClient,
    ) -> None:
        try:
            self.source = Source(uri=uri, environment=environment)
        except ValueError as exc:
            raise InvalidUsageError(f"Invalid repository '{uri}': expected owner/repo") from exc
        self._client_factory = client_factory
        self._repos: dict[str, Repo] = {}

    @property
    def uri(self) -> str:
        return self.source.uri

    @property
    def environment(self) -> Environment:
        return self.source.environment

    def repo(self, name: str) -> Repo:
        """Return the memoized :class:`~ghtarball.repo.Repo` for *name*."""
        if name not in self._repos:
            self._repos[name] = Repo(self.source, name, client_factory=self._client_factory)
        return self._repos[name]

    def manifests(self, name: str) -> list[Manifest]:
        return self.repo(name).manifests()

    def fetch_version(self, name: str, requested: Optional[str] = None) -> str:
        """Pick the version to install.

        Args:
            name: Module name.
            requested: Wanted version, with or without a leading ``v``.
                ``None`` selects the first (newest) resolved version.

        Raises:
            NotFoundError: If *requested* is not a resolved version.
        """
        versions = self.repo(name).versions()
        if requested is None:
            if not versions:
                raise NotFoundError(f"No usable versions of {self.uri} found")
            return versions[0]
        wanted = re.sub(r"^v", "", requested)
        if wanted not in versions:
            raise NotFoundError(
                f"Version {requested} of {self.uri} not found "
                f"(available: {', '.join(versions) or 'none'})"
            )
        return wanted

    def install_path_for(self, name: str) -> Path:
        return self.environment.install_path / module_name(name)

    def install(self, manifest: Manifest, install_path: Optional[Path] = None) -> Path:
        """Install *manifest* and return the directory it was copied to.

        Args:
            manifest: Must come from this source.
            install_path: Destination override; defaults to
                ``<install_path>/<module_name>``.

        Raises:
            InvalidUsageError: If *manifest* belongs to another source.
        """
        if manifest.source.uri != self.uri:
            raise InvalidUsageError(
                f"Manifest {manifest} does not belong to source {self.uri}"
            )
        target = install_path or self.install_path_for(manifest.name)
        get_output().debug(f"Installing {manifest}")
        return self.repo(manifest.name).install_version(manifest.version, target)
