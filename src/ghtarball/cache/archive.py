"""Vendor cache of downloaded ``.tar.gz`` archives.

Archives live flat in the environment's ``vendor_cache`` directory, one file
per package, named ``<owner>-<repo>-<version>.tar.gz``. Presence of the file
is the only validity signal: there is no checksum and no expiry.

Before a new version is downloaded every archive whose name starts with the
package's mangled name is deleted, so at most one archive per package stays
on disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ghtarball.models import Environment
from ghtarball.output import get_output

if TYPE_CHECKING:
    from ghtarball.client import GitHubClient

ARCHIVE_SUFFIX = ".tar.gz"


def archive_prefix(uri: str) -> str:
    """Mangle ``owner/repo`` into the ``owner-repo`` archive file prefix."""
    return uri.replace("/", "-", 1)


class ArchiveCache:
    """Downloaded tarballs keyed by ``(uri, version)``.

    Args:
        environment: Supplies the ``vendor_cache`` directory.
    """

    def __init__(self, environment: Environment) -> None:
        self._environment = environment

    @property
    def root(self) -> Path:
        return self._environment.vendor_cache

    def vendored_path(self, uri: str, version: str) -> Path:
        """Return the archive path for ``uri`` at ``version``, creating the vendor dir."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root / f"{archive_prefix(uri)}-{version}{ARCHIVE_SUFFIX}"

    def is_vendored(self, uri: str, version: str) -> bool:
        return self.vendored_path(uri, version).exists()

    def clean_up_old_cached_versions(self, uri: str) -> list[Path]:
        """Delete every cached archive of ``uri``, whatever its version.

        Matches on file name prefix, so any archive named
        ``<owner>-<repo>*.tar.gz`` is removed.

        Returns:
            The removed paths.
        """
        if not self.root.is_dir():
            return []
        prefix = archive_prefix(uri)
        removed = []
        for path in sorted(self.root.iterdir()):
            if path.is_file() and path.name.startswith(prefix) and path.name.endswith(ARCHIVE_SUFFIX):
                get_output().debug(f"Removing old cached archive <{path}>")
                path.unlink()
                removed.append(path)
        return removed

    def ensure_vendored(self, uri: str, version: str, client: GitHubClient) -> Path:
        """Return the archive path, downloading it first if it is not cached.

        Args:
            uri: Repository identifier.
            version: Tag to download.
            client: An entered :class:`~ghtarball.client.GitHubClient`.
        """
        path = self.vendored_path(uri, version)
        if path.exists():
            return path
        self.clean_up_old_cached_versions(uri)
        client.download_tarball(uri, version, path)
        return path

    def list_archives(self) -> list[Path]:
        """Return every cached archive, sorted by file name."""
        if not self.root.is_dir():
            return []
        return sorted(
            p for p in self.root.iterdir() if p.is_file() and p.name.endswith(ARCHIVE_SUFFIX)
        )
