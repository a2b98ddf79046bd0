"""Cache of unpacked versions, one directory per version.

Each version of a module is extracted once into
``<cache_path>/version/<md5(version)>/``. A GitHub tarball always holds a
single top-level directory (``<owner>-<repo>-<shortsha>``), so the unpacked
directory has exactly one child.

Extraction shells out to ``tar xzf <archive> -C <dir>``. It runs into a
temporary sibling directory that is renamed into place only once ``tar``
has succeeded, so an existing version directory is always complete.
"""

from __future__ import annotations

import hashlib
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from ghtarball.exceptions import ExtractionError
from ghtarball.output import get_output

TAR_TIMEOUT = 300


def hexdigest(value: str) -> str:
    """MD5 hex digest used to bucket versions into directory names."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def extract_tarball(archive: str | Path, target: Path) -> None:
    """Run ``tar xzf <archive> -C <target>``.

    Raises:
        ExtractionError: If ``tar`` is not on ``PATH``, times out, or exits
            non-zero.
    """
    args = ["tar", "xzf", str(archive), "-C", str(target)]
    get_output().debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=TAR_TIMEOUT,
        )
    except FileNotFoundError as exc:
        raise ExtractionError("tar executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise ExtractionError(f"Extracting {archive} timed out after {TAR_TIMEOUT}s") from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip()
        raise ExtractionError(
            f"Failed to extract {archive} (tar exited {result.returncode}): {detail}",
            returncode=result.returncode,
        )


class UnpackCache:
    """Extracted archives of one module, keyed by a hash of the version string.

    Args:
        cache_path: The module's cache directory; versions are unpacked under
            its ``version/`` subdirectory.
    """

    def __init__(self, cache_path: Path) -> None:
        self._cache_path = cache_path

    def path_for(self, version: str) -> Path:
        return self._cache_path / "version" / hexdigest(str(version))

    def is_unpacked(self, version: str) -> bool:
        return self.path_for(version).is_dir()

    def ensure_unpacked(self, version: str, archive: str | Path) -> Path:
        """Extract *archive* for *version* unless it is already unpacked.

        Args:
            version: Version string; hashed to pick the directory.
            archive: The ``.tar.gz`` to extract on a cache miss.

        Returns:
            The version directory.

        Raises:
            ExtractionError: If extraction fails. No partial directory is
                left behind.
        """
        path = self.path_for(version)
        if path.is_dir():
            return path

        path.parent.mkdir(parents=True, exist_ok=True)
        self._sweep_staging(path)
        staging = Path(tempfile.mkdtemp(prefix=f".{path.name}.", suffix=".partial", dir=path.parent))
        try:
            extract_tarball(archive, staging)
            os.rename(staging, path)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        get_output().debug(f"Unpacked {archive} into {path}")
        return path

    def first_child(self, version: str) -> Path:
        """Return the top-level entry extracted for *version*.

        Raises:
            ExtractionError: If the version directory is empty.
        """
        path = self.path_for(version)
        children = sorted(path.iterdir())
        if not children:
            raise ExtractionError(f"Unpacked cache {path} is empty")
        return children[0]

    @staticmethod
    def _sweep_staging(path: Path) -> None:
        """Remove staging directories an interrupted run left next to *path*."""
        for stale in path.parent.glob(f".{path.name}.*.partial"):
            get_output().debug(f"Removing stale staging directory {stale}")
            shutil.rmtree(stale, ignore_errors=True)
