"""On-disk caches for vendored archives and unpacked versions.

:class:`ArchiveCache` keeps the downloaded ``.tar.gz`` of each package in
the environment's vendor cache, and :class:`UnpackCache` keeps one
extracted tree per version under a module's cache path.
"""

from ghtarball.cache.archive import ArchiveCache
from ghtarball.cache.unpack import UnpackCache

__all__ = ["ArchiveCache", "UnpackCache"]
