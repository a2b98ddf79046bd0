"""Cache commands -- inspect and prune the vendored archive cache.

Provides the ``ghtarball cache`` sub-command group. ``list`` shows every
downloaded ``.tar.gz`` in the vendor cache; ``clean`` removes the archives
of one repository, or of every repository when none is given.
"""

from __future__ import annotations

import shutil
from typing import Optional

import typer

from ghtarball.commands import environment_from_context
from ghtarball.output import info, print_table, success


cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("list")
def cache_list(ctx: typer.Context) -> None:
    """List vendored archives with their sizes.

    Example::

        ghtarball cache list
        ghtarball --json cache list
    """
    from ghtarball.cache import ArchiveCache

    environment = environment_from_context(ctx)
    archives = ArchiveCache(environment).list_archives()
    info(f"Vendor cache: {environment.vendor_cache}")
    if not archives:
        info("No vendored archives.")
        return
    rows = [[p.name, f"{p.stat().st_size / 1024:.1f} KiB"] for p in archives]
    print_table(["Archive", "Size"], rows, title="Vendored archives")


@cache_app.command("clean")
def cache_clean(
    ctx: typer.Context,
    repository: Optional[str] = typer.Argument(
        None, help="Only remove archives of this owner/repo."
    ),
    unpacked: bool = typer.Option(
        False, "--unpacked", help="Also remove every unpacked version."
    ),
) -> None:
    """Remove vendored archives (and optionally unpacked versions).

    Example::

        ghtarball cache clean puppetlabs/puppetlabs-stdlib
        ghtarball cache clean --unpacked
    """
    from ghtarball.cache import ArchiveCache

    environment = environment_from_context(ctx)
    archives = ArchiveCache(environment)
    if repository:
        removed = archives.clean_up_old_cached_versions(repository)
    else:
        removed = archives.list_archives()
        for path in removed:
            path.unlink()
    success(f"Removed {len(removed)} archive(s).")

    if unpacked and environment.cache_path.exists():
        shutil.rmtree(environment.cache_path)
        success(f"Removed unpacked versions under {environment.cache_path}.")
