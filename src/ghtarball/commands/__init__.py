"""Built-in CLI command groups for ghtarball.

Each module defines a Typer command or sub-app registered on the root
application in :mod:`ghtarball.app`:

- :mod:`~ghtarball.commands.versions` -- ``ghtarball versions``
- :mod:`~ghtarball.commands.install` -- ``ghtarball install``
- :mod:`~ghtarball.commands.cache` -- ``ghtarball cache list|clean``
- :mod:`~ghtarball.commands.config` -- ``ghtarball config show|set|unset|reset``
"""

from __future__ import annotations

from typing import NoReturn

import typer

from ghtarball.exceptions import GhTarballError
from ghtarball.models import Environment


def environment_from_context(ctx: typer.Context) -> Environment:
    """Resolve the :class:`~ghtarball.models.Environment` from root CLI flags."""
    from ghtarball.config import resolve_environment

    obj = ctx.obj or {}
    return resolve_environment(
        cli_local=obj.get("local"),
        cli_cache_path=obj.get("cache_path"),
        cli_vendor_cache=obj.get("vendor_cache"),
        cli_install_path=obj.get("install_path"),
    )


def exit_with_error(exc: GhTarballError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code."""
    from ghtarball.config import TOKEN_KEY
    from ghtarball.exceptions import RateLimitError
    from ghtarball.output import error, suggest

    error(str(exc))
    if isinstance(exc, RateLimitError):
        suggest(f"export {TOKEN_KEY}=<your-token>")
    raise typer.Exit(code=exc.exit_code)
