"""Install command -- materialise one version of a repository on disk.

Resolves the requested version (the newest one when omitted), makes sure
its tarball is vendored and unpacked, and copies the unpacked tree into
the install directory, replacing whatever was there.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ghtarball.commands import environment_from_context, exit_with_error
from ghtarball.exceptions import GhTarballError, InvalidUsageError
from ghtarball.output import info, success


def install_command(
    ctx: typer.Context,
    repository: str = typer.Argument(help="GitHub repository, as owner/repo."),
    version: Optional[str] = typer.Argument(
        None, help="Version to install. Defaults to the newest one."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Module name. Defaults to the repository name."
    ),
    path: Optional[str] = typer.Option(
        None, "--path", help="Install directory. Defaults to <install-path>/<module>."
    ),
) -> None:
    """Install a version of a module from its GitHub tags.

    In offline mode (``--local``) only already-vendored archives can be
    installed and the tags listing is not consulted, so *version* is
    required.

    Example::

        ghtarball install puppetlabs/puppetlabs-stdlib 4.1.0
        ghtarball --local install puppetlabs/puppetlabs-stdlib 4.1.0 --path modules/stdlib
    """
    from ghtarball.models import Manifest
    from ghtarball.source import GitHubTarballSource

    module = name or repository.split("/")[-1]
    try:
        environment = environment_from_context(ctx)
        source = GitHubTarballSource(repository, environment)
        if environment.local:
            if version is None:
                raise InvalidUsageError("A version is required in offline mode")
            resolved = version.removeprefix("v")
        else:
            resolved = source.fetch_version(module, version)
        info(f"Installing {repository} {resolved}")
        manifest = Manifest(source=source.source, name=module, version=resolved)
        installed = source.install(manifest, Path(path) if path else None)
    except GhTarballError as exc:
        exit_with_error(exc)

    success(f"Installed {repository} {resolved} into {installed}")
