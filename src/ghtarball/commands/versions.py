"""Versions command -- list the installable versions of a repository.

Lists the repository's tags through the GitHub API, keeps the ones shaped
like ``major.minor[.patch...]``, and prints them newest first.
"""

from __future__ import annotations

import typer

from ghtarball.commands import environment_from_context, exit_with_error
from ghtarball.exceptions import GhTarballError
from ghtarball.output import format_response


def versions_command(
    ctx: typer.Context,
    repository: str = typer.Argument(help="GitHub repository, as owner/repo."),
) -> None:
    """List available versions, newest first.

    Example::

        ghtarball versions puppetlabs/puppetlabs-stdlib
        ghtarball --json versions puppetlabs/puppetlabs-stdlib
    """
    from ghtarball.source import GitHubTarballSource

    try:
        environment = environment_from_context(ctx)
        source = GitHubTarballSource(repository, environment)
        versions = source.repo(repository.split("/")[-1]).versions()
    except GhTarballError as exc:
        exit_with_error(exc)

    format_response(versions)
