"""Typer application and CLI entry point for ghtarball.

This module wires together the top-level Typer application and registers
the built-in commands (``versions``, ``install``, ``cache``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app.
:class:`~ghtarball.exceptions.GhTarballError` exits with its own code;
any other exception is written to a crash log under the data directory.

See Also:
    :mod:`ghtarball.config`: Environment resolution from the root flags.
    :mod:`ghtarball.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from ghtarball import __version__
from ghtarball.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="ghtarball",
    help="Resolve and install packages published as GitHub tags.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from ghtarball.commands.cache import cache_app  # noqa: E402
from ghtarball.commands.config import config_app  # noqa: E402
from ghtarball.commands.install import install_command  # noqa: E402
from ghtarball.commands.versions import versions_command  # noqa: E402

app.command("versions")(versions_command)
app.command("install")(install_command)
app.add_typer(cache_app, name="cache", help="Vendored archive cache management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ghtarball {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    local: Optional[bool] = typer.Option(
        None, "--local/--online", help="Offline mode: only install vendored archives."
    ),
    cache_path: Optional[str] = typer.Option(
        None, "--cache-path", help="Root of the unpacked-version cache."
    ),
    vendor_cache: Optional[str] = typer.Option(
        None, "--vendor-cache", help="Directory holding downloaded archives."
    ),
    install_path: Optional[str] = typer.Option(
        None, "--install-path", help="Directory modules are installed into."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~ghtarball.output.OutputManager` and
    stores the environment overrides in ``ctx.obj`` for
    :func:`~ghtarball.commands.environment_from_context`.
    """
    from ghtarball.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["local"] = local
    ctx.obj["cache_path"] = cache_path
    ctx.obj["vendor_cache"] = vendor_cache
    ctx.obj["install_path"] = install_path


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from ghtarball.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ghtarball`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from ghtarball.exceptions import GhTarballError
        from ghtarball.output import error

        if isinstance(exc, GhTarballError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
