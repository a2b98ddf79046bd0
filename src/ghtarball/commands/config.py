"""``ghtarball config`` -- inspect and edit the saved defaults.

Only the keys listed in :data:`SETTINGS` can be written. Path keys have
``~`` expanded before they are saved; the two cache directories are also
made absolute so that they do not depend on the directory ghtarball is run
from. ``install_path`` may stay relative.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import typer

from ghtarball.commands import exit_with_error
from ghtarball.exceptions import GhTarballError, InvalidUsageError
from ghtarball.models import GlobalConfig
from ghtarball.output import format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_FALSY = ("0", "false", "no", "off")


def _parse_bool(raw: str) -> bool:
    from ghtarball.config import _TRUTHY

    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise InvalidUsageError(f"Expected true or false, got '{raw}'")


def _parse_timeout(raw: str) -> int:
    try:
        seconds = int(raw)
    except ValueError:
        raise InvalidUsageError(f"Expected a number of seconds, got '{raw}'") from None
    if seconds <= 0:
        raise InvalidUsageError(f"Timeout must be positive, got {seconds}")
    return seconds


def _parse_path(raw: str) -> str:
    if not raw.strip():
        raise InvalidUsageError("Path must not be empty; use 'config unset' to clear it")
    return str(Path(raw).expanduser())


def _parse_cache_dir(raw: str) -> str:
    return str(Path(_parse_path(raw)).absolute())


SETTINGS: dict[str, Callable[[str], Any]] = {
    "local": _parse_bool,
    "cache_path": _parse_cache_dir,
    "vendor_cache": _parse_cache_dir,
    "install_path": _parse_path,
    "request.timeout": _parse_timeout,
    "request.verify_ssl": _parse_bool,
}
"""Writable keys and the parser that turns the raw CLI string into a value."""


def _check_key(key: str) -> None:
    if key not in SETTINGS:
        raise InvalidUsageError(
            f"Unknown config key: {key} (choose from: {', '.join(SETTINGS)})"
        )


def _updated(config: GlobalConfig, key: str, value: Any) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set to *value*."""
    section, _, field = key.rpartition(".")
    if not section:
        return config.model_copy(update={field: value})
    nested = getattr(config, section).model_copy(update={field: value})
    return config.model_copy(update={section: nested})


def _default_for(key: str) -> Any:
    value: Any = GlobalConfig()
    for part in key.split("."):
        value = getattr(value, part)
    return value


@config_app.command("show")
def config_show() -> None:
    """Show the saved configuration."""
    from ghtarball.config import get_config_dir, load_global_config

    try:
        config = load_global_config()
    except GhTarballError as exc:
        exit_with_error(exc)
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="One of: " + ", ".join(SETTINGS)),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Save a default.

    Example::

        ghtarball config set local true
        ghtarball config set vendor_cache ~/vendor
        ghtarball config set request.timeout 60
    """
    from ghtarball.config import load_global_config, save_global_config

    try:
        _check_key(key)
        parsed = SETTINGS[key](value)
        save_global_config(_updated(load_global_config(), key, parsed))
    except GhTarballError as exc:
        exit_with_error(exc)
    success(f"Set {key} = {parsed}")


@config_app.command("unset")
def config_unset(
    key: str = typer.Argument(help="Key to return to its default."),
) -> None:
    """Return one key to its default (path keys go back to unset)."""
    from ghtarball.config import load_global_config, save_global_config

    try:
        _check_key(key)
        save_global_config(_updated(load_global_config(), key, _default_for(key)))
    except GhTarballError as exc:
        exit_with_error(exc)
    success(f"Unset {key}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Forget every saved default."""
    from ghtarball.config import save_global_config

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
