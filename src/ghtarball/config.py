"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for ghtarball:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ghtarball/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~ghtarball.models.GlobalConfig`
  JSON file storing defaults (offline mode, cache locations, timeouts).
* **Precedence resolution** -- :func:`resolve_environment` merges CLI flags,
  environment variables, and global config into the
  :class:`~ghtarball.models.Environment` every component receives.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from ghtarball.exceptions import ConfigError
from ghtarball.models import Environment, GlobalConfig

_APP_NAME = "ghtarball"
_CONFIG_FILENAME = "config.json"

TOKEN_KEY = "GITHUB_API_TOKEN"
"""Environment variable holding the GitHub API token."""

_TRUTHY = ("1", "true", "yes", "on")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/ghtarball/`` (default ``~/.config/ghtarball/``).
    On macOS/Windows: ``~/.ghtarball/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the vendored archives and unpacked versions by default. Its
    contents can be safely deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/ghtarball/`` (default ``~/.cache/ghtarball/``).
    On macOS/Windows: ``~/.ghtarball/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ghtarball/`` (default ``~/.local/share/ghtarball/``).
    On macOS/Windows: ``~/.ghtarball/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~ghtarball.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in _TRUTHY


def _pick_path(cli_value: Optional[str], env_var: str, configured: Optional[str], default: Path) -> Path:
    """Return the first of CLI value, env var, configured value, default."""
    if cli_value:
        return Path(cli_value).expanduser()
    env_value = os.environ.get(env_var)
    if env_value:
        return Path(env_value).expanduser()
    if configured:
        return Path(configured).expanduser()
    return default


def get_api_token() -> Optional[str]:
    """Return the GitHub API token from ``$GITHUB_API_TOKEN``, or ``None`` if unset or empty."""
    return os.environ.get(TOKEN_KEY) or None


def resolve_environment(
    cli_local: Optional[bool] = None,
    cli_cache_path: Optional[str] = None,
    cli_vendor_cache: Optional[str] = None,
    cli_install_path: Optional[str] = None,
) -> Environment:
    """Resolve the runtime :class:`~ghtarball.models.Environment`.

    Precedence (high to low):
        1. CLI flags (``--local``, ``--cache-path``, ``--vendor-cache``,
           ``--install-path``)
        2. Environment variables (``GHTARBALL_LOCAL``,
           ``GHTARBALL_CACHE_PATH``, ``GHTARBALL_VENDOR_CACHE``,
           ``GHTARBALL_INSTALL_PATH``)
        3. User config (``~/.config/ghtarball/config.json``)
        4. Defaults (``<cache_dir>/source``, ``<cache_dir>/vendor``,
           ``./modules``)

    The API token always comes from ``$GITHUB_API_TOKEN``.
    """
    global_cfg = load_global_config()

    local = global_cfg.local
    env_local = _env_flag("GHTARBALL_LOCAL")
    if env_local is not None:
        local = env_local
    if cli_local is not None:
        local = cli_local

    cache_dir = get_cache_dir()
    return Environment(
        local=local,
        cache_path=_pick_path(
            cli_cache_path, "GHTARBALL_CACHE_PATH", global_cfg.cache_path, cache_dir / "source"
        ),
        vendor_cache=_pick_path(
            cli_vendor_cache, "GHTARBALL_VENDOR_CACHE", global_cfg.vendor_cache, cache_dir / "vendor"
        ),
        install_path=_pick_path(
            cli_install_path, "GHTARBALL_INSTALL_PATH", global_cfg.install_path, Path("modules")
        ),
        api_token=get_api_token(),
        request=global_cfg.request,
    )
