"""Canonical Pydantic models shared across all ghtarball modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig` and :class:`GlobalConfig`.

**Runtime models** -- built once per invocation and passed explicitly to the
components that need them:
    :class:`Environment`, :class:`Source`, and :class:`Manifest`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every GitHub API call and tarball download."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/ghtarball/config.json``.

    Loaded and saved by :func:`~ghtarball.config.load_global_config` and
    :func:`~ghtarball.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by environment variables or CLI
    flags. See :func:`~ghtarball.config.resolve_environment`.
    """

    local: bool = Field(
        default=False, description="Offline mode: only install vendored archives"
    )
    cache_path: Optional[str] = Field(
        default=None, description="Root of the unpacked-version cache"
    )
    vendor_cache: Optional[str] = Field(
        default=None, description="Directory holding downloaded .tar.gz archives"
    )
    install_path: Optional[str] = Field(
        default=None, description="Directory modules are installed into"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Runtime ---


class Environment(BaseModel):
    """Resolved runtime context shared by every component.

    Built by :func:`~ghtarball.config.resolve_environment` and handed to
    sources, repos, caches, and the HTTP client instead of having them read
    ambient state.
    """

    local: bool = False
    cache_path: Path
    vendor_cache: Path
    install_path: Path = Field(default_factory=lambda: Path("modules"))
    api_token: Optional[str] = None
    request: RequestConfig = Field(default_factory=RequestConfig)


class Source(BaseModel):
    """A GitHub repository identified by its ``owner/repo`` uri.

    Immutable once built. The unpacked-version caches of every module served
    from this source live under :attr:`cache_path`.
    """

    model_config = ConfigDict(frozen=True)

    uri: str
    environment: Environment

    @field_validator("uri")
    @classmethod
    def _check_uri(cls, value: str) -> str:
        owner, sep, repo = value.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"expected 'owner/repo', got {value!r}")
        return value

    @property
    def cache_path(self) -> Path:
        return self.environment.cache_path

    def __hash__(self) -> int:
        # Environment is mutable; equal sources always share a uri.
        return hash(self.uri)

    def __str__(self) -> str:
        return self.uri


class Manifest(BaseModel):
    """One installable ``(source, name, version)`` triple."""

    model_config = ConfigDict(frozen=True)

    source: Source
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name} ({self.version}) from {self.source.uri}"

