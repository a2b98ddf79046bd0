"""ghtarball -- Resolve and install packages published as GitHub tags.

This package discovers the released versions of a GitHub-hosted module by
listing the repository's tags, downloads the matching tarball into a vendor
cache, unpacks it once into a per-version cache directory, and copies the
unpacked tree into a target install directory.

Typical workflow::

    ghtarball versions puppetlabs/puppetlabs-stdlib
    ghtarball install puppetlabs/puppetlabs-stdlib 4.1.0

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and environment resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    repo: Version resolution and installation for one module.
    source: The tag-backed source owning one repo per module name.
"""

__version__ = "0.3.0"
