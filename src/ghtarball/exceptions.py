"""Exception hierarchy for ghtarball.

All exceptions inherit from :class:`GhTarballError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ghtarball.exit_codes`.
The top-level error handler in :func:`ghtarball.app.main` catches
``GhTarballError`` and exits with the appropriate code. Nothing in the core
retries; every error aborts the current resolve or install.

Subclass hierarchy::

    GhTarballError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- ApiError            (exit 5)
    |   +-- RateLimitError  (exit 3)
    +-- TransportError      (exit 6)
    +-- ExtractionError     (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from ghtarball.exit_codes import (
    EXIT_API_ERROR,
    EXIT_EXTRACTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RATE_LIMITED,
    EXIT_TRANSPORT_ERROR,
)


class GhTarballError(Exception):
    """Base exception for all ghtarball errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(GhTarballError):
    """Raised for malformed repository identifiers or mismatched manifests."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(GhTarballError):
    """Raised when a repository has no tags, a version is unknown, or offline mode has no local copy."""

    exit_code = EXIT_NOT_FOUND


class ApiError(GhTarballError):
    """Raised when the GitHub API answers with a non-200 status.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code of the failed response.
    """

    exit_code = EXIT_API_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ApiError):
    """Raised on HTTP 403 when GitHub reports that the API rate limit was exceeded."""

    exit_code = EXIT_RATE_LIMITED

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(message, status_code)


class TransportError(GhTarballError):
    """Raised on network-level failures (timeout, DNS, TLS, connection refused).

    Named to avoid shadowing the built-in ``ConnectionError``. The offending
    URL is kept on :attr:`url` and included in the message.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, url: str):
        super().__init__(message)
        self.url = url


class ExtractionError(GhTarballError):
    """Raised when ``tar`` is missing or exits non-zero while unpacking an archive."""

    exit_code = EXIT_EXTRACTION_ERROR

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class ConfigError(GhTarballError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
