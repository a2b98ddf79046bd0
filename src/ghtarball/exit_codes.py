"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ghtarball.exceptions.GhTarballError` subclass.

Example::

    $ ghtarball versions someone/missing
    $ echo $?
    4   # EXIT_NOT_FOUND -- the repository has no tags
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_RATE_LIMITED = 3
"""GitHub refused the request because the API rate limit was exceeded."""

EXIT_NOT_FOUND = 4
"""No tags, no matching version, or no local copy in offline mode."""

EXIT_API_ERROR = 5
"""The GitHub API returned an unexpected non-200 response."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, TLS, connection refused)."""

EXIT_EXTRACTION_ERROR = 7
"""The downloaded archive could not be extracted."""
