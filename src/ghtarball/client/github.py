"""Synchronous GitHub client for tag listings and tarball downloads.

This module provides :class:`GitHubClient`, a thin wrapper around
:class:`httpx.Client` that knows the two GitHub endpoints ghtarball uses:

- ``GET /repos/<owner>/<repo>/tags`` -- paginated through the RFC 5988
  ``Link`` header until no ``rel="next"`` entry remains.
- ``GET /repos/<owner>/<repo>/tarball/<version>`` -- streamed to disk in
  fixed-size chunks.

When a token is configured it is appended to every request URL as an
``access_token`` query parameter. Nothing is retried: a rate-limit
response, any other non-200 answer, or a transport failure aborts the call
with a typed :mod:`ghtarball.exceptions` error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import httpx

from ghtarball import __version__
from ghtarball.config import TOKEN_KEY
from ghtarball.exceptions import ApiError, RateLimitError, TransportError
from ghtarball.models import Environment
from ghtarball.output import get_output

API_ROOT = "https://api.github.com"
PER_PAGE = 100
CHUNK_SIZE = 8192
RATE_LIMIT_MARKER = "API rate limit exceeded"


def user_agent() -> str:
    """Return the ``User-Agent`` header value sent with every request."""
    return f"ghtarball v{__version__}"


def tags_url(uri: str) -> str:
    """First-page URL of the tags listing for ``owner/repo``."""
    return f"{API_ROOT}/repos/{uri}/tags?page=1&per_page={PER_PAGE}"


def tarball_url(uri: str, version: str) -> str:
    return f"{API_ROOT}/repos/{uri}/tarball/{version}"


def strip_token(url: str) -> str:
    """Drop any ``access_token`` query parameter from *url*.

    GitHub echoes the token back in ``Link`` URLs. Stripping it keeps it out
    of messages, and :meth:`GitHubClient._with_token` adds it back per request.
    """
    parsed = httpx.URL(url)
    if "access_token" not in parsed.params:
        return url
    return str(parsed.copy_remove_param("access_token"))


class GitHubClient:
    """Blocking client for the GitHub tags and tarball endpoints.

    Must be used as a context manager so that the underlying transport is
    opened and closed around a unit of work.

    Args:
        environment: Supplies the API token and request settings
            (timeout, SSL verification).
        transport: Optional :mod:`httpx` transport, used by tests to plug in
            an :class:`httpx.MockTransport`.

    Example::

        with GitHubClient(env) as client:
            tags = client.fetch_tags("puppetlabs/puppetlabs-stdlib")
    """

    def __init__(
        self,
        environment: Environment,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._environment = environment
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> GitHubClient:
        config = self._environment.request
        self._client = httpx.Client(
            timeout=config.timeout,
            verify=config.verify_ssl,
            # Tarball URLs redirect to codeload.github.com.
            follow_redirects=True,
            headers={"User-Agent": user_agent()},
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def fetch_tags(self, uri: str) -> list[dict[str, Any]]:
        """Return every tag record of ``owner/repo`` across all pages.

        Args:
            uri: Repository identifier, e.g. ``"puppetlabs/puppetlabs-stdlib"``.

        Returns:
            The concatenated JSON arrays of all pages, in page order. Each
            element carries at least a ``name`` key.

        Raises:
            RateLimitError: On 403 with GitHub's rate-limit message.
            ApiError: On any other non-200 response.
            TransportError: On connection, TLS, or timeout failures.
        """
        output = get_output()
        tags: list[dict[str, Any]] = []
        url = tags_url(uri)
        while True:
            output.debug(f"  Module {uri} getting tags at: {url}")
            response = self._get(url)

            if response.status_code == 200:
                tags.extend(self._parse_page(url, response))
            else:
                self._raise_for_api_error(url, response)

            if "link" not in response.headers:
                break
            next_link = response.links.get("next")
            if not next_link or not next_link.get("url"):
                break
            # GitHub's next URL already carries page and per_page.
            url = strip_token(next_link["url"])
        return tags

    def download_tarball(self, uri: str, version: str, dest: Path) -> None:
        """Stream the tarball of ``uri`` at ``version`` into *dest*.

        *dest* is opened in binary write mode, so any earlier partial
        content is overwritten. If the download fails part-way the partial
        file is removed so that it is not mistaken for a vendored archive.

        Raises:
            ApiError: On a non-200 response.
            TransportError: On connection, TLS, or timeout failures.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"
        url = tarball_url(uri, version)
        get_output().debug(f"Downloading <{url}> to <{dest}>")

        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._client.stream("GET", self._with_token(url, first_param=True)) as response:
                if response.status_code != 200:
                    response.read()
                    raise ApiError(
                        f"Error requesting <{url}>: [{response.status_code}] {response.text}",
                        response.status_code,
                    )
                with open(dest, "wb") as fh:
                    for chunk in response.iter_bytes(CHUNK_SIZE):
                        fh.write(chunk)
        except httpx.HTTPError as exc:
            dest.unlink(missing_ok=True)
            raise TransportError(f"Error requesting <{url}>: {exc}", url) from exc
        except BaseException:
            dest.unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _with_token(self, url: str, first_param: bool = False) -> str:
        """Append ``access_token`` to *url* when a token is configured."""
        token = self._environment.api_token
        if not token:
            return url
        sep = "?" if first_param else "&"
        return f"{url}{sep}access_token={token}"

    def _get(self, url: str) -> httpx.Response:
        assert self._client is not None, "Client not initialised -- use as context manager"
        try:
            return self._client.get(self._with_token(url))
        except httpx.HTTPError as exc:
            raise TransportError(f"Error fetching {url}: {exc}", url) from exc

    @staticmethod
    def _parse_page(url: str, response: httpx.Response) -> list[dict[str, Any]]:
        try:
            page = response.json()
        except ValueError as exc:
            raise ApiError(
                f"Error fetching {url}: [{response.status_code}] invalid JSON: {exc}",
                response.status_code,
            ) from exc
        if not isinstance(page, list):
            raise ApiError(
                f"Error fetching {url}: [{response.status_code}] expected a JSON array",
                response.status_code,
            )
        return page

    @staticmethod
    def _raise_for_api_error(url: str, response: httpx.Response) -> None:
        """Raise the typed error for a non-200 tags response."""
        code = response.status_code
        message: Optional[str] = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])

        if code == 403 and message and RATE_LIMIT_MARKER in message:
            raise RateLimitError(
                f"{message} -- increase limit by authenticating via {TOKEN_KEY}=your-token"
            )
        if message:
            raise ApiError(f"Error fetching {url}: [{code}] {message}", code)
        raise ApiError(f"Error fetching {url}: [{code}] {response.text}", code)
