"""HTTP client module for ghtarball.

Provides :class:`GitHubClient`, a blocking client backed by
:class:`httpx.Client` that lists a repository's tags (following
``Link``-header pagination) and streams tarballs to disk.

Example::

    from ghtarball.client import GitHubClient

    with GitHubClient(environment) as client:
        tags = client.fetch_tags("owner/repo")
"""

from ghtarball.client.github import GitHubClient, user_agent

__all__ = ["GitHubClient", "user_agent"]
