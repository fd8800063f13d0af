"""
Errors raised by the GitHub client.

The client always raises; callers in app.relay decide whether a failure is
masked into a null/false/partial result.
"""

from typing import Any, Optional


class GitHubError(Exception):
    """Base class for every failed call to GitHub."""


class UpstreamError(GitHubError):
    """GitHub answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Any = None, url: Optional[str] = None):
        super().__init__(f"GitHub returned {status_code} for {url or 'request'}")
        self.status_code = status_code
        self.body = body
        self.url = url


class GraphQLError(UpstreamError):
    """GraphQL answered 200 but with errors and no data."""

    def __init__(self, errors: list, url: Optional[str] = None):
        super().__init__(200, {"errors": errors}, url)
        self.errors = errors


class NetworkError(GitHubError):
    """The request never produced an HTTP response (DNS, connection, timeout)."""
