"""Repository slug and pull-request URL utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They are not
filesystem paths, even though they use ``/`` as a separator, so they should be
parsed using these helpers rather than ``pathlib``.
"""

from __future__ import annotations

import dataclasses
import re

_PR_HTML_URL = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")
_PR_NUMBER_IN_HTML_URL = re.compile(r"/pull/(\d+)")
_PR_NUMBER_IN_API_URL = re.compile(r"/pulls/(\d+)")


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("octo", "reef")
    'octo/reef'

    """
    return f"{owner}/{name}"


def slug_owner(slug: str) -> str:
    """Return the owner part of a slug, or the whole value when it has none."""
    owner, _, _ = slug.partition("/")
    return owner


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequestRef:
    """A pull request addressed by repository and number."""

    owner: str
    name: str
    number: int

    @property
    def slug(self) -> str:
        """Return ``owner/name``."""
        return repo_slug(self.owner, self.name)

    def api_url(self, api_base: str = "https://api.github.com") -> str:
        """Return the REST detail URL for this pull request."""
        return f"{api_base.rstrip('/')}/repos/{self.slug}/pulls/{self.number}"


def parse_pull_request_url(url: str | None) -> PullRequestRef | None:
    """Parse a ``https://github.com/owner/repo/pull/123`` URL.

    Fragments and trailing path segments (``/files``, ``#discussion_r1``) are
    ignored. Returns ``None`` when the URL does not address a pull request.

    Examples
    --------
    >>> parse_pull_request_url("https://github.com/octo/reef/pull/7#review-1")
    PullRequestRef(owner='octo', name='reef', number=7)

    """
    if not url:
        return None
    match = _PR_HTML_URL.search(url)
    if match is None:
        return None
    owner, name, number = match.groups()
    return PullRequestRef(owner=owner, name=name, number=int(number))


def pull_request_number_from_urls(
    html_url: str | None, api_url: str | None
) -> int | None:
    """Recover a PR number from its HTML URL, falling back to its API URL."""
    for url, pattern in (
        (html_url, _PR_NUMBER_IN_HTML_URL),
        (api_url, _PR_NUMBER_IN_API_URL),
    ):
        if url:
            match = pattern.search(url)
            if match is not None:
                return int(match.group(1))
    return None


def base_url(url: str) -> str:
    """Strip any ``#fragment`` from a URL."""
    return url.split("#", 1)[0]
