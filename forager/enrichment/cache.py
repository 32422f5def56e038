"""Process-lifetime memoization of pull request detail fetches."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from forager.github.models import PullRequestDetails


class DetailCache:
    """Append-only map from REST detail URL to a fetched snapshot.

    Entries are written once and never replaced or invalidated individually;
    only :meth:`clear` removes them. Reads are safe from any task; writes are
    expected from a single task at a time.

    Examples
    --------
    >>> from forager.github.models import PullRequestDetails
    >>> cache = DetailCache()
    >>> url = "https://api.github.com/repos/octo/reef/pulls/1"
    >>> cache.put(url, PullRequestDetails(title="Fix"))
    True
    >>> cache.put(url, PullRequestDetails(title="Other"))
    False
    >>> cache.get(url).title
    'Fix'

    """

    def __init__(self) -> None:
        """Create an empty cache."""
        self._entries: dict[str, PullRequestDetails] = {}

    def get(self, api_url: str) -> PullRequestDetails | None:
        """Return the snapshot for ``api_url``, if one was stored."""
        return self._entries.get(api_url)

    def put(self, api_url: str, details: PullRequestDetails) -> bool:
        """Store ``details`` unless ``api_url`` already has an entry.

        Returns True when the entry was written.
        """
        if api_url in self._entries:
            return False
        self._entries[api_url] = details
        return True

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, api_url: object) -> bool:
        """Return True when ``api_url`` has a stored snapshot."""
        return api_url in self._entries

    def __len__(self) -> int:
        """Return the number of stored snapshots."""
        return len(self._entries)


_shared_cache = DetailCache()


def shared_detail_cache() -> DetailCache:
    """Return the cache shared by enrichers that are not given their own."""
    return _shared_cache
