"""Summary bucket labels."""

from __future__ import annotations

import enum
import typing as typ

if typ.TYPE_CHECKING:
    from forager.github.models import CanonicalItem


class Bucket(enum.StrEnum):
    """Mutually exclusive activity categories shown in a summary.

    Declaration order is display order.
    """

    PRS_OPENED = "PRs - opened"
    PRS_UPDATED = "PRs - updated"
    PRS_REVIEWED = "PRs - reviewed"
    PRS_MERGED = "PRs - merged"
    PRS_CLOSED = "PRs - closed"
    ISSUES_OPENED = "Issues - opened"
    ISSUES_CLOSED = "Issues - closed"
    ISSUES_UPDATED_AUTHORED = "Issues (authored) - updated"
    ISSUES_UPDATED_ASSIGNED = "Issues (assigned) - updated"
    COMMITS = "Commits"
    OTHER_EVENTS = "Other Events"


ISSUE_BUCKETS = frozenset(
    {
        Bucket.ISSUES_OPENED,
        Bucket.ISSUES_CLOSED,
        Bucket.ISSUES_UPDATED_AUTHORED,
        Bucket.ISSUES_UPDATED_ASSIGNED,
    }
)

Groups = dict[Bucket, list["CanonicalItem"]]


def empty_groups() -> Groups:
    """Return a fresh mapping with an empty list for every bucket.

    Examples
    --------
    >>> groups = empty_groups()
    >>> len(groups), groups[Bucket.COMMITS]
    (11, [])

    """
    return {bucket: [] for bucket in Bucket}


def bucket_counts(groups: Groups) -> dict[str, int]:
    """Return ``{label: count}`` in display order."""
    return {str(bucket): len(groups.get(bucket, [])) for bucket in Bucket}
