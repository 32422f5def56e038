"""Assign canonical items to summary buckets for a date window.

Two date modes exist. Strict mode re-checks every timestamp against the
window, which is what event-derived items need because the Events API is not
date-scoped. Trusted mode is for items returned by a date-scoped search: the
query already established relevance, so only the reason for the bucket is
checked against the window.

Review items are deduplicated per classification pass on
``reviewer:base PR URL``; the caller owns that set and must use a fresh one
for every pass.
"""

from __future__ import annotations

import collections.abc as cabc
import enum
import logging
import typing as typ

from forager.common.slug import base_url

from .buckets import ISSUE_BUCKETS, Bucket, Groups, empty_groups

if typ.TYPE_CHECKING:
    from forager.common.time import DateWindow
    from forager.github.models import CanonicalItem

logger = logging.getLogger(__name__)


class ItemKind(enum.StrEnum):
    """What an item describes, as far as bucketing is concerned."""

    REVIEW = "review"
    REVIEW_COMMENT = "review_comment"
    COMMENT = "comment"
    COMMIT = "commit"
    OTHER = "other"
    PULL_REQUEST = "pull_request"
    ISSUE = "issue"


_TITLE_PREFIX_KINDS = (
    ("Review on:", ItemKind.REVIEW),
    ("Review comment on:", ItemKind.REVIEW_COMMENT),
    ("Comment on:", ItemKind.COMMENT),
    ("Pushed", ItemKind.COMMIT),
)

_OTHER_TITLE_PREFIXES = (
    "Created branch",
    "Created tag",
    "Created repository",
    "Deleted branch",
    "Deleted tag",
    "Forked repository",
    "Starred",
    "Unstarred",
    "Made repository public",
)


def _issue_or_pull_request(item: CanonicalItem) -> ItemKind:
    return ItemKind.PULL_REQUEST if item.is_pull_request else ItemKind.ISSUE


def item_kind(item: CanonicalItem) -> ItemKind:
    """Resolve an item's kind from its title prefix, then its PR marker.

    Provenance is not consulted, so event-derived and search-derived items
    with the same title and marker get the same kind.
    """
    title = item.title
    for prefix, kind in _TITLE_PREFIX_KINDS:
        if title.startswith(prefix):
            return kind
    if title.startswith(_OTHER_TITLE_PREFIXES) or "wiki page" in title:
        return ItemKind.OTHER
    return _issue_or_pull_request(item)


def parse_usernames(raw: str) -> list[str]:
    """Split a comma-separated username list into lower-cased logins.

    Examples
    --------
    >>> parse_usernames("a, B")
    ['a', 'b']

    """
    return [name.strip().lower() for name in raw.split(",") if name.strip()]


def review_key(item: CanonicalItem) -> str:
    """Return the ``reviewer:base PR URL`` dedup key for a review item."""
    reviewer = item.reviewed_by or item.user
    return f"{reviewer.login.lower()}:{base_url(item.html_url)}"


def _classify_pull_request(
    item: CanonicalItem, window: DateWindow, *, strict: bool
) -> Bucket | None:
    merged_at = item.effective_merged_at
    merged = item.merged or merged_at is not None
    merged_in_window = merged and window.contains(merged_at)
    closed_in_window = item.state == "closed" and window.contains(item.closed_at)
    created_in_window = window.contains(item.created_at)

    if merged_in_window:
        return Bucket.PRS_MERGED
    if closed_in_window and not merged:
        return Bucket.PRS_CLOSED
    if created_in_window:
        return Bucket.PRS_OPENED
    if not strict:
        return Bucket.PRS_UPDATED
    if window.contains(item.updated_at) and not closed_in_window:
        return Bucket.PRS_UPDATED
    return None


def _classify_issue(
    item: CanonicalItem,
    usernames: cabc.Collection[str],
    window: DateWindow,
    *,
    strict: bool,
) -> Bucket | None:
    closed_in_window = item.state == "closed" and window.contains(item.closed_at)
    if closed_in_window:
        return Bucket.ISSUES_CLOSED
    if window.contains(item.created_at):
        return Bucket.ISSUES_OPENED
    if strict and not window.contains(item.updated_at):
        return None
    if item.user.login.lower() in usernames:
        return Bucket.ISSUES_UPDATED_AUTHORED
    return Bucket.ISSUES_UPDATED_ASSIGNED


def classify_item(  # noqa: PLR0911
    item: CanonicalItem,
    usernames: cabc.Collection[str],
    seen_review_keys: set[str],
    window: DateWindow,
    *,
    strict: bool,
) -> Bucket | None:
    """Return the bucket for ``item``, or ``None`` to leave it out.

    Parameters
    ----------
    item
        The item to classify.
    usernames
        Lower-cased logins the summary is for; decides authored versus
        assigned for updated issues.
    seen_review_keys
        Review keys already bucketed in this pass. Updated in place.
    window
        The summary window.
    strict
        Re-check window membership of every timestamp when True; trust the
        item's relevance when False.

    """
    kind = item_kind(item)
    match kind:
        case ItemKind.REVIEW:
            key = review_key(item)
            if key in seen_review_keys:
                return None
            seen_review_keys.add(key)
            return Bucket.PRS_REVIEWED
        case ItemKind.REVIEW_COMMENT:
            return None
        case ItemKind.COMMIT:
            return Bucket.COMMITS
        case ItemKind.OTHER:
            return Bucket.OTHER_EVENTS
        case ItemKind.COMMENT if item.is_pull_request:
            return _classify_pull_request(item, window, strict=strict)
        case ItemKind.PULL_REQUEST:
            return _classify_pull_request(item, window, strict=strict)
        case ItemKind.COMMENT | ItemKind.ISSUE:
            return _classify_issue(item, usernames, window, strict=strict)
        case _ as unreachable:
            typ.assert_never(unreachable)


def _normalized_usernames(usernames: cabc.Iterable[str]) -> frozenset[str]:
    return frozenset(name.strip().lower() for name in usernames if name.strip())


def group_items(
    items: cabc.Iterable[CanonicalItem],
    usernames: cabc.Iterable[str],
    window: DateWindow,
    *,
    strict: bool | None = None,
) -> Groups:
    """Bucket ``items`` in order, returning every bucket (empty ones too).

    When ``strict`` is ``None`` each item's mode follows its provenance:
    event-derived items are checked strictly and search results are trusted.
    A fresh review-key set is used for each call.
    """
    logins = _normalized_usernames(usernames)
    groups = empty_groups()
    seen_review_keys: set[str] = set()
    dropped = 0
    for item in items:
        item_strict = item.is_event_derived if strict is None else strict
        bucket = classify_item(
            item, logins, seen_review_keys, window, strict=item_strict
        )
        if bucket is None:
            dropped += 1
            continue
        groups[bucket].append(item)
    logger.debug("Grouped items; %d left out of every bucket", dropped)
    return groups


def group_summary(
    event_items: cabc.Iterable[CanonicalItem],
    search_items: cabc.Iterable[CanonicalItem],
    usernames: cabc.Iterable[str],
    window: DateWindow,
) -> Groups:
    """Combine event-derived and search-derived items into one summary.

    Event items are grouped strictly. Search pull requests merged inside the
    window are then added to the merged bucket unless already present, and
    search issues not already in an issue bucket are classified strictly and
    added where they land in an issue bucket.
    """
    logins = _normalized_usernames(usernames)
    groups = group_items(event_items, logins, window, strict=True)
    search = list(search_items)

    merged_urls = {item.html_url for item in groups[Bucket.PRS_MERGED]}
    for item in search:
        if not item.is_pull_request or item.html_url in merged_urls:
            continue
        if window.contains(item.effective_merged_at):
            groups[Bucket.PRS_MERGED].append(item)
            merged_urls.add(item.html_url)

    issue_urls = {
        item.html_url for bucket in ISSUE_BUCKETS for item in groups[bucket]
    }
    seen_review_keys: set[str] = set()
    for item in search:
        if item.is_pull_request or item.html_url in issue_urls:
            continue
        bucket = classify_item(item, logins, seen_review_keys, window, strict=True)
        if bucket in ISSUE_BUCKETS:
            groups[bucket].append(item)
            issue_urls.add(item.html_url)
    return groups
