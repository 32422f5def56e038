"""Canonical activity item shared by every pipeline stage."""

from __future__ import annotations

import datetime as dt  # noqa: TC003

import msgspec


class Label(msgspec.Struct, kw_only=True, frozen=True):
    """Issue or pull request label."""

    name: str
    color: str | None = None
    description: str | None = None


class UserRef(msgspec.Struct, kw_only=True, frozen=True):
    """GitHub account reference."""

    login: str
    avatar_url: str | None = None
    html_url: str | None = None


class RepositoryRef(msgspec.Struct, kw_only=True, frozen=True):
    """Repository reference attached to an item."""

    full_name: str
    html_url: str | None = None


class PullRequestMarker(msgspec.Struct, kw_only=True, frozen=True):
    """Marker present on items that describe a pull request.

    The Search API attaches this to issue-shaped PR results; the normalizer
    synthesizes it for pull request events.
    """

    merged_at: dt.datetime | None = None
    url: str | None = None
    html_url: str | None = None


class CanonicalItem(msgspec.Struct, kw_only=True, frozen=True):
    """Source-agnostic representation of one activity record.

    Attributes
    ----------
    id
        Entity identifier (issue, PR, comment) or the numeric event id for
        synthetic items such as pushes.
    event_id
        Activity-feed event id when the item was derived from an event.
    html_url
        Browser URL; the identity used for deduplication.
    title
        Display title, possibly synthesized by the normalizer.
    created_at, updated_at
        Aware UTC timestamps. Event-derived items use the event time as
        ``created_at``.
    closed_at, merged_at, merged
        Lifecycle facts for issues and pull requests.
    state
        ``open`` or ``closed``.
    labels
        Ordered labels.
    user
        The acting user for events, the author for search results.
    pull_request
        PR marker; ``None`` for plain issues and synthetic items.
    original_event_type
        Events API ``type`` for event-derived items, ``None`` for search
        results. Used only by the enrichers and kind detection.
    reviewed_by, reviewed_at
        Reviewer and true review submission time, when known.

    """

    id: int
    html_url: str
    title: str = ""
    created_at: dt.datetime
    updated_at: dt.datetime
    state: str = "open"
    event_id: str | None = None
    closed_at: dt.datetime | None = None
    merged_at: dt.datetime | None = None
    merged: bool = False
    body: str | None = None
    labels: tuple[Label, ...] = ()
    repository_url: str | None = None
    repository: RepositoryRef | None = None
    number: int | None = None
    user: UserRef
    assignee: UserRef | None = None
    assignees: tuple[UserRef, ...] = ()
    pull_request: PullRequestMarker | None = None
    original_event_type: str | None = None
    reviewed_by: UserRef | None = None
    reviewed_at: dt.datetime | None = None

    @property
    def is_event_derived(self) -> bool:
        """Return True when the item came from the Events API."""
        return self.original_event_type is not None

    @property
    def is_pull_request(self) -> bool:
        """Return True when the item carries a pull request marker."""
        return self.pull_request is not None

    @property
    def effective_merged_at(self) -> dt.datetime | None:
        """Return the merge time from the item or its PR marker."""
        if self.merged_at is not None:
            return self.merged_at
        if self.pull_request is not None:
            return self.pull_request.merged_at
        return None

    @property
    def repository_name(self) -> str | None:
        """Return ``owner/name`` for the item's repository, if known."""
        if self.repository is not None:
            return self.repository.full_name
        if self.repository_url:
            return self.repository_url.removeprefix("https://api.github.com/repos/")
        return None


class PullRequestDetails(msgspec.Struct, kw_only=True, frozen=True):
    """Snapshot of ``GET /repos/{owner}/{repo}/pulls/{number}``.

    Only the fields the detail enricher overlays onto items are kept.
    """

    title: str = ""
    state: str = ""
    body: str | None = None
    html_url: str = ""
    labels: tuple[Label, ...] = ()
    updated_at: dt.datetime | None = None
    closed_at: dt.datetime | None = None
    merged_at: dt.datetime | None = None
    merged: bool | None = None
