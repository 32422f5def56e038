"""Typed Events API payloads.

Each supported activity-feed event is a ``msgspec`` struct tagged by the
Events API ``type`` field, so a raw event decodes straight into the matching
variant. Every payload field is optional and may be ``null``: the Events API
omits a surprising amount of detail (recent ``PullRequestEvent`` payloads
carry little more than the PR number and URLs), and the normalizer fills the
gaps.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import logging
import typing as typ

import msgspec

from .models import Label, PullRequestMarker, UserRef  # noqa: TC001

logger = logging.getLogger(__name__)


class Actor(msgspec.Struct, kw_only=True, frozen=True):
    """Account that performed an event."""

    login: str = ""
    avatar_url: str | None = None


class EventRepo(msgspec.Struct, kw_only=True, frozen=True):
    """Repository an event happened in."""

    name: str = ""


class IssuePayloadEntity(msgspec.Struct, kw_only=True, frozen=True):
    """Issue object embedded in issue and issue-comment payloads."""

    id: int | None = None
    number: int | None = None
    html_url: str | None = None
    title: str | None = None
    body: str | None = None
    state: str | None = None
    labels: tuple[Label, ...] | None = None
    updated_at: dt.datetime | None = None
    closed_at: dt.datetime | None = None
    assignee: UserRef | None = None
    assignees: tuple[UserRef, ...] | None = None
    pull_request: PullRequestMarker | None = None


class PullRequestPayloadEntity(msgspec.Struct, kw_only=True, frozen=True):
    """Pull request object embedded in PR, review and review-comment payloads."""

    id: int | None = None
    number: int | None = None
    html_url: str | None = None
    url: str | None = None
    title: str | None = None
    body: str | None = None
    state: str | None = None
    labels: tuple[Label, ...] | None = None
    updated_at: dt.datetime | None = None
    closed_at: dt.datetime | None = None
    merged_at: dt.datetime | None = None
    merged: bool | None = None


class CommentPayloadEntity(msgspec.Struct, kw_only=True, frozen=True):
    """Comment object embedded in comment payloads."""

    id: int | None = None
    html_url: str | None = None
    body: str | None = None
    updated_at: dt.datetime | None = None


class ReviewPayloadEntity(msgspec.Struct, kw_only=True, frozen=True):
    """Review object embedded in review payloads."""

    id: int | None = None
    html_url: str | None = None
    user: UserRef | None = None
    submitted_at: dt.datetime | None = None
    state: str | None = None


class PushCommit(msgspec.Struct, kw_only=True, frozen=True):
    """Commit summary inside a push payload."""

    sha: str | None = None
    message: str | None = None


class Forkee(msgspec.Struct, kw_only=True, frozen=True):
    """Repository created by a fork."""

    full_name: str | None = None
    html_url: str | None = None


class WikiPage(msgspec.Struct, kw_only=True, frozen=True):
    """Wiki page touched by a Gollum event."""

    page_name: str | None = None
    title: str | None = None
    action: str | None = None
    html_url: str | None = None


class IssuesPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``IssuesEvent``."""

    action: str | None = None
    issue: IssuePayloadEntity | None = None


class PullRequestPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``PullRequestEvent``."""

    action: str | None = None
    number: int | None = None
    pull_request: PullRequestPayloadEntity | None = None
    labels: tuple[Label, ...] | None = None


class PullRequestReviewPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``PullRequestReviewEvent``."""

    action: str | None = None
    number: int | None = None
    pull_request: PullRequestPayloadEntity | None = None
    review: ReviewPayloadEntity | None = None


class PullRequestReviewCommentPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``PullRequestReviewCommentEvent``."""

    action: str | None = None
    number: int | None = None
    pull_request: PullRequestPayloadEntity | None = None
    comment: CommentPayloadEntity | None = None


class IssueCommentPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``IssueCommentEvent``."""

    action: str | None = None
    issue: IssuePayloadEntity | None = None
    comment: CommentPayloadEntity | None = None


class PushPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``PushEvent``."""

    ref: str | None = None
    head: str | None = None
    after: str | None = None
    before: str | None = None
    size: int | None = None
    distinct_size: int | None = None
    commits: tuple[PushCommit, ...] | None = None


class RefPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``CreateEvent`` and ``DeleteEvent``."""

    ref: str | None = None
    ref_type: str | None = None
    description: str | None = None


class ForkPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``ForkEvent``."""

    forkee: Forkee | None = None


class WatchPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``WatchEvent``."""

    action: str | None = None


class PublicPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``PublicEvent``."""


class GollumPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Payload for ``GollumEvent``."""

    pages: tuple[WikiPage, ...] | None = None


class _Event(msgspec.Struct, kw_only=True, frozen=True, tag_field="type", tag=True):
    """Fields shared by every Events API record."""

    id: str = ""
    actor: Actor = msgspec.field(default_factory=Actor)
    repo: EventRepo = msgspec.field(default_factory=EventRepo)
    created_at: dt.datetime


class IssuesEvent(_Event):
    """Issue opened, edited, closed, or reopened."""

    payload: IssuesPayload = msgspec.field(default_factory=IssuesPayload)


class PullRequestEvent(_Event):
    """Pull request opened, closed, merged, labelled, and so on."""

    payload: PullRequestPayload = msgspec.field(default_factory=PullRequestPayload)


class PullRequestReviewEvent(_Event):
    """Pull request review submitted."""

    payload: PullRequestReviewPayload = msgspec.field(
        default_factory=PullRequestReviewPayload
    )


class PullRequestReviewCommentEvent(_Event):
    """Comment on a pull request diff."""

    payload: PullRequestReviewCommentPayload = msgspec.field(
        default_factory=PullRequestReviewCommentPayload
    )


class IssueCommentEvent(_Event):
    """Comment on an issue or pull request conversation."""

    payload: IssueCommentPayload = msgspec.field(default_factory=IssueCommentPayload)


class PushEvent(_Event):
    """Commits pushed to a branch."""

    payload: PushPayload = msgspec.field(default_factory=PushPayload)


class CreateEvent(_Event):
    """Branch, tag, or repository created."""

    payload: RefPayload = msgspec.field(default_factory=RefPayload)


class DeleteEvent(_Event):
    """Branch or tag deleted."""

    payload: RefPayload = msgspec.field(default_factory=RefPayload)


class ForkEvent(_Event):
    """Repository forked."""

    payload: ForkPayload = msgspec.field(default_factory=ForkPayload)


class WatchEvent(_Event):
    """Repository starred."""

    payload: WatchPayload = msgspec.field(default_factory=WatchPayload)


class PublicEvent(_Event):
    """Repository made public."""

    payload: PublicPayload = msgspec.field(default_factory=PublicPayload)


class GollumEvent(_Event):
    """Wiki pages created or updated."""

    payload: GollumPayload = msgspec.field(default_factory=GollumPayload)


RawEvent = (
    IssuesEvent
    | PullRequestEvent
    | PullRequestReviewEvent
    | PullRequestReviewCommentEvent
    | IssueCommentEvent
    | PushEvent
    | CreateEvent
    | DeleteEvent
    | ForkEvent
    | WatchEvent
    | PublicEvent
    | GollumEvent
)

SUPPORTED_EVENT_TYPES: frozenset[str] = frozenset(
    cls.__name__ for cls in typ.get_args(RawEvent)
)


def decode_event(raw: object) -> RawEvent | None:
    """Decode a raw Events API record into its typed variant.

    Unsupported event types and payloads that do not fit the expected shape
    yield ``None``.
    """
    if isinstance(raw, _Event):
        return typ.cast("RawEvent", raw)
    if not isinstance(raw, dict) or raw.get("type") not in SUPPORTED_EVENT_TYPES:
        return None
    try:
        return msgspec.convert(raw, RawEvent)
    except msgspec.ValidationError as exc:
        logger.debug("Skipping malformed %s event: %s", raw.get("type"), exc)
        return None
