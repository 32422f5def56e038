"""Normalize Events API records into canonical items.

Feed events are reported from the actor's point of view, so every item's
``user`` is the event actor rather than the original author of the issue or
pull request. Titles for events that do not describe an issue or pull request
are synthesized so the classifier can recognise them.
"""

from __future__ import annotations

import typing as typ

from forager.common.slug import pull_request_number_from_urls, slug_owner
from forager.common.time import DateWindow, ensure_utc

from .events import (
    CreateEvent,
    DeleteEvent,
    ForkEvent,
    GollumEvent,
    IssueCommentEvent,
    IssuesEvent,
    PublicEvent,
    PullRequestEvent,
    PullRequestPayloadEntity,
    PullRequestReviewCommentEvent,
    PullRequestReviewEvent,
    PushEvent,
    WatchEvent,
    decode_event,
)
from .models import CanonicalItem, PullRequestMarker, RepositoryRef, UserRef

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .events import IssuePayloadEntity, RawEvent, WikiPage, _Event

_WEB_BASE = "https://github.com"
_API_REPOS_BASE = "https://api.github.com/repos"
_BODY_PREVIEW_LIMIT = 5
# Upstream payloads occasionally serialize a missing title as this literal.
_MISSING_TITLE = "undefined"


def _actor_user(event: _Event) -> UserRef:
    login = event.actor.login
    return UserRef(
        login=login,
        avatar_url=event.actor.avatar_url,
        html_url=f"{_WEB_BASE}/{login}",
    )


def _numeric_event_id(event: _Event) -> int:
    try:
        return int(event.id)
    except ValueError:
        return 0


def _base_item(event: _Event, **fields: typ.Any) -> CanonicalItem:  # noqa: ANN401
    """Build an item with the provenance fields every event shares."""
    repo = event.repo.name
    created_at = ensure_utc(event.created_at)
    values: dict[str, typ.Any] = {
        "id": _numeric_event_id(event),
        "event_id": event.id or None,
        "html_url": f"{_WEB_BASE}/{repo}",
        "created_at": created_at,
        "updated_at": created_at,
        "state": "open",
        "body": "",
        "repository_url": f"{_API_REPOS_BASE}/{repo}",
        "repository": RepositoryRef(full_name=repo, html_url=f"{_WEB_BASE}/{repo}"),
        "user": _actor_user(event),
        "original_event_type": type(event).__name__,
    }
    values.update(fields)
    return CanonicalItem(**values)


def _updated_or_created(event: _Event, updated_at: dt.datetime | None) -> dt.datetime:
    return ensure_utc(updated_at if updated_at is not None else event.created_at)


def _usable_title(title: str | None) -> str | None:
    if title is None:
        return None
    stripped = title.strip()
    if not stripped or stripped == _MISSING_TITLE:
        return None
    return title


def _issue_html_url(event: _Event, issue: IssuePayloadEntity) -> str:
    if issue.html_url:
        return issue.html_url
    if issue.number:
        return f"{_WEB_BASE}/{event.repo.name}/issues/{issue.number}"
    return f"{_WEB_BASE}/{event.repo.name}"


def _pr_number(
    pr: PullRequestPayloadEntity, payload_number: int | None
) -> int | None:
    """Recover the PR number: explicit field, then HTML URL, then API URL."""
    if pr.number:
        return pr.number
    if payload_number:
        return payload_number
    return pull_request_number_from_urls(pr.html_url, pr.url)


def _pr_html_url(event: _Event, pr: PullRequestPayloadEntity, number: int | None) -> str:
    if pr.html_url:
        return pr.html_url
    return f"{_WEB_BASE}/{event.repo.name}/pull/{number}"


def _pr_fields(
    event: _Event,
    pr: PullRequestPayloadEntity,
    number: int | None,
    html_url: str,
) -> dict[str, typ.Any]:
    """Return the lifecycle fields shared by all pull-request-shaped events."""
    merged_at = ensure_utc(pr.merged_at) if pr.merged_at is not None else None
    return {
        "id": pr.id or 0,
        "updated_at": _updated_or_created(event, pr.updated_at),
        "state": pr.state or "open",
        "closed_at": ensure_utc(pr.closed_at) if pr.closed_at is not None else None,
        "merged_at": merged_at,
        "merged": bool(pr.merged),
        "number": number,
        "pull_request": PullRequestMarker(merged_at=merged_at, url=html_url),
    }


def _issue_item(event: IssuesEvent) -> CanonicalItem | None:
    issue = event.payload.issue
    if issue is None:
        return None
    return _base_item(
        event,
        id=issue.id or 0,
        html_url=_issue_html_url(event, issue),
        title=issue.title or "",
        updated_at=_updated_or_created(event, issue.updated_at),
        state=issue.state or "open",
        body=issue.body,
        labels=issue.labels or (),
        closed_at=ensure_utc(issue.closed_at) if issue.closed_at else None,
        number=issue.number,
        assignee=issue.assignee,
        assignees=issue.assignees or (),
        pull_request=issue.pull_request,
    )


def _pull_request_item(event: PullRequestEvent) -> CanonicalItem | None:
    payload = event.payload
    pr = payload.pull_request
    if pr is None:
        return None
    number = _pr_number(pr, payload.number)
    html_url = _pr_html_url(event, pr, number)
    action = payload.action or "updated"
    title = _usable_title(pr.title) or f"Pull Request #{number} {action}"
    return _base_item(
        event,
        html_url=html_url,
        title=title,
        body=pr.body or f"Pull request {action} by {event.actor.login}",
        labels=payload.labels or pr.labels or (),
        **_pr_fields(event, pr, number, html_url),
    )


def _review_item(event: PullRequestReviewEvent) -> CanonicalItem | None:
    payload = event.payload
    pr = payload.pull_request
    if pr is None:
        return None
    number = _pr_number(pr, payload.number)
    html_url = _pr_html_url(event, pr, number)
    pr_title = _usable_title(pr.title) or f"Pull Request #{number}"
    review = payload.review
    reviewer = review.user if review is not None and review.user else None
    submitted_at = (
        ensure_utc(review.submitted_at)
        if review is not None and review.submitted_at is not None
        else None
    )
    return _base_item(
        event,
        html_url=html_url,
        title=f"Review on: {pr_title}",
        body=pr.body or f"Review by {event.actor.login}",
        labels=pr.labels or (),
        reviewed_by=reviewer or _actor_user(event),
        reviewed_at=submitted_at,
        **_pr_fields(event, pr, number, html_url),
    )


def _review_comment_item(event: PullRequestReviewCommentEvent) -> CanonicalItem | None:
    payload = event.payload
    pr = payload.pull_request
    comment = payload.comment
    if pr is None or comment is None:
        return None
    number = _pr_number(pr, payload.number)
    html_url = _pr_html_url(event, pr, number)
    pr_title = _usable_title(pr.title) or f"Pull Request #{number}"
    fields = _pr_fields(event, pr, number, html_url)
    fields["id"] = comment.id or 0
    fields["updated_at"] = _updated_or_created(event, comment.updated_at)
    return _base_item(
        event,
        html_url=comment.html_url or html_url,
        title=f"Review comment on: {pr_title}",
        body=comment.body,
        labels=pr.labels or (),
        **fields,
    )


def _issue_comment_item(event: IssueCommentEvent) -> CanonicalItem | None:
    issue = event.payload.issue
    comment = event.payload.comment
    if issue is None or comment is None:
        return None
    return _base_item(
        event,
        id=comment.id or 0,
        html_url=comment.html_url or _issue_html_url(event, issue),
        title=f"Comment on: {issue.title or ''}",
        updated_at=_updated_or_created(event, comment.updated_at),
        state=issue.state or "open",
        body=comment.body,
        labels=issue.labels or (),
        closed_at=ensure_utc(issue.closed_at) if issue.closed_at else None,
        number=issue.number,
        pull_request=issue.pull_request,
    )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _preview_lines(lines: list[str], noun: str) -> str:
    """Render up to five bullet lines with an overflow suffix."""
    body = "\n".join(f"- {line}" for line in lines[:_BODY_PREVIEW_LIMIT])
    overflow = len(lines) - _BODY_PREVIEW_LIMIT
    if overflow > 0:
        body += f"\n... and {overflow} more {noun}"
    return body


def _push_item(event: PushEvent) -> CanonicalItem:
    payload = event.payload
    branch = (payload.ref or "").removeprefix("refs/heads/") or "main"
    target = f"{slug_owner(event.repo.name)}/{branch}"

    if payload.commits:
        display_count: int | None = len(payload.commits)
    elif payload.distinct_size:
        display_count = payload.distinct_size
    elif payload.size:
        display_count = payload.size
    else:
        display_count = None

    head = payload.head or payload.after
    if display_count is not None:
        title = f"Pushed {_plural(display_count, 'commit')} to {target}"
    elif head and payload.before and head != payload.before:
        title = f"Pushed to {target}"
    else:
        title = f"Pushed {_plural(0, 'commit')} to {target}"

    first_lines = [
        (commit.message or "").split("\n", 1)[0] or "No commit message"
        for commit in payload.commits or ()
    ]
    return _base_item(
        event,
        html_url=f"{_WEB_BASE}/{event.repo.name}/commits/{branch}",
        title=title,
        body=_preview_lines(first_lines, "commits"),
    )


def _create_item(event: CreateEvent) -> CanonicalItem:
    payload = event.payload
    repo = event.repo.name
    ref = payload.ref or ""
    ref_type = payload.ref_type or "repository"
    if ref_type == "branch":
        title = f"Created branch {ref}"
        html_url = f"{_WEB_BASE}/{repo}/tree/{ref}"
    elif ref_type == "tag":
        title = f"Created tag {ref}"
        html_url = f"{_WEB_BASE}/{repo}/releases/tag/{ref}"
    else:
        title = "Created repository"
        if payload.description:
            title += f": {payload.description}"
        html_url = f"{_WEB_BASE}/{repo}"
    return _base_item(
        event, html_url=html_url, title=title, body=payload.description or ""
    )


def _delete_item(event: DeleteEvent) -> CanonicalItem:
    payload = event.payload
    ref = payload.ref or ""
    ref_type = payload.ref_type or "branch"
    if ref_type in {"branch", "tag"}:
        title = f"Deleted {ref_type} {ref}"
    else:
        title = f"Deleted {ref_type}"
    return _base_item(
        event,
        title=title,
        state="closed",
        body=f"{event.actor.login} deleted {ref_type} {ref} from {event.repo.name}",
    )


def _fork_item(event: ForkEvent) -> CanonicalItem:
    forkee = event.payload.forkee
    name = (forkee.full_name if forkee else "") or "unknown repository"
    html_url = (forkee.html_url if forkee else "") or f"{_WEB_BASE}/{event.repo.name}"
    return _base_item(
        event,
        html_url=html_url,
        title=f"Forked repository to {name}",
        body=f"Repository forked from {event.repo.name} to {name}",
    )


def _watch_item(event: WatchEvent) -> CanonicalItem:
    action = event.payload.action or "starred"
    verb = "Starred" if action == "started" else "Unstarred"
    return _base_item(
        event,
        title=f"{verb} repository",
        body=f"{event.actor.login} {action} the repository {event.repo.name}",
    )


def _public_item(event: PublicEvent) -> CanonicalItem:
    return _base_item(
        event,
        title="Made repository public",
        body=f"{event.actor.login} made the repository {event.repo.name} public",
    )


_WIKI_VERBS = {"created": "Created", "edited": "Updated"}


def _page_title(page: WikiPage) -> str:
    return page.title or page.page_name or "untitled"


def _gollum_item(event: GollumEvent) -> CanonicalItem | None:
    pages = event.payload.pages
    if not pages:
        return None
    first = pages[0]
    verb = _WIKI_VERBS.get(first.action or "edited", "Deleted")
    if len(pages) == 1:
        title = f"{verb} wiki page: {_page_title(first)}"
    else:
        title = f"{verb} {len(pages)} wiki pages"
    return _base_item(
        event,
        html_url=first.html_url or f"{_WEB_BASE}/{event.repo.name}/wiki",
        title=title,
        body=_preview_lines(
            [f"{_page_title(p)} ({p.action or 'edited'})" for p in pages], "pages"
        ),
    )


def _dispatch(event: RawEvent) -> CanonicalItem | None:  # noqa: PLR0911
    match event:
        case IssuesEvent():
            return _issue_item(event)
        case PullRequestEvent():
            return _pull_request_item(event)
        case PullRequestReviewEvent():
            return _review_item(event)
        case PullRequestReviewCommentEvent():
            return _review_comment_item(event)
        case IssueCommentEvent():
            return _issue_comment_item(event)
        case PushEvent():
            return _push_item(event)
        case CreateEvent():
            return _create_item(event)
        case DeleteEvent():
            return _delete_item(event)
        case ForkEvent():
            return _fork_item(event)
        case WatchEvent():
            return _watch_item(event)
        case PublicEvent():
            return _public_item(event)
        case GollumEvent():
            return _gollum_item(event)
        case _:
            typ.assert_never(event)


def normalize_event(raw: object) -> CanonicalItem | None:
    """Normalize one Events API record into a canonical item.

    Accepts either a raw JSON-shaped ``dict`` or an already decoded event.
    Returns ``None`` for unsupported event types, payloads missing the entity
    they describe, and wiki events without pages.

    Examples
    --------
    >>> item = normalize_event(
    ...     {
    ...         "id": "1",
    ...         "type": "WatchEvent",
    ...         "actor": {"login": "octo"},
    ...         "repo": {"name": "octo/reef"},
    ...         "created_at": "2024-01-15T10:00:00Z",
    ...         "payload": {"action": "started"},
    ...     }
    ... )
    >>> item.title
    'Starred repository'

    """
    event = decode_event(raw)
    if event is None:
        return None
    return _dispatch(event)


def normalize_events(
    raw_events: cabc.Iterable[object],
    window: DateWindow | None = None,
) -> list[CanonicalItem]:
    """Normalize events whose timestamp lies in ``window``, preserving order."""
    items: list[CanonicalItem] = []
    for raw in raw_events:
        event = decode_event(raw)
        if event is None:
            continue
        if window is not None and not window.contains(event.created_at):
            continue
        item = _dispatch(event)
        if item is not None:
            items.append(item)
    return items


def available_labels(items: cabc.Iterable[CanonicalItem]) -> list[str]:
    """Return the sorted unique label names across ``items``."""
    return sorted({label.name for item in items for label in item.labels})


def available_repositories(items: cabc.Iterable[CanonicalItem]) -> list[str]:
    """Return the sorted unique ``owner/name`` values across ``items``."""
    names = {item.repository_name for item in items}
    return sorted(name for name in names if name)


def available_users(items: cabc.Iterable[CanonicalItem]) -> list[str]:
    """Return the sorted unique user logins across ``items``."""
    return sorted({item.user.login for item in items if item.user.login})
