"""Recover true review submission dates through batched GraphQL queries.

A ``reviewed-by:`` search constrains the pull request's last update, not the
moment the review was submitted. The review timeline on the GraphQL
``PullRequest`` node carries the real timestamp, so review items are grouped
into multiplexed queries (one aliased sub-query per pull request) and the most
recent review per reviewer is written back as ``reviewed_at``.
"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import json
import logging
import typing as typ

import httpx
import msgspec

from forager.common.slug import PullRequestRef, parse_pull_request_url
from forager.common.time import parse_github_datetime
from forager.github.errors import GitHubAPIError, GitHubResponseShapeError

from .config import EnrichmentConfig
from .observability import EnrichmentEventLogger

if typ.TYPE_CHECKING:
    from forager.github.client import GraphQLExecutor
    from forager.github.models import CanonicalItem

logger = logging.getLogger(__name__)

ProgressCallback = cabc.Callable[[int, int], None]
ReviewDateIndex = dict[str, dict[str, dt.datetime]]

_ALIAS_PREFIX = "pr"
_BATCH_ERRORS = (GitHubAPIError, GitHubResponseShapeError, httpx.HTTPError)


def _canonical_pr_url(ref: PullRequestRef) -> str:
    return f"https://github.com/{ref.slug}/pull/{ref.number}"


def _graphql_string(value: str) -> str:
    # JSON string literals are valid GraphQL string literals.
    return json.dumps(value)


def build_batch_query(
    prs: cabc.Sequence[PullRequestRef], *, timeline_limit: int = 30
) -> str:
    """Build one query with an aliased review-timeline lookup per PR.

    Aliases are ``pr0``, ``pr1``, ... in the order of ``prs``.

    Examples
    --------
    >>> query = build_batch_query([PullRequestRef("octo", "reef", 7)])
    >>> 'pr0: repository(owner: "octo", name: "reef")' in query
    True

    """
    fragments = [
        f"{_ALIAS_PREFIX}{index}: repository(owner: {_graphql_string(pr.owner)}, "
        f"name: {_graphql_string(pr.name)}) {{\n"
        f"  pullRequest(number: {pr.number}) {{\n"
        f"    timelineItems(itemTypes: PULL_REQUEST_REVIEW, "
        f"last: {timeline_limit}) {{\n"
        "      nodes { ... on PullRequestReview { author { login } createdAt } }\n"
        "    }\n"
        "  }\n"
        "}"
        for index, pr in enumerate(prs)
    ]
    return "query {\n" + "\n".join(fragments) + "\n}"


def _latest_review_per_login(node: object) -> dict[str, dt.datetime] | None:
    """Reduce one aliased result to ``{lower_login: latest createdAt}``."""
    if not isinstance(node, dict):
        return None
    pull_request = node.get("pullRequest")
    if not isinstance(pull_request, dict):
        return None
    timeline = pull_request.get("timelineItems")
    nodes = timeline.get("nodes") if isinstance(timeline, dict) else None
    if not isinstance(nodes, list):
        return None

    latest: dict[str, dt.datetime] = {}
    for review in nodes:
        if not isinstance(review, dict):
            continue
        author = review.get("author")
        login = author.get("login") if isinstance(author, dict) else None
        created_at = review.get("createdAt")
        if not login or not isinstance(created_at, str):
            continue
        try:
            submitted = parse_github_datetime(created_at)
        except ValueError:
            logger.debug("Skipping review with unparseable createdAt %r", created_at)
            continue
        key = login.lower()
        current = latest.get(key)
        if current is None or submitted > current:
            latest[key] = submitted
    return latest


def _unique_pull_requests(
    items: cabc.Iterable[CanonicalItem],
) -> dict[str, PullRequestRef]:
    """Map canonical PR URL to its ref for every review item."""
    unique: dict[str, PullRequestRef] = {}
    for item in items:
        if item.reviewed_by is None:
            continue
        ref = parse_pull_request_url(item.html_url)
        if ref is not None:
            unique.setdefault(_canonical_pr_url(ref), ref)
    return unique


def _chunks(
    entries: list[tuple[str, PullRequestRef]], size: int
) -> cabc.Iterator[list[tuple[str, PullRequestRef]]]:
    for start in range(0, len(entries), size):
        yield entries[start : start + size]


class ReviewDateEnricher:
    """Write the latest review submission time onto review items.

    Parameters
    ----------
    executor
        Runs GraphQL documents; normally a
        :class:`~forager.github.client.GitHubGraphQLClient`.
    config
        Supplies the batch size (default 25) and timeline limit (default 30).

    """

    def __init__(
        self,
        executor: GraphQLExecutor,
        *,
        config: EnrichmentConfig | None = None,
    ) -> None:
        """Create an enricher over ``executor``."""
        resolved = config or EnrichmentConfig()
        self._executor = executor
        self._batch_size = resolved.review_batch_size
        self._timeline_limit = resolved.review_timeline_limit
        self._events = EnrichmentEventLogger()

    async def fetch_review_dates(
        self, items: cabc.Iterable[CanonicalItem]
    ) -> tuple[ReviewDateIndex, int]:
        """Query review timelines for every distinct PR behind review items.

        Items without ``reviewed_by`` are ignored.

        Returns the index keyed by canonical PR URL and the number of batches
        issued. A batch that fails outright is skipped; a batch reporting
        GraphQL ``errors`` still contributes whatever ``data`` it returned.
        """
        index: ReviewDateIndex = {}
        entries = list(_unique_pull_requests(items).items())
        batches = 0
        for batch_index, batch in enumerate(_chunks(entries, self._batch_size)):
            batches += 1
            query = build_batch_query(
                [ref for _, ref in batch], timeline_limit=self._timeline_limit
            )
            try:
                result = await self._executor.execute(query)
            except _BATCH_ERRORS as exc:
                self._events.log_review_batch_failed(batch_index, len(batch), exc)
                continue

            if result.errors:
                self._events.log_review_batch_partial(batch_index, result.errors)

            for position, (url, _ref) in enumerate(batch):
                reviews = _latest_review_per_login(
                    result.data.get(f"{_ALIAS_PREFIX}{position}")
                )
                if reviews is not None:
                    index[url] = reviews
        return index, batches

    async def enrich(
        self,
        items: cabc.Sequence[CanonicalItem],
        on_progress: ProgressCallback | None = None,
    ) -> list[CanonicalItem]:
        """Return ``items`` with ``reviewed_at`` set where the index has it.

        Items without ``reviewed_by``, or whose reviewer has no review on the
        pull request in the fetched timeline, are returned unchanged; callers
        should fall back to ``updated_at`` for those.
        """
        result = list(items)
        if not result:
            return result

        total = len(result)
        if on_progress is not None:
            on_progress(0, total)
        index, batches = await self.fetch_review_dates(result)
        if on_progress is not None:
            on_progress(total, total)

        enriched = 0
        for position, item in enumerate(result):
            if item.reviewed_by is None:
                continue
            ref = parse_pull_request_url(item.html_url)
            if ref is None:
                continue
            reviews = index.get(_canonical_pr_url(ref), {})
            reviewed_at = reviews.get(item.reviewed_by.login.lower())
            if reviewed_at is None:
                continue
            result[position] = msgspec.structs.replace(item, reviewed_at=reviewed_at)
            enriched += 1

        self._events.log_review_run_completed(
            len(_unique_pull_requests(result)), batches, enriched
        )
        return result
