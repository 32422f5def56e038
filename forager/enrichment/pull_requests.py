"""Fill in pull request details missing from activity-feed payloads.

The Events API frequently omits the pull request title from review and
label events. The normalizer then falls back to a placeholder title such as
``Pull Request #12 labeled``; this module detects those placeholders, fetches
the pull request once per process through a :class:`DetailCache`, and
rewrites the affected items.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

import httpx
import msgspec

from forager.common.slug import parse_pull_request_url
from forager.github.errors import GitHubAPIError, GitHubResponseShapeError

from .cache import DetailCache, shared_detail_cache
from .config import EnrichmentConfig
from .observability import EnrichmentEventLogger
from .pacing import RequestPacer

if typ.TYPE_CHECKING:
    from forager.github.client import PullRequestDetailSource
    from forager.github.models import CanonicalItem, PullRequestDetails

ProgressCallback = cabc.Callable[[int, int], None]

_PLACEHOLDER_ACTIONS = (
    "opened",
    "closed",
    "labeled",
    "unlabeled",
    "synchronized",
    "reopened",
    "edited",
    "assigned",
    "unassigned",
    "review_requested",
    "review_request_removed",
)
_PLACEHOLDER_TITLE = re.compile(
    rf"^Pull Request #\d+ (?:{'|'.join(_PLACEHOLDER_ACTIONS)})$"
)
_PLACEHOLDER_ACTION = re.compile(r"^Pull Request #\d+(?: (?P<action>.+))?$")
_REVIEW_PREFIX = "Review on: "
_REVIEW_COMMENT_PREFIX = "Review comment on: "
_REVIEW_PLACEHOLDER = f"{_REVIEW_PREFIX}Pull Request #"
_REVIEW_COMMENT_PLACEHOLDER = f"{_REVIEW_COMMENT_PREFIX}Pull Request #"

_ENRICHMENT_ERRORS = (GitHubAPIError, GitHubResponseShapeError, httpx.HTTPError)


def needs_enrichment(item: CanonicalItem) -> bool:
    """Return True when an event-derived PR item carries a placeholder title.

    Examples
    --------
    >>> import datetime as dt
    >>> from forager.github.models import CanonicalItem, UserRef
    >>> now = dt.datetime(2024, 1, 15, tzinfo=dt.UTC)
    >>> item = CanonicalItem(
    ...     id=1,
    ...     html_url="https://github.com/octo/reef/pull/4",
    ...     title="Pull Request #4 labeled",
    ...     created_at=now,
    ...     updated_at=now,
    ...     user=UserRef(login="octo"),
    ...     original_event_type="PullRequestEvent",
    ... )
    >>> needs_enrichment(item)
    True

    """
    if "PullRequest" not in (item.original_event_type or ""):
        return False
    title = item.title
    return (
        _PLACEHOLDER_TITLE.match(title) is not None
        or title.startswith(_REVIEW_PLACEHOLDER)
        or title.startswith(_REVIEW_COMMENT_PLACEHOLDER)
    )


def detail_api_url(
    item: CanonicalItem, api_base: str = "https://api.github.com"
) -> str | None:
    """Return the REST detail URL for an item's pull request, if parseable."""
    ref = parse_pull_request_url(item.html_url)
    if ref is None:
        return None
    return ref.api_url(api_base)


def _rewrite_title(item: CanonicalItem, fetched_title: str) -> str:
    match item.original_event_type:
        case "PullRequestReviewEvent":
            return f"{_REVIEW_PREFIX}{fetched_title}"
        case "PullRequestReviewCommentEvent":
            return f"{_REVIEW_COMMENT_PREFIX}{fetched_title}"
    placeholder = _PLACEHOLDER_ACTION.match(item.title)
    if placeholder is None:
        return item.title
    action = placeholder.group("action")
    return f"{fetched_title} ({action})" if action else fetched_title


def apply_details(item: CanonicalItem, details: PullRequestDetails) -> CanonicalItem:
    """Overlay fetched pull request details onto ``item``.

    Labels are replaced only when the fetched set is non-empty; every other
    field keeps the item's value when the snapshot has none.
    """
    title = _rewrite_title(item, details.title) if details.title else item.title
    return msgspec.structs.replace(
        item,
        title=title,
        labels=details.labels or item.labels,
        updated_at=details.updated_at or item.updated_at,
        closed_at=details.closed_at or item.closed_at,
        merged_at=details.merged_at or item.merged_at,
        merged=item.merged if details.merged is None else details.merged,
        state=details.state or item.state,
    )


class PullRequestEnricher:
    """Enrich placeholder pull request items from the REST API.

    Parameters
    ----------
    source
        Fetches pull request details; normally a
        :class:`~forager.github.client.GitHubRestClient`.
    cache
        Detail snapshots shared between calls. Defaults to the process-wide
        cache.
    pacer
        Spaces out consecutive fetches. Defaults to a pacer using
        ``config.request_delay_s``.
    config
        Enrichment tunables; only consulted when ``pacer`` is omitted.
    api_base
        REST API root used to build detail URLs.

    """

    def __init__(
        self,
        source: PullRequestDetailSource,
        *,
        cache: DetailCache | None = None,
        pacer: RequestPacer | None = None,
        config: EnrichmentConfig | None = None,
        api_base: str = "https://api.github.com",
    ) -> None:
        """Create an enricher over ``source``."""
        resolved = config or EnrichmentConfig()
        self._source = source
        self._cache = cache if cache is not None else shared_detail_cache()
        self._pacer = pacer or RequestPacer(resolved.request_delay_s)
        self._api_base = api_base
        self._events = EnrichmentEventLogger()
        self._fetches = 0

    @property
    def cache(self) -> DetailCache:
        """Return the detail cache in use."""
        return self._cache

    @property
    def fetch_count(self) -> int:
        """Return how many network fetches this enricher has issued."""
        return self._fetches

    async def _details_for(self, api_url: str) -> PullRequestDetails | None:
        cached = self._cache.get(api_url)
        if cached is not None:
            return cached

        await self._pacer.wait()
        self._fetches += 1
        try:
            details = await self._source.fetch_pull_request(api_url)
        except _ENRICHMENT_ERRORS as exc:
            self._events.log_detail_fetch_failed(api_url, exc)
            return None

        self._cache.put(api_url, details)
        return details

    async def enrich_item(self, item: CanonicalItem) -> CanonicalItem:
        """Return ``item`` with fetched details applied, or unchanged.

        Never raises for network or API failures; those are logged and the
        original item is returned.
        """
        if not needs_enrichment(item):
            return item
        api_url = detail_api_url(item, self._api_base)
        if api_url is None:
            return item

        details = await self._details_for(api_url)
        if details is None:
            return item
        return apply_details(item, details)

    async def enrich_items(
        self,
        items: cabc.Sequence[CanonicalItem],
        on_progress: ProgressCallback | None = None,
    ) -> list[CanonicalItem]:
        """Enrich every item that needs it, one request at a time.

        Returns a list the same length as ``items`` with only the enriched
        positions replaced. ``on_progress`` receives ``(processed, total)``
        after each item that needed enrichment.
        """
        result = list(items)
        pending = [
            index for index, item in enumerate(result) if needs_enrichment(item)
        ]
        if not pending:
            return result

        self._events.log_detail_batch_started(len(pending), len(result))
        fetches_before = self._fetches
        enriched = 0
        for processed, index in enumerate(pending, start=1):
            original = result[index]
            replacement = await self.enrich_item(original)
            if replacement is not original:
                enriched += 1
            result[index] = replacement
            if on_progress is not None:
                on_progress(processed, len(pending))

        self._events.log_detail_batch_completed(
            len(pending), enriched, self._fetches - fetches_before
        )
        return result
