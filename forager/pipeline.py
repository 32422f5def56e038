"""Compose normalization, enrichment and classification into one summary.

The search orchestration that fetches raw events and search results lives
outside this package; callers hand over the decoded JSON and get back the
bucketed summary.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import typing as typ

import msgspec

from forager.github.normalize import normalize_events
from forager.github.search import decode_search_items, filter_search_items
from forager.logging import get_logger, log_info
from forager.summary.buckets import Bucket, Groups, bucket_counts
from forager.summary.classify import group_summary

if typ.TYPE_CHECKING:
    from forager.common.time import DateWindow
    from forager.enrichment.pull_requests import PullRequestEnricher
    from forager.enrichment.review_dates import ReviewDateEnricher
    from forager.github.models import CanonicalItem

logger = get_logger(__name__)

ProgressCallback = cabc.Callable[[str, int, int], None]


@dataclasses.dataclass(frozen=True, slots=True)
class ActivitySummary:
    """Bucketed activity for a set of users over a window.

    ``event_items`` and ``search_items`` hold the normalized and enriched items
    the groups were built from, including fields such as ``reviewed_at`` that
    bucketing ignores.
    """

    usernames: tuple[str, ...]
    window: DateWindow
    groups: Groups
    event_items: tuple[CanonicalItem, ...] = ()
    search_items: tuple[CanonicalItem, ...] = ()

    def counts(self) -> dict[str, int]:
        """Return ``{bucket label: item count}`` in display order."""
        return bucket_counts(self.groups)

    def to_builtins(self) -> dict[str, typ.Any]:
        """Return a JSON-ready representation of the summary."""
        window = self.window
        return {
            "usernames": list(self.usernames),
            "start": window.start.isoformat() if window.start else None,
            "end": window.end.isoformat() if window.end else None,
            "counts": self.counts(),
            "groups": {
                str(bucket): msgspec.to_builtins(self.groups[bucket])
                for bucket in Bucket
            },
        }


def _stage_progress(
    on_progress: ProgressCallback | None, stage: str
) -> cabc.Callable[[int, int], None] | None:
    if on_progress is None:
        return None

    def report(current: int, total: int) -> None:
        on_progress(stage, current, total)

    return report


async def summarize_activity(  # noqa: PLR0913
    raw_events: cabc.Iterable[object],
    raw_search_items: cabc.Iterable[object],
    usernames: cabc.Sequence[str],
    window: DateWindow,
    *,
    detail_enricher: PullRequestEnricher | None = None,
    review_enricher: ReviewDateEnricher | None = None,
    on_progress: ProgressCallback | None = None,
) -> ActivitySummary:
    """Normalize, optionally enrich, and bucket a user's activity.

    Parameters
    ----------
    raw_events
        Events API records, newest first.
    raw_search_items
        Search API records, already scoped to the window by the query.
    usernames
        Logins the summary is for, compared case-insensitively.
    window
        Inclusive summary window.
    detail_enricher
        Rewrites placeholder PR titles on event items when provided.
    review_enricher
        Recovers true review dates on review event items when provided. The
        ``reviewed_at`` it writes is kept on :attr:`ActivitySummary.event_items`
        for downstream consumers; bucketing does not read it.
    on_progress
        Receives ``(stage, current, total)`` from the enrichers.

    """
    event_items = normalize_events(raw_events, window)
    search_items = filter_search_items(
        decode_search_items(raw_search_items), window.start, window.end
    )
    log_info(
        logger,
        "Normalized %d event items and %d search items",
        len(event_items),
        len(search_items),
    )

    if detail_enricher is not None:
        event_items = await detail_enricher.enrich_items(
            event_items, _stage_progress(on_progress, "details")
        )

    if review_enricher is not None:
        event_items = await review_enricher.enrich(
            event_items, _stage_progress(on_progress, "reviews")
        )

    logins = tuple(name.strip().lower() for name in usernames if name.strip())
    groups = group_summary(event_items, search_items, logins, window)
    summary = ActivitySummary(
        usernames=logins,
        window=window,
        groups=groups,
        event_items=tuple(event_items),
        search_items=tuple(search_items),
    )
    log_info(
        logger,
        "Grouped %d items into %d non-empty buckets",
        sum(summary.counts().values()),
        sum(1 for count in summary.counts().values() if count),
    )
    return summary
