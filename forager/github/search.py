"""Window filtering and deduplication for Search API results.

Search results already resemble canonical items, but a query may return the
same issue twice (for example once as author and once as assignee) and may
include records updated outside the requested window.
"""

from __future__ import annotations

import logging
import typing as typ

import msgspec

from forager.common.time import DateWindow

from .models import CanonicalItem

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

logger = logging.getLogger(__name__)


def _describe(raw: object) -> object:
    if isinstance(raw, dict):
        return raw.get("html_url") or raw.get("id")
    return type(raw).__name__


def decode_search_items(raw_items: cabc.Iterable[object]) -> list[CanonicalItem]:
    """Convert raw Search API records into canonical items.

    Records that do not match the canonical shape are dropped with a warning.
    """
    items: list[CanonicalItem] = []
    for raw in raw_items:
        if isinstance(raw, CanonicalItem):
            items.append(raw)
            continue
        try:
            items.append(msgspec.convert(raw, CanonicalItem))
        except msgspec.ValidationError as exc:
            logger.warning("Skipping malformed search item %s: %s", _describe(raw), exc)
    return items


def filter_search_items(
    items: cabc.Iterable[CanonicalItem],
    start_date: str | dt.date | None = None,
    end_date: str | dt.date | None = None,
) -> list[CanonicalItem]:
    """Drop untitled and out-of-window items, then deduplicate by URL.

    ``updated_at`` must lie in ``[start_date, end_date + 24h]``; an absent
    bound leaves that side open. The first item seen for each ``html_url``
    wins. Applying the filter to its own output returns the same list.
    """
    window = DateWindow.from_strings(start_date, end_date)
    seen_urls: set[str] = set()
    result: list[CanonicalItem] = []
    for item in items:
        if not item.title:
            logger.warning(
                "Skipping search item with missing title: %s",
                item.html_url or item.id,
            )
            continue
        if not window.contains(item.updated_at):
            continue
        if item.html_url in seen_urls:
            continue
        seen_urls.add(item.html_url)
        result.append(item)
    return result
