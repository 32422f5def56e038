"""Unit tests for Search API decoding, window filtering, and deduplication."""

from __future__ import annotations

import logging

import pytest

from forager.github.search import decode_search_items, filter_search_items
from tests.helpers.github_events import search_item


def test_decode_search_items_skips_malformed_records(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Records missing required fields are dropped with a warning."""
    raw = [search_item(1), {"html_url": "https://github.com/octo/reef/issues/2"}]

    with caplog.at_level(logging.WARNING, logger="forager.github.search"):
        items = decode_search_items(raw)

    assert [item.number for item in items] == [1]
    assert "Skipping malformed search item" in caplog.text


def test_decoded_search_items_are_search_derived() -> None:
    """Search results carry no event provenance."""
    (item,) = decode_search_items([search_item(3, is_pull_request=True)])

    assert not item.is_event_derived
    assert item.is_pull_request
    assert item.user.login == "octo"


def test_filter_drops_untitled_items_with_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Empty titles are malformed."""
    items = decode_search_items([search_item(1, title=""), search_item(2)])

    with caplog.at_level(logging.WARNING, logger="forager.github.search"):
        result = filter_search_items(items)

    assert [item.number for item in result] == [2]
    assert "missing title" in caplog.text


def test_filter_uses_inclusive_end_day() -> None:
    """updated_at on the last second of the end day is kept."""
    items = decode_search_items(
        [
            search_item(1, updated_at="2024-01-20T23:59:59Z"),
            search_item(2, updated_at="2024-01-21T00:00:01Z"),
            search_item(3, updated_at="2024-01-09T23:59:59Z"),
            search_item(4, updated_at="2024-01-10T00:00:00Z"),
        ]
    )

    result = filter_search_items(items, "2024-01-10", "2024-01-20")

    assert [item.number for item in result] == [1, 4]


def test_filter_without_bounds_only_validates_and_dedupes() -> None:
    """Absent bounds impose no date filter."""
    items = decode_search_items(
        [search_item(1, updated_at="2001-01-01T00:00:00Z"), search_item(2)]
    )

    assert len(filter_search_items(items)) == 2


def test_first_occurrence_of_a_url_wins() -> None:
    """Later duplicates are dropped silently, preserving input order."""
    items = decode_search_items(
        [
            search_item(1, title="first"),
            search_item(2),
            search_item(1, title="second"),
        ]
    )

    result = filter_search_items(items, "2024-01-10", "2024-01-20")

    assert [item.title for item in result] == ["first", "Search result"]


def test_filter_is_idempotent() -> None:
    """Running the filter on its own output changes nothing."""
    items = decode_search_items(
        [
            search_item(1),
            search_item(1, title="dup"),
            search_item(2, title=""),
            search_item(3, updated_at="2024-02-01T00:00:00Z"),
            search_item(4, updated_at="2024-01-20T23:59:59Z"),
        ]
    )

    once = filter_search_items(items, "2024-01-10", "2024-01-20")
    twice = filter_search_items(once, "2024-01-10", "2024-01-20")

    assert twice == once
