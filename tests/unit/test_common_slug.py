"""Unit tests for repository slug and pull request URL utilities."""

from __future__ import annotations

import pytest

from forager.common.slug import (
    PullRequestRef,
    base_url,
    parse_pull_request_url,
    pull_request_number_from_urls,
    repo_slug,
    slug_owner,
)


def test_repo_slug_combines_owner_and_name() -> None:
    """repo_slug returns owner/name format."""
    assert repo_slug("octo", "reef") == "octo/reef"


def test_slug_owner_returns_owner_or_whole_value() -> None:
    """slug_owner tolerates values without a separator."""
    assert slug_owner("octo/reef") == "octo"
    assert slug_owner("octo") == "octo"


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/octo/reef/pull/7",
        "https://github.com/octo/reef/pull/7#pullrequestreview-99",
        "https://github.com/octo/reef/pull/7/files",
    ],
)
def test_parse_pull_request_url_ignores_suffixes(url: str) -> None:
    """Fragments and trailing segments do not change the parsed reference."""
    assert parse_pull_request_url(url) == PullRequestRef("octo", "reef", 7)


@pytest.mark.parametrize(
    "url", [None, "", "https://github.com/octo/reef/issues/7", "not a url"]
)
def test_parse_pull_request_url_rejects_non_pr_urls(url: str | None) -> None:
    """Issue URLs and junk yield None."""
    assert parse_pull_request_url(url) is None


def test_pull_request_ref_api_url_honours_base() -> None:
    """The REST detail URL is built under the configured API root."""
    ref = PullRequestRef("octo", "reef", 7)

    assert ref.api_url() == "https://api.github.com/repos/octo/reef/pulls/7"
    assert (
        ref.api_url("https://ghe.example.test/api/v3/")
        == "https://ghe.example.test/api/v3/repos/octo/reef/pulls/7"
    )


@pytest.mark.parametrize(
    ("html_url", "api_url", "expected"),
    [
        ("https://github.com/o/r/pull/12", "https://api.github.com/repos/o/r/pulls/99", 12),
        ("", "https://api.github.com/repos/o/r/pulls/99", 99),
        (None, None, None),
        ("https://github.com/o/r", "", None),
    ],
)
def test_pull_request_number_from_urls_prefers_html(
    html_url: str | None, api_url: str | None, expected: int | None
) -> None:
    """The HTML URL wins, then the API URL, else None."""
    assert pull_request_number_from_urls(html_url, api_url) == expected


def test_base_url_strips_fragment() -> None:
    """Only the fragment is removed."""
    assert (
        base_url("https://github.com/o/r/pull/1#pullrequestreview-5")
        == "https://github.com/o/r/pull/1"
    )
    assert base_url("https://github.com/o/r/pull/1") == "https://github.com/o/r/pull/1"
