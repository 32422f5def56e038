"""Behavioural tests for bucketing a user's GitHub activity."""

from __future__ import annotations

import asyncio
import itertools
import typing as typ

from pytest_bdd import given, parsers, scenario, then, when

from forager.common.time import DateWindow
from forager.pipeline import summarize_activity
from tests.helpers.github_events import pull_request_entity, raw_event, search_item

if typ.TYPE_CHECKING:
    from tests.features.conftest import SummaryContext

_event_ids = itertools.count(1000)

T = typ.TypeVar("T")


def run_async(coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


def _noon(day: str) -> str:
    return f"{day}T12:00:00Z"


@scenario(
    "../activity_summary.feature",
    "Repeated reviews of one pull request are counted once",
)
def test_repeated_reviews_counted_once() -> None:
    """Behavioural test: review items are deduplicated per reviewer and PR."""


@scenario(
    "../activity_summary.feature",
    "Search results updated outside the window are ignored",
)
def test_search_results_outside_window_ignored() -> None:
    """Behavioural test: search results are filtered to the window."""


@scenario(
    "../activity_summary.feature",
    "Pushes and stars are reported outside the issue buckets",
)
def test_pushes_and_stars_bucketed() -> None:
    """Behavioural test: synthesized event titles map to their buckets."""


@given(parsers.parse('a summary window from "{start}" to "{end}"'))
def summary_window(summary_context: SummaryContext, start: str, end: str) -> None:
    """Record the summary window."""
    summary_context["window"] = DateWindow.from_strings(start, end)


@given(
    parsers.parse(
        '"{login}" reviewed pull request {number:d} in "{repo}" on "{day}"'
    )
)
def reviewed_pull_request(
    summary_context: SummaryContext, login: str, number: int, repo: str, day: str
) -> None:
    """Add a PullRequestReviewEvent for ``login``."""
    summary_context["events"].append(
        raw_event(
            "PullRequestReviewEvent",
            {
                "action": "created",
                "review": {"user": {"login": login}, "submitted_at": _noon(day)},
                "pull_request": pull_request_entity(number, repo=repo),
            },
            event_id=str(next(_event_ids)),
            actor=login,
            repo=repo,
            created_at=_noon(day),
        )
    )


@given(
    parsers.parse('a search result for issue {number:d} updated on "{day}"')
)
def search_result(summary_context: SummaryContext, number: int, day: str) -> None:
    """Add one Search API issue record."""
    summary_context["search"].append(
        search_item(number, title=f"Issue {number}", updated_at=_noon(day))
    )


@given(
    parsers.parse('"{login}" pushed {count:d} commits to "{repo}" on "{day}"')
)
def pushed_commits(
    summary_context: SummaryContext, login: str, count: int, repo: str, day: str
) -> None:
    """Add a PushEvent carrying ``count`` commits."""
    commits = [{"sha": f"c{n}", "message": f"Commit {n}"} for n in range(count)]
    summary_context["events"].append(
        raw_event(
            "PushEvent",
            {"ref": "refs/heads/main", "commits": commits},
            event_id=str(next(_event_ids)),
            actor=login,
            repo=repo,
            created_at=_noon(day),
        )
    )


@given(parsers.parse('"{login}" starred "{repo}" on "{day}"'))
def starred_repository(
    summary_context: SummaryContext, login: str, repo: str, day: str
) -> None:
    """Add a WatchEvent."""
    summary_context["events"].append(
        raw_event(
            "WatchEvent",
            {"action": "started"},
            event_id=str(next(_event_ids)),
            actor=login,
            repo=repo,
            created_at=_noon(day),
        )
    )


@when(parsers.parse('the activity of "{login}" is summarized'))
def summarize(summary_context: SummaryContext, login: str) -> None:
    """Run the pipeline over the collected records."""
    summary_context["summary"] = run_async(
        summarize_activity(
            summary_context["events"],
            summary_context["search"],
            [login],
            summary_context["window"],
        )
    )


@then(parsers.parse('the "{bucket}" bucket holds {count:d} items'))
def bucket_holds(summary_context: SummaryContext, bucket: str, count: int) -> None:
    """Check one bucket's size."""
    counts = summary_context["summary"].counts()
    assert counts[bucket] == count, f"Expected {count} items in {bucket}: {counts}"


@then(parsers.parse("the summary contains {count:d} items in total"))
def total_items(summary_context: SummaryContext, count: int) -> None:
    """Check the number of bucketed items."""
    assert sum(summary_context["summary"].counts().values()) == count
