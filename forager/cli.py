"""Command-line summary of GitHub activity from exported JSON files."""

from __future__ import annotations

import argparse
import asyncio
import typing as typ
from pathlib import Path

import msgspec

from forager.common.time import DateWindow
from forager.enrichment.cache import DetailCache
from forager.enrichment.config import EnrichmentConfig
from forager.enrichment.pull_requests import PullRequestEnricher
from forager.enrichment.review_dates import ReviewDateEnricher
from forager.github.client import (
    GitHubClientConfig,
    GitHubGraphQLClient,
    GitHubRestClient,
)
from forager.github.errors import GitHubConfigError
from forager.logging import configure_logging, get_logger, log_error, log_warning
from forager.pipeline import ActivitySummary, summarize_activity
from forager.summary.buckets import Bucket
from forager.summary.classify import parse_usernames

logger = get_logger(__name__)


def _load_json_list(path: Path) -> list[typ.Any]:
    """Read a JSON array, accepting a Search API ``{"items": [...]}`` envelope."""
    payload = msgspec.json.decode(path.read_bytes())
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        return payload["items"]
    if not isinstance(payload, list):
        msg = f"{path} must contain a JSON array"
        raise ValueError(msg)  # noqa: TRY004 - reported as unreadable input
    return payload


def _print_summary(summary: ActivitySummary) -> None:
    for bucket in Bucket:
        items = summary.groups[bucket]
        if not items:
            continue
        print(f"{bucket} ({len(items)})")
        for item in items:
            print(f"  - {item.title} <{item.html_url}>")


async def _run(
    args: argparse.Namespace,
    raw_events: list[typ.Any],
    raw_search: list[typ.Any],
    window: DateWindow,
) -> ActivitySummary:
    if not args.enrich:
        return await summarize_activity(
            raw_events, raw_search, parse_usernames(args.user), window
        )

    client_config = GitHubClientConfig.from_env()
    enrichment_config = EnrichmentConfig.from_env()
    graphql = GitHubGraphQLClient(client_config)
    rest = GitHubRestClient(client_config)
    try:
        return await summarize_activity(
            raw_events,
            raw_search,
            parse_usernames(args.user),
            window,
            detail_enricher=PullRequestEnricher(
                rest,
                cache=DetailCache(),
                config=enrichment_config,
                api_base=client_config.api_url,
            ),
            review_enricher=ReviewDateEnricher(graphql, config=enrichment_config),
        )
    finally:
        await rest.aclose()
        await graphql.aclose()


def main(argv: list[str] | None = None) -> int:
    """Summarize exported activity into buckets and print them.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when input cannot be read or enrichment
        is misconfigured.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("events", type=Path, help="Events API records as JSON")
    parser.add_argument(
        "--search",
        type=Path,
        default=None,
        help="Optional Search API results as JSON",
    )
    parser.add_argument(
        "--user",
        required=True,
        help="Comma-separated logins the summary is for",
    )
    parser.add_argument("--start", default=None, help="Window start, YYYY-MM-DD")
    parser.add_argument("--end", default=None, help="Window end, YYYY-MM-DD")
    parser.add_argument(
        "--enrich",
        action="store_true",
        help="Fetch missing PR details and review dates (needs FORAGER_GITHUB_TOKEN)",
    )
    parser.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Optional path to write the grouped summary as JSON",
    )
    args = parser.parse_args(argv)

    level, invalid = configure_logging()
    if invalid:
        log_warning(logger, "Unrecognized FORAGER_LOG_LEVEL; using %s", level)

    try:
        window = DateWindow.from_strings(args.start, args.end)
        raw_events = _load_json_list(args.events)
        raw_search = _load_json_list(args.search) if args.search else []
    except (OSError, ValueError, msgspec.DecodeError) as exc:
        log_error(logger, "Could not read input: %s", exc)
        return 1

    try:
        summary = asyncio.run(_run(args, raw_events, raw_search, window))
    except (GitHubConfigError, ValueError) as exc:
        log_error(logger, "Enrichment is not configured: %s", exc)
        return 1

    _print_summary(summary)

    if args.json_out:
        args.json_out.write_bytes(msgspec.json.encode(summary.to_builtins()))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
