"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest

from forager.common.time import DateWindow
from forager.enrichment.cache import DetailCache
from forager.enrichment.pacing import RequestPacer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_GITHUB_ENV_VARS = (
    "FORAGER_GITHUB_TOKEN",
    "FORAGER_GITHUB_API_URL",
    "FORAGER_ENRICHMENT_DELAY_S",
    "FORAGER_REVIEW_BATCH_SIZE",
    "FORAGER_REVIEW_TIMELINE_LIMIT",
    "FORAGER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of tests."""
    for name in _GITHUB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def january_window() -> DateWindow:
    """Return the 2024-01-10..2024-01-20 window used throughout the tests."""
    return DateWindow.from_strings("2024-01-10", "2024-01-20")


@pytest.fixture
def detail_cache() -> DetailCache:
    """Return an isolated detail cache."""
    return DetailCache()


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        """Start with no recorded delays."""
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        """Record ``delay`` without waiting."""
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Return a sleep double that never waits."""
    return RecordingSleep()


@pytest.fixture
def instant_pacer(recording_sleep: RecordingSleep) -> RequestPacer:
    """Return a pacer whose clock never advances and whose sleep is recorded."""
    clock: cabc.Callable[[], float] = lambda: 0.0  # noqa: E731
    return RequestPacer(0.1, sleep=recording_sleep, clock=clock)
