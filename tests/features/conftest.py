"""Shared fixtures for BDD feature tests."""

from __future__ import annotations

import typing as typ

import pytest

if typ.TYPE_CHECKING:
    from forager.common.time import DateWindow
    from forager.pipeline import ActivitySummary


class SummaryContext(typ.TypedDict, total=False):
    """Shared state used by BDD steps."""

    window: DateWindow
    events: list[dict[str, typ.Any]]
    search: list[dict[str, typ.Any]]
    summary: ActivitySummary


@pytest.fixture
def summary_context() -> SummaryContext:
    """Start each scenario with no events and no search results."""
    return {"events": [], "search": []}
