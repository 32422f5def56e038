"""Cached, paced enrichment of sparse activity items."""

from __future__ import annotations

from .cache import DetailCache, shared_detail_cache
from .config import EnrichmentConfig
from .observability import ErrorCategory, categorize_error
from .pacing import RequestPacer
from .pull_requests import PullRequestEnricher, needs_enrichment
from .review_dates import ReviewDateEnricher, ReviewDateIndex, build_batch_query

__all__ = [
    "DetailCache",
    "EnrichmentConfig",
    "ErrorCategory",
    "PullRequestEnricher",
    "RequestPacer",
    "ReviewDateEnricher",
    "ReviewDateIndex",
    "build_batch_query",
    "categorize_error",
    "needs_enrichment",
    "shared_detail_cache",
]
