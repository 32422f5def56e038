"""Structured log events and error categorization for enrichment.

Enrichment failures never propagate to callers, so these log lines are the
only record that an item was left unenriched.
"""

from __future__ import annotations

import enum
import logging

import httpx

from forager.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)

logger = logging.getLogger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_TOO_MANY_REQUESTS = 429


class EnrichmentEventType(enum.StrEnum):
    """Structured log event types for enrichment observability."""

    DETAIL_BATCH_STARTED = "enrichment.details.started"
    DETAIL_BATCH_COMPLETED = "enrichment.details.completed"
    DETAIL_FETCH_FAILED = "enrichment.details.fetch_failed"
    REVIEW_BATCH_FAILED = "enrichment.reviews.batch_failed"
    REVIEW_BATCH_PARTIAL = "enrichment.reviews.batch_partial"
    REVIEW_RUN_COMPLETED = "enrichment.reviews.completed"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in warnings."""

    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (GitHubResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
    (httpx.HTTPError, ErrorCategory.NETWORK),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an enrichment failure for log consumers."""
    if isinstance(exc, GitHubAPIError):
        status = exc.status_code
        if status is None:
            return ErrorCategory.CLIENT_ERROR
        if status == _HTTP_TOO_MANY_REQUESTS:
            return ErrorCategory.RATE_LIMITED
        if status >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class EnrichmentEventLogger:
    """Emit structured enrichment events via Python logging.

    Events are emitted at INFO for progress, and WARNING for anything that
    left items unenriched.
    """

    def log_detail_batch_started(self, needing: int, total: int) -> None:
        """Log the start of a PR detail batch."""
        logger.info(
            "[%s] items_needing_enrichment=%d total_items=%d",
            EnrichmentEventType.DETAIL_BATCH_STARTED,
            needing,
            total,
        )

    def log_detail_batch_completed(
        self, processed: int, enriched: int, fetches: int
    ) -> None:
        """Log the end of a PR detail batch."""
        logger.info(
            "[%s] items_processed=%d items_enriched=%d network_fetches=%d",
            EnrichmentEventType.DETAIL_BATCH_COMPLETED,
            processed,
            enriched,
            fetches,
        )

    def log_detail_fetch_failed(self, api_url: str, error: BaseException) -> None:
        """Log a failed PR detail fetch."""
        logger.warning(
            "[%s] api_url=%s error_type=%s error_category=%s error_message=%s",
            EnrichmentEventType.DETAIL_FETCH_FAILED,
            api_url,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )

    def log_review_batch_failed(
        self, batch_index: int, size: int, error: BaseException
    ) -> None:
        """Log a skipped review-date batch."""
        logger.warning(
            "[%s] batch_index=%d batch_size=%d error_type=%s error_category=%s "
            "error_message=%s",
            EnrichmentEventType.REVIEW_BATCH_FAILED,
            batch_index,
            size,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )

    def log_review_batch_partial(
        self, batch_index: int, errors: list[object]
    ) -> None:
        """Log a review-date batch that returned GraphQL errors."""
        logger.warning(
            "[%s] batch_index=%d error_count=%d errors=%s",
            EnrichmentEventType.REVIEW_BATCH_PARTIAL,
            batch_index,
            len(errors),
            errors,
        )

    def log_review_run_completed(
        self, unique_prs: int, batches: int, items_enriched: int
    ) -> None:
        """Log the end of a review-date enrichment call."""
        logger.info(
            "[%s] unique_prs=%d batches=%d items_enriched=%d",
            EnrichmentEventType.REVIEW_RUN_COMPLETED,
            unique_prs,
            batches,
            items_enriched,
        )
