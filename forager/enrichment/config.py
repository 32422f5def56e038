"""Configuration for the enrichment stage.

Usage
-----
Create a configuration with defaults:

>>> config = EnrichmentConfig()
>>> config.review_batch_size
25

Or load from environment variables:

>>> import os
>>> os.environ["FORAGER_REVIEW_BATCH_SIZE"] = "10"
>>> EnrichmentConfig.from_env().review_batch_size
10
>>> del os.environ["FORAGER_REVIEW_BATCH_SIZE"]

"""

from __future__ import annotations

import dataclasses as dc
import os


@dc.dataclass(frozen=True, slots=True)
class EnrichmentConfig:
    """Tunables for the PR detail and review-date enrichers.

    Attributes
    ----------
    request_delay_s
        Minimum gap between consecutive PR detail requests. Default 0.1 s.
    review_batch_size
        Maximum number of pull requests per multiplexed GraphQL request.
        Default 25.
    review_timeline_limit
        Number of most recent review timeline entries requested per pull
        request. Default 30.

    """

    request_delay_s: float = 0.1
    review_batch_size: int = 25
    review_timeline_limit: int = 30

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < 1:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @staticmethod
    def _parse_delay(env_var: str, default: float) -> float:
        """Read a non-negative float env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < 0:
            msg = f"{env_var} must not be negative, got: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> EnrichmentConfig:
        """Create configuration from environment variables.

        Reads ``FORAGER_ENRICHMENT_DELAY_S``, ``FORAGER_REVIEW_BATCH_SIZE`` and
        ``FORAGER_REVIEW_TIMELINE_LIMIT``.

        Raises
        ------
        ValueError
            If a variable is set to an unparseable or out-of-range value.

        """
        return cls(
            request_delay_s=cls._parse_delay("FORAGER_ENRICHMENT_DELAY_S", 0.1),
            review_batch_size=cls._parse_positive_int(
                "FORAGER_REVIEW_BATCH_SIZE", 25
            ),
            review_timeline_limit=cls._parse_positive_int(
                "FORAGER_REVIEW_TIMELINE_LIMIT", 30
            ),
        )
