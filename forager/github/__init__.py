"""GitHub payload models, normalization and API clients."""

from __future__ import annotations

from .client import (
    GitHubClientConfig,
    GitHubGraphQLClient,
    GitHubRestClient,
    GraphQLResult,
)
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .events import SUPPORTED_EVENT_TYPES, RawEvent, decode_event
from .models import CanonicalItem, Label, PullRequestDetails, UserRef
from .normalize import (
    available_labels,
    available_repositories,
    available_users,
    normalize_event,
    normalize_events,
)
from .search import decode_search_items, filter_search_items

__all__ = [
    "SUPPORTED_EVENT_TYPES",
    "CanonicalItem",
    "GitHubAPIError",
    "GitHubClientConfig",
    "GitHubConfigError",
    "GitHubGraphQLClient",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GraphQLResult",
    "Label",
    "PullRequestDetails",
    "RawEvent",
    "UserRef",
    "available_labels",
    "available_repositories",
    "available_users",
    "decode_event",
    "decode_search_items",
    "filter_search_items",
    "normalize_event",
    "normalize_events",
]
