"""GitHub REST and GraphQL clients used by the enrichers."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx
import msgspec

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import PullRequestDetails

_DEFAULT_API_URL = "https://api.github.com"


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubClientConfig:
    """Configuration shared by the REST and GraphQL clients.

    Attributes
    ----------
    token
        Optional personal access token. REST detail fetches work without one
        (at a much lower rate limit); GraphQL requires it.
    api_url
        API root, ``https://api.github.com`` unless pointing at GitHub
        Enterprise or a test double.
    timeout_s
        Per-request timeout in seconds.
    user_agent
        ``User-Agent`` header sent with every request.

    """

    token: str | None = None
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "forager/0.1"

    @property
    def graphql_endpoint(self) -> str:
        """Return the GraphQL endpoint under ``api_url``."""
        return f"{self.api_url.rstrip('/')}/graphql"

    @classmethod
    def from_env(cls) -> GitHubClientConfig:
        """Build configuration from ``FORAGER_GITHUB_TOKEN`` and friends."""
        token = os.environ.get("FORAGER_GITHUB_TOKEN", "").strip() or None
        api_url = (
            os.environ.get("FORAGER_GITHUB_API_URL", "").strip() or _DEFAULT_API_URL
        )
        return cls(token=token, api_url=api_url)


class PullRequestDetailSource(typ.Protocol):
    """Anything able to fetch pull request details by REST URL."""

    async def fetch_pull_request(self, api_url: str) -> PullRequestDetails:
        """Return details for the pull request at ``api_url``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GraphQLResult:
    """Decoded GraphQL response.

    ``errors`` is kept alongside ``data`` because GitHub returns partial data
    when only some aliased sub-queries fail.
    """

    data: dict[str, typ.Any]
    errors: list[typ.Any]


class GraphQLExecutor(typ.Protocol):
    """Anything able to run a GraphQL query document."""

    async def execute(
        self, query: str, variables: dict[str, typ.Any] | None = None
    ) -> GraphQLResult:
        """Run ``query`` and return its data and errors."""
        ...


def _json_body(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError as exc:
        raise GitHubResponseShapeError.missing("response") from exc


def _details_from_response(payload: object) -> PullRequestDetails:
    if not isinstance(payload, dict) or not payload.get("title"):
        raise GitHubResponseShapeError.missing("title")
    try:
        return msgspec.convert(payload, PullRequestDetails)
    except msgspec.ValidationError as exc:
        raise GitHubResponseShapeError.missing("pull_request") from exc


class GitHubRestClient:
    """REST client for pull request detail lookups."""

    def __init__(
        self,
        config: GitHubClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": config.user_agent,
        }
        if config.token:
            headers["Authorization"] = f"token {config.token}"

        self._config = config
        self._headers = headers
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    @property
    def api_url(self) -> str:
        """Return the configured API root."""
        return self._config.api_url

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_pull_request(self, api_url: str) -> PullRequestDetails:
        """Fetch ``GET /repos/{owner}/{repo}/pulls/{number}``.

        Raises
        ------
        GitHubAPIError
            If GitHub answers with a non-2xx status.
        GitHubResponseShapeError
            If the body is not a pull request resource.
        httpx.HTTPError
            If the request itself fails.

        """
        response = await self._client.get(api_url, headers=self._headers)
        if not response.is_success:
            raise GitHubAPIError.http_error(response.status_code, url=api_url)
        return _details_from_response(_json_body(response))


class GitHubGraphQLClient:
    """GraphQL client tolerant of partial ``errors`` payloads."""

    def __init__(
        self,
        config: GitHubClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client; a non-empty token is required."""
        if config.token is None:
            raise GitHubConfigError.missing_token()
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._headers = {
            "Authorization": f"bearer {config.token}",
            "User-Agent": config.user_agent,
            "Content-Type": "application/json",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def execute(
        self, query: str, variables: dict[str, typ.Any] | None = None
    ) -> GraphQLResult:
        """POST ``query`` and return whatever data and errors came back.

        Raises
        ------
        GitHubAPIError
            If GitHub answers with a non-2xx status.
        GitHubResponseShapeError
            If the body is not a JSON object.

        """
        body: dict[str, typ.Any] = {"query": query}
        if variables:
            body["variables"] = variables
        response = await self._client.post(
            self._config.graphql_endpoint, json=body, headers=self._headers
        )
        if not response.is_success:
            raise GitHubAPIError.http_error(response.status_code)

        payload = _json_body(response)
        if not isinstance(payload, dict):
            raise GitHubResponseShapeError.missing("response")
        data = payload.get("data")
        errors = payload.get("errors")
        return GraphQLResult(
            data=data if isinstance(data, dict) else {},
            errors=errors if isinstance(errors, list) else [],
        )
