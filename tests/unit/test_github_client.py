"""Unit tests for the GitHub REST and GraphQL clients."""

from __future__ import annotations

import datetime as dt
import json
import secrets
import typing as typ

import httpx
import pytest

from forager.github.client import (
    GitHubClientConfig,
    GitHubGraphQLClient,
    GitHubRestClient,
)
from forager.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)

_TOKEN = secrets.token_hex(8)
_API = "https://api.example.test"
_PR_URL = f"{_API}/repos/octo/reef/pulls/456"


def _pr_payload(**overrides: typ.Any) -> dict[str, typ.Any]:  # noqa: ANN401
    payload: dict[str, typ.Any] = {
        "number": 456,
        "title": "Fix bug in parser",
        "state": "closed",
        "body": "Handles trailing commas.",
        "html_url": "https://github.com/octo/reef/pull/456",
        "labels": [{"name": "bug", "color": "d73a4a", "id": 1}],
        "updated_at": "2024-01-16T10:00:00Z",
        "closed_at": "2024-01-16T10:00:00Z",
        "merged_at": "2024-01-16T10:00:00Z",
        "merged": True,
        "user": {"login": "octo"},
    }
    payload.update(overrides)
    return payload


def _rest_client(
    handler: typ.Callable[[httpx.Request], httpx.Response],
    *,
    token: str | None = _TOKEN,
) -> GitHubRestClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GitHubRestClient(
        GitHubClientConfig(token=token, api_url=_API), http_client=http_client
    )


class TestRestClient:
    """Tests for pull request detail fetches."""

    @pytest.mark.asyncio
    async def test_fetch_sends_headers_and_decodes(self) -> None:
        """Accept, auth, and user agent headers are sent; fields are decoded."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_pr_payload())

        client = _rest_client(handler)
        details = await client.fetch_pull_request(_PR_URL)

        request = seen[0]
        assert str(request.url) == _PR_URL
        assert request.headers["Accept"] == "application/vnd.github.v3+json"
        assert request.headers["Authorization"] == f"token {_TOKEN}"
        assert request.headers["User-Agent"].startswith("forager/")
        assert details.title == "Fix bug in parser"
        assert details.merged is True
        assert details.merged_at == dt.datetime(2024, 1, 16, 10, tzinfo=dt.UTC)
        assert [label.name for label in details.labels] == ["bug"]

    @pytest.mark.asyncio
    async def test_fetch_without_token_omits_authorization(self) -> None:
        """Anonymous detail fetches are allowed."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_pr_payload())

        await _rest_client(handler, token=None).fetch_pull_request(_PR_URL)

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [301, 304, 404])
    async def test_non_2xx_raises_api_error(self, status: int) -> None:
        """Redirects and error statuses surface with their code."""
        client = _rest_client(
            lambda _request: httpx.Response(
                status, json={}, headers={"Location": f"{_API}/elsewhere"}
            )
        )

        with pytest.raises(GitHubAPIError) as excinfo:
            await client.fetch_pull_request(_PR_URL)

        assert excinfo.value.status_code == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, content=b"<html>"),
            httpx.Response(200, json={"title": 12}),
            httpx.Response(200, json={"state": "open"}),
            httpx.Response(200, json=_pr_payload(title=None)),
            httpx.Response(200, json=["not", "an", "object"]),
        ],
    )
    async def test_unexpected_body_raises_shape_error(
        self, response: httpx.Response
    ) -> None:
        """Bodies that are not pull requests raise GitHubResponseShapeError."""
        client = _rest_client(lambda _request: response)

        with pytest.raises(GitHubResponseShapeError):
            await client.fetch_pull_request(_PR_URL)


def _graphql_client(
    payloads: list[tuple[int, dict[str, typ.Any]]],
) -> tuple[GitHubGraphQLClient, list[httpx.Request]]:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status, payload = payloads[len(calls) - 1]
        return httpx.Response(status_code=status, json=payload)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = GitHubGraphQLClient(
        GitHubClientConfig(token=_TOKEN, api_url=_API), http_client=http_client
    )
    return client, calls


class TestGraphQLClient:
    """Tests for the GraphQL executor."""

    def test_requires_token(self) -> None:
        """A missing or blank token is a configuration error."""
        with pytest.raises(GitHubConfigError, match="FORAGER_GITHUB_TOKEN"):
            GitHubGraphQLClient(GitHubClientConfig())
        with pytest.raises(GitHubConfigError, match="non-empty"):
            GitHubGraphQLClient(GitHubClientConfig(token="   "))

    @pytest.mark.asyncio
    async def test_execute_posts_query_with_bearer_token(self) -> None:
        """The query is posted to the GraphQL endpoint with bearer auth."""
        client, calls = _graphql_client([(200, {"data": {"pr0": None}})])

        result = await client.execute("query { viewer { login } }")

        request = calls[0]
        assert str(request.url) == f"{_API}/graphql"
        assert request.headers["Authorization"] == f"bearer {_TOKEN}"
        assert json.loads(request.content) == {"query": "query { viewer { login } }"}
        assert result.data == {"pr0": None}
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_execute_keeps_partial_data_alongside_errors(self) -> None:
        """GraphQL errors do not discard returned data."""
        client, _ = _graphql_client(
            [(200, {"data": {"pr0": {"ok": True}}, "errors": [{"message": "x"}]})]
        )

        result = await client.execute("query { x }", {"n": 1})

        assert result.data == {"pr0": {"ok": True}}
        assert result.errors == [{"message": "x"}]

    @pytest.mark.asyncio
    async def test_execute_raises_on_http_error(self) -> None:
        """Non-2xx responses raise GitHubAPIError."""
        client, _ = _graphql_client([(502, {"message": "bad gateway"})])

        with pytest.raises(GitHubAPIError) as excinfo:
            await client.execute("query { x }")

        assert excinfo.value.status_code == 502
