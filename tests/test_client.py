"""Tests for the GitHub API client."""

from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest

from autolabel.github import (
    AuthenticationError,
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
    mask_token,
)

TOKEN = "ghs_" + "b" * 36


def content_response(text: str) -> dict[str, str]:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return {"type": "file", "encoding": "base64", "content": encoded}


def make_client(handler, **kwargs) -> GitHubClient:
    return GitHubClient(
        TOKEN,
        initial_backoff=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestGetContent:
    """Tests for repository file retrieval."""

    def test_decodes_file(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=content_response("filters: []\n"))

        async def run() -> str:
            async with make_client(handler) as client:
                return await client.get_content(
                    "octocat", "hello-world", ".github/autolabel.yml", ref="abc123"
                )

        assert asyncio.run(run()) == "filters: []\n"
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/repos/octocat/hello-world/contents/.github/autolabel.yml"
        assert request.url.params["ref"] == "abc123"
        assert request.headers["Authorization"] == f"token {TOKEN}"

    def test_directory_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"type": "file", "name": "a.yml"}])

        async def run() -> str:
            async with make_client(handler) as client:
                return await client.get_content("o", "r", ".github")

        with pytest.raises(GitHubAPIError, match="is not a file"):
            asyncio.run(run())

    def test_unsupported_encoding(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"type": "file", "encoding": "none", "content": ""})

        async def run() -> str:
            async with make_client(handler) as client:
                return await client.get_content("o", "r", "big.yml")

        with pytest.raises(GitHubAPIError, match="Unsupported content encoding"):
            asyncio.run(run())

    def test_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        async def run() -> str:
            async with make_client(handler) as client:
                return await client.get_content("o", "r", "missing.yml")

        with pytest.raises(GitHubAPIError) as exc_info:
            asyncio.run(run())

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == {"message": "Not Found"}


class TestAddLabels:
    """Tests for label submission."""

    def test_posts_labels(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"name": "existing"}, {"name": "bug"}])

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("octocat", "hello-world", 42, ["bug"])

        assert asyncio.run(run()) == ["existing", "bug"]
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/repos/octocat/hello-world/issues/42/labels"
        assert json.loads(seen[0].content) == {"labels": ["bug"]}

    def test_validation_error_not_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(422, json={"message": "Validation Failed"})

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        with pytest.raises(GitHubAPIError, match="422 - Validation Failed"):
            asyncio.run(run())
        assert calls == 1


class TestRetries:
    """Tests for transient failure handling."""

    def test_server_error_retried(self) -> None:
        responses = [
            httpx.Response(502, text="Bad Gateway"),
            httpx.Response(200, json=[{"name": "bug"}]),
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        assert asyncio.run(run()) == ["bug"]
        assert responses == []

    def test_network_error_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=[{"name": "bug"}])

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        assert asyncio.run(run()) == ["bug"]
        assert calls == 2

    def test_gives_up_after_max_retries(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503, text="Unavailable")

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        with pytest.raises(GitHubAPIError, match="failed after 3 attempts") as exc_info:
            asyncio.run(run())

        assert calls == GitHubClient.MAX_RETRIES
        assert exc_info.value.status_code == 503


class TestRateLimit:
    """Tests for rate limit detection."""

    def test_rate_limit_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                403,
                json={"message": "API rate limit exceeded for installation"},
                headers={"X-RateLimit-Reset": "1700000000"},
            )

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        with pytest.raises(RateLimitError) as exc_info:
            asyncio.run(run())

        assert exc_info.value.reset_at == 1700000000
        assert exc_info.value.status_code == 403

    def test_remaining_header(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                403,
                json={"message": "Forbidden"},
                headers={"X-RateLimit-Remaining": "0"},
            )

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        with pytest.raises(RateLimitError):
            asyncio.run(run())

    def test_plain_forbidden(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "Resource not accessible by integration"})

        async def run() -> list[str]:
            async with make_client(handler) as client:
                return await client.add_labels("o", "r", 1, ["bug"])

        with pytest.raises(GitHubAPIError) as exc_info:
            asyncio.run(run())

        assert not isinstance(exc_info.value, RateLimitError)


class TestClientSetup:
    """Tests for client construction."""

    def test_token_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", TOKEN)
        assert GitHubClient().headers["Authorization"] == f"token {TOKEN}"

    def test_missing_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)

        with pytest.raises(AuthenticationError):
            GitHubClient()

    def test_base_url(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            encoded = base64.b64encode(b"x").decode()
            return httpx.Response(200, json={"type": "file", "encoding": "base64", "content": encoded})

        async def run() -> str:
            async with make_client(handler, base_url="https://ghe.example.com/api/v3/") as client:
                return await client.get_content("o", "r", "f.yml")

        assert asyncio.run(run()) == "x"
        assert str(seen[0].url) == "https://ghe.example.com/api/v3/repos/o/r/contents/f.yml"

    def test_repr_masks_token(self) -> None:
        client = GitHubClient(TOKEN)

        assert TOKEN not in repr(client)
        assert mask_token(TOKEN) in repr(client)
