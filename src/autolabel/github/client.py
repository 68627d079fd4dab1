"""GitHub API client for reading repository files and labeling items.

This module provides the GitHubClient class which handles:
- Token authentication headers
- Repository content retrieval with base64 decoding
- Adding labels to issues and pull requests
- Exponential backoff for transient failures (5xx, network errors)
- Primary rate limit detection on 403 responses
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from typing import Any

import httpx

from autolabel.github.auth import auth_headers, get_github_token, mask_token

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "autolabel/0.1.0"


class GitHubAPIError(Exception):
    """Raised for GitHub API errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        """Initialize GitHub API error.

        Args:
            message: Error description.
            status_code: HTTP status code.
            response_body: Response JSON body if available.
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body or {}


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        *,
        reset_at: int | None = None,
        remaining: int = 0,
    ) -> None:
        """Initialize rate limit error.

        Args:
            message: Error description.
            reset_at: Epoch seconds when the rate limit resets.
            remaining: Remaining requests.
        """
        super().__init__(message, status_code=403)
        self.reset_at = reset_at
        self.remaining = remaining


class TransientError(Exception):
    """Raised for transient errors that should be retried.

    This includes 5xx server errors.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        """Initialize transient error.

        Args:
            message: Error description.
            status_code: HTTP status code if available.
            retry_after: Suggested retry delay in seconds.
        """
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Parse a response body as a JSON object, tolerating non-JSON bodies."""
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"data": body}


class GitHubClient:
    """Async GitHub API client.

    Features:
    - Exponential backoff for transient failures (5xx, network errors)
    - Primary rate limit detection
    - Injectable transport for testing

    The client supports both context manager and standalone usage. One
    instance is created per run and handed to the collaborators that need it.
    """

    # Exponential backoff settings for transient errors
    MAX_RETRIES = 3
    INITIAL_BACKOFF_SECONDS = 2.0
    MAX_BACKOFF_SECONDS = 16.0

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        initial_backoff: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            token: GitHub token. If None, reads from GITHUB_TOKEN.
            base_url: GitHub API base URL.
            user_agent: User-Agent header value.
            timeout: HTTP request timeout in seconds.
            initial_backoff: Override the first retry delay in seconds.
            transport: Optional httpx transport (for testing).
        """
        self._token = token if token is not None else get_github_token()
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout
        self._initial_backoff = (
            self.INITIAL_BACKOFF_SECONDS if initial_backoff is None else initial_backoff
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Get default request headers."""
        return auth_headers(self._token, self._user_agent)

    async def __aenter__(self) -> GitHubClient:
        """Enter async context."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure we have an active client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self.headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _handle_response(self, response: httpx.Response) -> Any:
        """Check an API response and parse its JSON body.

        Args:
            response: HTTP response.

        Returns:
            Parsed JSON response.

        Raises:
            RateLimitError: If rate limit exceeded.
            TransientError: For 5xx errors that should be retried.
            GitHubAPIError: For other API errors.
        """
        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise GitHubAPIError(
                    f"GitHub API returned invalid JSON: {e}",
                    status_code=response.status_code,
                ) from e

        if response.status_code >= 500:
            retry_after = int(response.headers.get("Retry-After", 0)) or None
            raise TransientError(
                f"GitHub API server error: {response.status_code}",
                status_code=response.status_code,
                retry_after=retry_after,
            )

        body = _json_body(response)
        message = body.get("message", "Unknown error")

        if response.status_code == 403 and (
            "rate limit" in str(message).lower()
            or response.headers.get("X-RateLimit-Remaining") == "0"
        ):
            reset = response.headers.get("X-RateLimit-Reset")
            raise RateLimitError(
                f"GitHub API rate limit exceeded: {message}",
                reset_at=int(reset) if reset else None,
            )

        raise GitHubAPIError(
            f"GitHub API error: {response.status_code} - {message}",
            status_code=response.status_code,
            response_body=body,
        )

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Make a request with automatic retry for transient errors.

        Args:
            method: HTTP method.
            path: API path.
            params: Query parameters.
            json: JSON request body.

        Returns:
            Parsed JSON response.

        Raises:
            GitHubAPIError: For non-recoverable errors or exhausted retries.
        """
        client = await self._ensure_client()
        last_error: Exception | None = None

        for attempt in range(self.MAX_RETRIES):
            try:
                response = await client.request(method, path, params=params, json=json)
                return self._handle_response(response)

            except TransientError as e:
                backoff = e.retry_after or self._backoff(attempt)
                last_error = e
                logger.warning(
                    "Transient error (attempt %d/%d): %s. Retrying in %.1f seconds",
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    backoff,
                )

            except httpx.RequestError as e:
                backoff = self._backoff(attempt)
                last_error = e
                logger.warning(
                    "Network error (attempt %d/%d): %s. Retrying in %.1f seconds",
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    backoff,
                )

            if attempt < self.MAX_RETRIES - 1:
                await asyncio.sleep(backoff)

        status_code = getattr(last_error, "status_code", None)
        raise GitHubAPIError(
            f"Request failed after {self.MAX_RETRIES} attempts: {last_error}",
            status_code=status_code,
        ) from last_error

    def _backoff(self, attempt: int) -> float:
        return min(self._initial_backoff * (2**attempt), self.MAX_BACKOFF_SECONDS)

    async def get_content(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        ref: str | None = None,
    ) -> str:
        """Get the decoded text of a repository file.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: File path within the repository.
            ref: Commit, branch or tag to read at.

        Returns:
            File content as text.

        Raises:
            GitHubAPIError: If the file cannot be fetched or decoded.
        """
        params = {"ref": ref} if ref else None
        data = await self._request_with_retry(
            "GET",
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}",
            params=params,
        )

        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise GitHubAPIError(f"Repository path '{path}' is not a file")

        encoding = data.get("encoding")
        content = data.get("content", "")
        if encoding != "base64":
            raise GitHubAPIError(
                f"Unsupported content encoding for '{path}': {encoding}"
            )

        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise GitHubAPIError(f"Cannot decode content of '{path}': {e}") from e

    async def add_labels(
        self,
        owner: str,
        repo: str,
        number: int,
        labels: list[str],
    ) -> list[str]:
        """Add labels to an issue or pull request.

        Pull requests share the issue number space, so one endpoint serves
        both.

        Args:
            owner: Repository owner.
            repo: Repository name.
            number: Issue or pull request number.
            labels: Labels to add.

        Returns:
            Names of all labels on the item after the call.
        """
        data = await self._request_with_retry(
            "POST",
            f"/repos/{owner}/{repo}/issues/{number}/labels",
            json={"labels": labels},
        )
        if not isinstance(data, list):
            return []
        return [item["name"] for item in data if isinstance(item, dict) and "name" in item]

    def __repr__(self) -> str:
        """Get string representation."""
        return (
            f"GitHubClient(base_url={self._base_url!r}, "
            f"token={mask_token(self._token)!r})"
        )
