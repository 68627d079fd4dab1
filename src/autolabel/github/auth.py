"""GitHub token handling."""

from __future__ import annotations

import os


class AuthenticationError(Exception):
    """Raised when GitHub authentication fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        """Initialize authentication error.

        Args:
            message: Error description.
            status_code: HTTP status code if from API response.
        """
        super().__init__(message)
        self.status_code = status_code


def get_github_token() -> str:
    """Get GitHub token from environment.

    Returns:
        GitHub token.

    Raises:
        AuthenticationError: If GITHUB_TOKEN is not set.
    """
    token = os.environ.get("GITHUB_TOKEN", "").strip()
    if not token:
        raise AuthenticationError(
            "GITHUB_TOKEN environment variable is not set. "
            "Please set it to a token with permission to label issues."
        )
    return token


def auth_headers(token: str, user_agent: str) -> dict[str, str]:
    """Build request headers for token authentication."""
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": user_agent,
    }


def mask_token(token: str) -> str:
    """Mask a token for safe logging.

    Args:
        token: Token to mask.

    Returns:
        Masked token showing first 4 and last 4 characters.
    """
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
