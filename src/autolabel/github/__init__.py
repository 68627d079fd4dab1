"""GitHub API client and event payload handling."""

from autolabel.github.auth import (
    AuthenticationError,
    get_github_token,
    mask_token,
)
from autolabel.github.client import (
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
    TransientError,
)
from autolabel.github.events import (
    EventContext,
    EventPayloadError,
    event_kind_from_name,
    extract_event_context,
    load_event_payload,
    read_event_context,
)

__all__ = [
    "AuthenticationError",
    "EventContext",
    "EventPayloadError",
    "GitHubAPIError",
    "GitHubClient",
    "RateLimitError",
    "TransientError",
    "event_kind_from_name",
    "extract_event_context",
    "get_github_token",
    "load_event_payload",
    "mask_token",
    "read_event_context",
]
