"""Triggering event payload handling.

Turns the event name and payload file that GitHub Actions provides into
the item reference and MatchContext the resolver works on.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from autolabel.rules.schema import EventKind, MatchContext

# GitHub event names that carry an issue or pull request
EVENT_NAME_KINDS: dict[str, EventKind] = {
    "issues": EventKind.ISSUE,
    "pull_request": EventKind.PULL_REQUEST,
    "pull_request_target": EventKind.PULL_REQUEST,
}

# Payload key holding the item for each kind
PAYLOAD_KEYS: dict[EventKind, str] = {
    EventKind.ISSUE: "issue",
    EventKind.PULL_REQUEST: "pull_request",
}


class EventPayloadError(Exception):
    """Raised when the triggering event cannot be read or interpreted."""


class EventContext(BaseModel):
    """Item reference and text extracted from a triggering event."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., description="Issue or pull request number")
    match: MatchContext = Field(..., description="Text the rules are evaluated against")

    @property
    def event_kind(self) -> EventKind:
        return self.match.event_kind


def event_kind_from_name(event_name: str) -> EventKind:
    """Map a GitHub event name to an EventKind.

    Args:
        event_name: Value of GITHUB_EVENT_NAME.

    Returns:
        Corresponding EventKind.

    Raises:
        EventPayloadError: If the event does not carry an issue or pull request.
    """
    kind = EVENT_NAME_KINDS.get(event_name)
    if kind is None:
        supported = ", ".join(sorted(EVENT_NAME_KINDS))
        msg = f"Unsupported event '{event_name}' (supported: {supported})"
        raise EventPayloadError(msg)
    return kind


def load_event_payload(path: str | Path) -> dict[str, Any]:
    """Read the triggering event payload.

    Args:
        path: Path from GITHUB_EVENT_PATH.

    Returns:
        Decoded payload.

    Raises:
        EventPayloadError: If the file is unreadable or not a JSON object.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read event payload: {e}"
        raise EventPayloadError(msg) from e

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        msg = f"Event payload is not valid JSON: {e}"
        raise EventPayloadError(msg) from e

    if not isinstance(payload, dict):
        msg = "Event payload must be a JSON object"
        raise EventPayloadError(msg)

    return payload


def extract_event_context(event_name: str, payload: dict[str, Any]) -> EventContext:
    """Extract the item number, title and body from an event payload.

    Args:
        event_name: Value of GITHUB_EVENT_NAME.
        payload: Decoded event payload.

    Returns:
        EventContext for the issue or pull request.

    Raises:
        EventPayloadError: If the payload lacks the item, its number or title.
    """
    kind = event_kind_from_name(event_name)
    key = PAYLOAD_KEYS[kind]

    item = payload.get(key)
    if not isinstance(item, dict):
        msg = f"Event payload has no '{key}' object"
        raise EventPayloadError(msg)

    number = item.get("number")
    if not isinstance(number, int) or isinstance(number, bool):
        msg = f"Event payload '{key}' has no number"
        raise EventPayloadError(msg)

    title = item.get("title")
    if not isinstance(title, str):
        msg = f"Event payload '{key}' has no title"
        raise EventPayloadError(msg)

    # body is null when the item was opened without a description
    body = item.get("body")
    if body is not None and not isinstance(body, str):
        msg = f"Event payload '{key}' body is not a string"
        raise EventPayloadError(msg)

    return EventContext(
        number=number,
        match=MatchContext(event_kind=kind, title=title, body=body),
    )


def read_event_context(event_name: str, event_path: str | Path) -> EventContext:
    """Load the payload file and extract the event context."""
    return extract_event_context(event_name, load_event_payload(event_path))
