"""Shared pytest fixtures for autolabel tests.

This module provides common fixtures for:
- Temporary filter documents
- Sample GitHub event payloads
- A GitHub Actions environment
- A fake GitHub API transport
"""

from __future__ import annotations

import base64
import json
import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import structlog
import yaml

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Restore logging setup so streams bound by one test don't leak."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level

    yield

    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config() -> dict[str, Any]:
    """Return a filter document with issue and pull request filters."""
    return {
        "filters": [
            {
                "label": "bug",
                "events": ["issues"],
                "targets": ["title"],
                "patterns": ["bug", "/crash(es)?/i"],
            },
            {
                "label": "docs",
                "events": ["issues", "pull_request"],
                "targets": ["title", "body"],
                "patterns": ["/docs?/i"],
            },
            {
                "label": "dependencies",
                "events": ["pull_request"],
                "targets": ["title"],
                "regexs": ["^(chore|build)\\(deps\\)"],
            },
        ],
    }


@pytest.fixture
def write_config(temp_dir: Path) -> Callable[..., Path]:
    """Factory fixture to write filter documents.

    Args:
        config: Document to dump as YAML, or raw text
        filename: Name of the file (default: autolabel.yml)

    Returns:
        Path to the written file
    """

    def _write(config: dict[str, Any] | str, filename: str = "autolabel.yml") -> Path:
        path = temp_dir / filename
        if isinstance(config, str):
            path.write_text(config, encoding="utf-8")
        else:
            with path.open("w") as f:
                yaml.safe_dump(config, f)
        return path

    return _write


# ============================================================================
# GitHub Event Fixtures
# ============================================================================


@pytest.fixture
def github_issue_event() -> dict[str, Any]:
    """Return a sample 'issues' event payload."""
    return {
        "action": "opened",
        "issue": {
            "number": 42,
            "title": "Bug: crash on start",
            "body": "The app crashes when the DOCS page is opened.",
            "state": "open",
            "labels": [],
            "html_url": "https://github.com/octocat/hello-world/issues/42",
        },
        "repository": {
            "name": "hello-world",
            "full_name": "octocat/hello-world",
            "owner": {"login": "octocat"},
        },
        "sender": {"login": "reporter"},
    }


@pytest.fixture
def github_pr_event() -> dict[str, Any]:
    """Return a sample 'pull_request' event payload."""
    return {
        "action": "opened",
        "number": 123,
        "pull_request": {
            "number": 123,
            "title": "chore(deps): bump httpx",
            "body": None,
            "state": "open",
            "draft": False,
            "labels": [],
            "html_url": "https://github.com/octocat/hello-world/pull/123",
        },
        "repository": {
            "name": "hello-world",
            "full_name": "octocat/hello-world",
            "owner": {"login": "octocat"},
        },
        "sender": {"login": "dependabot[bot]"},
    }


@pytest.fixture
def write_event(temp_dir: Path) -> Callable[[dict[str, Any]], Path]:
    """Factory fixture to write an event payload file."""

    def _write(payload: dict[str, Any]) -> Path:
        path = temp_dir / "event.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def action_env(
    write_event: Callable[[dict[str, Any]], Path],
    github_issue_event: dict[str, Any],
) -> dict[str, str]:
    """Return a GitHub Actions environment for an 'issues' event."""
    return {
        "GITHUB_TOKEN": "ghs_" + "a" * 36,
        "GITHUB_REPOSITORY": "octocat/hello-world",
        "GITHUB_SHA": "0123456789abcdef0123456789abcdef01234567",
        "GITHUB_EVENT_NAME": "issues",
        "GITHUB_EVENT_PATH": str(write_event(github_issue_event)),
    }


# ============================================================================
# GitHub API Fixtures
# ============================================================================


def content_response(text: str) -> dict[str, Any]:
    """Build a contents API response body for a file."""
    encoded = base64.encodebytes(text.encode("utf-8")).decode("ascii")
    return {
        "type": "file",
        "encoding": "base64",
        "name": "autolabel.yml",
        "path": ".github/autolabel.yml",
        "content": encoded,
    }


class FakeGitHub:
    """Records requests and serves canned contents/labels responses."""

    def __init__(self, config_text: str) -> None:
        self.config_text = config_text
        self.requests: list[httpx.Request] = []
        self.label_status = 200
        self.contents_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if "/contents/" in path:
            if self.contents_status != 200:
                return httpx.Response(self.contents_status, json={"message": "Not Found"})
            return httpx.Response(200, json=content_response(self.config_text))

        if path.endswith("/labels") and request.method == "POST":
            if self.label_status != 200:
                return httpx.Response(
                    self.label_status, json={"message": "Validation Failed"}
                )
            labels = json.loads(request.content)["labels"]
            return httpx.Response(200, json=[{"name": name} for name in labels])

        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def label_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/labels")]


@pytest.fixture
def fake_github(sample_config: dict[str, Any]) -> FakeGitHub:
    """Return a fake GitHub API serving the sample filter document."""
    return FakeGitHub(yaml.safe_dump(sample_config))
