"""Label submission for issues and pull requests.

Issues and pull requests are labeled through the same issues endpoint, so
one sink serves both; the item kind is carried along for logging only.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, Field

from autolabel.github.client import GitHubAPIError
from autolabel.logging import log_labels_applied
from autolabel.rules.schema import EventKind

if TYPE_CHECKING:
    from autolabel.github.client import GitHubClient

logger = logging.getLogger(__name__)


class ItemKind(str, Enum):
    """Kind of item being labeled."""

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"

    @classmethod
    def from_event_kind(cls, kind: EventKind) -> ItemKind:
        return cls(kind.value)

    @property
    def display_name(self) -> str:
        return "PR" if self is ItemKind.PULL_REQUEST else "issue"


class LabelTarget(BaseModel):
    """Issue or pull request that labels are applied to."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Repository owner")
    repo: str = Field(..., description="Repository name")
    number: int = Field(..., description="Issue or pull request number")
    kind: ItemKind = Field(..., description="Whether the item is an issue or a PR")

    @property
    def reference(self) -> str:
        """Get 'owner/repo#number'."""
        return f"{self.owner}/{self.repo}#{self.number}"


class LabelApplyError(Exception):
    """Raised when labels could not be added to an item."""

    def __init__(self, message: str, *, labels: list[str] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error description.
            labels: Labels that were being submitted.
        """
        super().__init__(message)
        self.labels = labels or []


class LabelSink:
    """Applies resolved labels to an issue or pull request.

    Features:
    - Single submission path for issues and pull requests
    - Dry-run mode that logs without calling the API
    - Failures surface as LabelApplyError; retries are left to the client
    """

    def __init__(
        self,
        client: GitHubClient,
        *,
        dry_run: bool = False,
    ) -> None:
        """Initialize the label sink.

        Args:
            client: GitHub client used for submission.
            dry_run: If True, log labels without applying them.
        """
        self._client = client
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    async def apply(self, target: LabelTarget, labels: list[str]) -> bool:
        """Add labels to the target item.

        Args:
            target: Item to label.
            labels: Labels in resolution order.

        Returns:
            True if labels were submitted, False for an empty list or dry run.

        Raises:
            LabelApplyError: If the submission fails.
        """
        if not labels:
            logger.info("No labels to add to %s", target.reference)
            return False

        if self._dry_run:
            logger.info(
                "[DRY RUN] Would add labels to %s %s: %s",
                target.kind.display_name,
                target.reference,
                labels,
            )
            log_labels_applied(
                target.reference, target.kind.value, labels, "dry_run"
            )
            return False

        try:
            await self._client.add_labels(
                target.owner,
                target.repo,
                target.number,
                labels,
            )
        except (GitHubAPIError, httpx.HTTPError) as e:
            log_labels_applied(
                target.reference,
                target.kind.value,
                labels,
                "failed",
                error=str(e),
            )
            msg = f"Failed to add labels to {target.kind.display_name} {target.reference}"
            raise LabelApplyError(msg, labels=labels) from e

        logger.info(
            "Added labels to %s %s: %s",
            target.kind.display_name,
            target.reference,
            labels,
        )
        log_labels_applied(target.reference, target.kind.value, labels, "success")
        return True
