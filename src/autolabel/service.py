"""Labeling run orchestration.

This module provides the LabelService class which, for one triggering
event:
- Reads the event payload into a MatchContext
- Fetches and parses the filter document from the repository
- Resolves labels against the rules
- Hands the labels to the label sink
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from autolabel.actions.labels import ItemKind, LabelTarget
from autolabel.config.loader import ConfigError, decode_config, parse_rules
from autolabel.github.client import GitHubAPIError
from autolabel.github.events import read_event_context
from autolabel.logging import (
    log_event_received,
    log_labels_resolved,
    log_rule_matched,
    log_rules_loaded,
)
from autolabel.rules.engine import LabelResolver

if TYPE_CHECKING:
    from autolabel.actions.labels import LabelSink
    from autolabel.config.schema import ActionSettings
    from autolabel.github.client import GitHubClient
    from autolabel.rules.schema import RuleSet

logger = logging.getLogger(__name__)


class LabelingOutcome(BaseModel):
    """Result of one labeling run."""

    model_config = ConfigDict(frozen=True)

    target: LabelTarget = Field(..., description="Item that was evaluated")
    labels: list[str] = Field(default_factory=list, description="Resolved labels")
    applied: bool = Field(default=False, description="Whether labels were submitted")
    dry_run: bool = Field(default=False, description="Whether this was a dry run")


async def fetch_rules(
    client: GitHubClient,
    owner: str,
    repo: str,
    path: str,
    *,
    ref: str | None = None,
) -> RuleSet:
    """Fetch the filter document from a repository and parse it.

    Args:
        client: GitHub client.
        owner: Repository owner.
        repo: Repository name.
        path: Path of the filter document.
        ref: Commit to read at.

    Returns:
        Rules in declaration order.

    Raises:
        ConfigError: If the document cannot be fetched, decoded or validated.
    """
    try:
        content = await client.get_content(owner, repo, path, ref=ref)
    except GitHubAPIError as e:
        msg = f"Failed to load configuration file '{path}': {e}"
        raise ConfigError(msg, path) from e

    try:
        return parse_rules(decode_config(content, path))
    except ConfigError as e:
        e.path = path
        raise


class LabelService:
    """Runs one labeling pass for a triggering event.

    Collaborators are passed in explicitly: the client is shared by the
    configuration fetch and the sink, and is owned by the caller.
    """

    def __init__(
        self,
        settings: ActionSettings,
        client: GitHubClient,
        sink: LabelSink,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Run settings.
            client: GitHub client for fetching the filter document.
            sink: Label sink for applying resolved labels.
        """
        self._settings = settings
        self._client = client
        self._sink = sink

    async def run(self) -> LabelingOutcome:
        """Resolve and apply labels for the triggering event.

        Returns:
            LabelingOutcome describing what was resolved and applied.

        Raises:
            EventPayloadError: If the event cannot be read.
            ConfigError: If the filter document cannot be loaded.
            PatternError: If a pattern fails to compile.
            LabelApplyError: If labels cannot be added.
        """
        settings = self._settings

        event = read_event_context(settings.event_name, settings.event_path)
        target = LabelTarget(
            owner=settings.owner,
            repo=settings.repo,
            number=event.number,
            kind=ItemKind.from_event_kind(event.event_kind),
        )
        log_event_received(
            settings.event_name,
            target.kind.value,
            target.number,
            settings.repository,
        )
        logger.debug("title = %r", event.match.title)
        logger.debug("body = %r", event.match.body)

        rules = await fetch_rules(
            self._client,
            settings.owner,
            settings.repo,
            settings.config_path,
            ref=settings.sha,
        )
        log_rules_loaded(settings.config_path, settings.sha, len(rules))

        resolution = LabelResolver(rules).resolve(event.match)
        for match in resolution.matches:
            log_rule_matched(
                match.rule_index, match.label, match.pattern, match.target.value
            )
        log_labels_resolved(resolution.labels, len(rules), resolution.rules_evaluated)

        applied = await self._sink.apply(target, resolution.labels)

        return LabelingOutcome(
            target=target,
            labels=resolution.labels,
            applied=applied,
            dry_run=self._sink.dry_run,
        )
