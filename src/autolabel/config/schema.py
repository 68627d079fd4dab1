"""Pydantic schema models for configuration.

This module defines:
- FilterDeclaration: One rule as written in the filter document
- FiltersDocument: Top-level filter document container
- ActionSettings: Run settings read from the GitHub Actions environment
"""

from __future__ import annotations

import os
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

DEFAULT_CONFIG_PATH = ".github/autolabel.yml"
DEFAULT_API_URL = "https://api.github.com"

NonEmptyStr = Annotated[str, Field(min_length=1)]


def _as_list(v: object) -> object:
    """Allow a single string where a list of strings is expected."""
    if isinstance(v, str):
        return [v]
    return v


class FilterDeclaration(BaseModel):
    """One filter as declared in the configuration document.

    Selectors are kept as raw strings here; the loader maps them to
    EventKind and MatchTarget so that an unknown token can be reported
    together with the rule it belongs to.

    Attributes:
        label: Label to attach on match
        events: Event selectors ('issues', 'pull_request')
        targets: Target selectors ('title', 'body' or 'comment')
        patterns: Pattern specifications (also accepted as 'regexs')
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: NonEmptyStr
    events: Annotated[list[NonEmptyStr], Field(min_length=1)]
    targets: Annotated[list[NonEmptyStr], Field(min_length=1)]
    patterns: Annotated[
        list[NonEmptyStr],
        Field(min_length=1, validation_alias=AliasChoices("patterns", "regexs")),
    ]

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: str) -> str:
        """Reject labels made only of whitespace."""
        stripped = v.strip()
        if not stripped:
            msg = "label must not be blank"
            raise ValueError(msg)
        return stripped

    @field_validator("events", "targets", "patterns", mode="before")
    @classmethod
    def single_to_list(cls, v: object) -> object:
        return _as_list(v)


class FiltersDocument(BaseModel):
    """Top-level filter document.

    Attributes:
        filters: Filters in declaration order
    """

    model_config = ConfigDict(extra="forbid")

    filters: Annotated[list[Any], Field(min_length=1)]


class ActionSettings(BaseModel):
    """Settings for one labeling run.

    Attributes:
        token: GitHub token used for API calls
        repository: Repository in 'owner/repo' form
        sha: Commit the filter document is read at
        event_name: Name of the triggering event
        event_path: Path to the triggering event payload
        config_path: Repository path of the filter document
        api_url: GitHub API base URL
        dry_run: Resolve labels without applying them
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    token: NonEmptyStr
    repository: NonEmptyStr
    sha: NonEmptyStr
    event_name: NonEmptyStr
    event_path: NonEmptyStr
    config_path: NonEmptyStr = DEFAULT_CONFIG_PATH
    api_url: NonEmptyStr = DEFAULT_API_URL
    dry_run: bool = False

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Validate repository is 'owner/repo'."""
        owner, sep, name = v.partition("/")
        if not sep or not owner or not name or "/" in name:
            msg = "repository must be in 'owner/repo' form"
            raise ValueError(msg)
        return v

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]

    @classmethod
    def env_values(cls, environ: dict[str, str] | None = None) -> dict[str, object]:
        """Collect raw setting values from a GitHub Actions environment.

        Action inputs arrive as INPUT_<NAME> variables. Unset or empty
        variables are omitted so that defaults apply.

        Args:
            environ: Environment mapping (defaults to os.environ).

        Returns:
            Raw values keyed by field name.
        """
        env = os.environ if environ is None else environ
        sources: dict[str, tuple[str, ...]] = {
            "token": ("INPUT_REPO-TOKEN", "GITHUB_TOKEN"),
            "repository": ("GITHUB_REPOSITORY",),
            "sha": ("GITHUB_SHA",),
            "event_name": ("GITHUB_EVENT_NAME",),
            "event_path": ("GITHUB_EVENT_PATH",),
            "config_path": ("INPUT_CONFIGURATION-PATH",),
            "api_url": ("GITHUB_API_URL",),
            "dry_run": ("INPUT_DRY-RUN",),
        }

        values: dict[str, object] = {}
        for field_name, names in sources.items():
            for name in names:
                value = env.get(name, "").strip()
                if value:
                    values[field_name] = value
                    break
        return values
