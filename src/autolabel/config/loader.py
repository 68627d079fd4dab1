"""Filter document parsing and settings loading.

This module provides:
- YAML decoding of the filter document
- Validation of filter declarations into Rule instances
- Local filter file loading for offline commands
- Run settings loading from the GitHub Actions environment
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from autolabel.config.schema import ActionSettings, FilterDeclaration, FiltersDocument
from autolabel.github.auth import AuthenticationError
from autolabel.rules.schema import EventKind, MatchTarget, Rule

if TYPE_CHECKING:
    from collections.abc import Mapping

    from autolabel.rules.schema import RuleSet


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize ConfigError with message and optional path.

        Args:
            message: Error description
            path: Path of the filter document that caused the error
        """
        self.path = path
        super().__init__(message)


# Selector tokens accepted in filter declarations
EVENT_TOKENS: dict[str, EventKind] = {
    "issues": EventKind.ISSUE,
    "issue": EventKind.ISSUE,
    "pull_request": EventKind.PULL_REQUEST,
    "pull_request_target": EventKind.PULL_REQUEST,
}

TARGET_TOKENS: dict[str, MatchTarget] = {
    "title": MatchTarget.TITLE,
    "body": MatchTarget.BODY,
    "comment": MatchTarget.BODY,
}


def format_validation_errors(error: ValidationError) -> list[str]:
    """Format Pydantic errors as 'location: message' lines."""
    lines: list[str] = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        lines.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return lines


def _describe_rule(index: int, raw: object) -> str:
    """Name a filter for error messages by label, falling back to position."""
    if isinstance(raw, dict):
        label = raw.get("label")
        if isinstance(label, str) and label.strip():
            return f"filter #{index + 1} ('{label.strip()}')"
    return f"filter #{index + 1}"


def _map_tokens(
    tokens: list[str],
    mapping: Mapping[str, Any],
    kind: str,
    rule_name: str,
) -> frozenset[Any]:
    """Map selector tokens to enum members.

    Raises:
        ConfigError: If a token is not recognized.
    """
    members = set()
    for token in tokens:
        member = mapping.get(token.strip().lower())
        if member is None:
            allowed = ", ".join(sorted(mapping))
            msg = f"{rule_name}: unknown {kind} '{token}' (expected one of: {allowed})"
            raise ConfigError(msg)
        members.add(member)
    return frozenset(members)


def parse_rule(index: int, raw: object) -> Rule:
    """Validate one filter declaration into a Rule.

    Args:
        index: Position of the declaration in the document.
        raw: Decoded declaration.

    Returns:
        Validated Rule.

    Raises:
        ConfigError: If the declaration is malformed.
    """
    rule_name = _describe_rule(index, raw)

    if not isinstance(raw, dict):
        msg = f"{rule_name}: must be a mapping, got {type(raw).__name__}"
        raise ConfigError(msg)

    try:
        declaration = FilterDeclaration.model_validate(raw)
    except ValidationError as e:
        details = "; ".join(format_validation_errors(e))
        msg = f"{rule_name}: {details}"
        raise ConfigError(msg) from e

    return Rule(
        label=declaration.label,
        event_kinds=_map_tokens(declaration.events, EVENT_TOKENS, "event", rule_name),
        targets=_map_tokens(declaration.targets, TARGET_TOKENS, "target", rule_name),
        patterns=tuple(declaration.patterns),
    )


def parse_rules(document: Any) -> RuleSet:
    """Validate a decoded filter document into a rule set.

    The document is either a mapping with a 'filters' list or a bare list
    of filter declarations.

    Args:
        document: Decoded document (e.g. from YAML or JSON).

    Returns:
        Rules in declaration order.

    Raises:
        ConfigError: If the document or any declaration is malformed.

    Example:
        >>> rules = parse_rules({"filters": [
        ...     {"label": "bug", "events": ["issues"], "targets": ["title"],
        ...      "patterns": ["/bug/i"]},
        ... ]})
        >>> rules[0].label
        'bug'
    """
    if document is None:
        msg = "Filter document is empty"
        raise ConfigError(msg)

    if isinstance(document, list):
        document = {"filters": document}

    if not isinstance(document, dict):
        msg = (
            "Filter document must be a mapping with a 'filters' list or a list "
            f"of filters, not {type(document).__name__}"
        )
        raise ConfigError(msg)

    try:
        parsed = FiltersDocument.model_validate(document)
    except ValidationError as e:
        errors = format_validation_errors(e)
        message = (
            f"Filter document validation failed ({len(errors)} error(s)):\n"
            + "\n".join(f"  - {line}" for line in errors)
        )
        raise ConfigError(message) from e

    return tuple(parse_rule(i, raw) for i, raw in enumerate(parsed.filters))


def decode_config(text: str, path: Path | str | None = None) -> Any:
    """Decode YAML filter document text.

    Args:
        text: Raw document text.
        path: Where the text came from, for error reporting.

    Returns:
        Decoded document.

    Raises:
        ConfigError: If the text is not valid YAML.
    """
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML syntax: {e}"
        raise ConfigError(msg, path) from e


def load_rules(path: str | Path) -> RuleSet:
    """Load and validate a filter document from a local file.

    Args:
        path: Path to the YAML filter document.

    Returns:
        Rules in declaration order.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = Path(path).expanduser()

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read config file: {e}"
        raise ConfigError(msg, config_path) from e

    try:
        return parse_rules(decode_config(content, config_path))
    except ConfigError as e:
        e.path = config_path
        raise


def load_settings(environ: dict[str, str] | None = None) -> ActionSettings:
    """Load run settings from the GitHub Actions environment.

    Args:
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated ActionSettings.

    Raises:
        AuthenticationError: If no token is provided.
        ConfigError: If a required variable is missing or invalid.
    """
    values = ActionSettings.env_values(environ)

    if "token" not in values:
        raise AuthenticationError(
            "No GitHub token provided. Set the 'repo-token' input or GITHUB_TOKEN."
        )

    try:
        return ActionSettings.model_validate(values)
    except ValidationError as e:
        errors = format_validation_errors(e)
        message = (
            f"Action settings are invalid ({len(errors)} error(s)):\n"
            + "\n".join(f"  - {line}" for line in errors)
        )
        raise ConfigError(message) from e
