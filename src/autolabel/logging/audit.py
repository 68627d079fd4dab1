"""Structured JSON logging and audit trail functionality.

This module provides:
- structlog configuration for JSON logging to stderr
- Secret redaction for sensitive values (GitHub tokens, auth headers)
- Structured log events for event intake, rule evaluation and labeling
"""

from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    from structlog.typing import EventDict, WrappedLogger

# Patterns for secret redaction
SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # GitHub tokens (ghp_, gho_, ghu_, ghs_, ghr_ prefixes)
    (re.compile(r"(gh[pousr]_[A-Za-z0-9_]{36,})"), "[REDACTED_GITHUB_TOKEN]"),
    # Fine-grained personal access tokens
    (re.compile(r"(github_pat_[A-Za-z0-9_]{22,})"), "[REDACTED_GITHUB_TOKEN]"),
    # Generic tokens that look like they might be sensitive
    (re.compile(r"(token[=:]\s*['\"]?)([A-Za-z0-9_-]{20,})"), r"\1[REDACTED]"),
    # Bearer tokens in headers
    (re.compile(r"(Bearer\s+)([A-Za-z0-9._-]+)", re.IGNORECASE), r"\1[REDACTED]"),
    # Authorization headers
    (re.compile(r"(authorization[=:]\s*['\"]?)([^\s'\"]+)", re.IGNORECASE), r"\1[REDACTED]"),
]


def redact_secrets(value: Any) -> Any:
    """Redact sensitive values from a string, dict, or list.

    Args:
        value: Value to redact. Can be str, dict, list, or other.

    Returns:
        Value with sensitive data redacted
    """
    if isinstance(value, str):
        result = value
        for pattern, replacement in SECRET_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    if isinstance(value, dict):
        return {k: redact_secrets(v) for k, v in value.items()}

    if isinstance(value, list | tuple):
        return [redact_secrets(item) for item in value]

    return value


def _redact_processor(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """structlog processor that redacts secrets from log events."""
    return redact_secrets(event_dict)


def configure_logging(
    verbose: bool = False,
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON formatting to stderr, including:
    - Timestamp in ISO format
    - Log level
    - Secret redaction
    - Exception formatting

    Args:
        verbose: If True, enable DEBUG level. Otherwise INFO.
        json_output: If True, output JSON. Otherwise use console format.
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Standard library loggers in the package log per-rule decisions
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    processors: list[Callable[..., Any]] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def log_event_received(
    event_name: str,
    item_kind: str,
    number: int,
    repository: str,
) -> None:
    """Log the triggering event being read.

    Args:
        event_name: GitHub event name
        item_kind: 'issue' or 'pull_request'
        number: Item number
        repository: Repository full name
    """
    log = get_logger("autolabel.events")
    log.info(
        "event_received",
        event_name=event_name,
        item_kind=item_kind,
        number=number,
        repository=repository,
    )


def log_rules_loaded(config_path: str, ref: str, rules_count: int) -> None:
    log = get_logger("autolabel.config")
    log.info(
        "rules_loaded",
        config_path=config_path,
        ref=ref,
        rules_count=rules_count,
    )


def log_rule_matched(
    rule_index: int,
    label: str,
    pattern: str,
    target: str,
) -> None:
    """Log which rule and pattern produced a label.

    Args:
        rule_index: Position of the rule in the rule set
        label: Resolved label
        pattern: Pattern specification that matched
        target: 'title' or 'body'
    """
    log = get_logger("autolabel.rules")
    log.debug(
        "rule_matched",
        rule_index=rule_index,
        label=label,
        pattern=pattern,
        target=target,
    )


def log_labels_resolved(
    labels: list[str],
    rules_total: int,
    rules_evaluated: int,
) -> None:
    """Log the outcome of label resolution.

    Args:
        labels: Resolved labels in order
        rules_total: Rules in the rule set
        rules_evaluated: Rules whose patterns were scanned
    """
    log = get_logger("autolabel.rules")
    log.info(
        "labels_resolved",
        labels=labels,
        labels_count=len(labels),
        rules_total=rules_total,
        rules_evaluated=rules_evaluated,
    )


def log_labels_applied(
    target: str,
    item_kind: str,
    labels: list[str],
    result: str,
    error: str | None = None,
) -> None:
    """Log a label submission.

    Args:
        target: Item reference ('owner/repo#123')
        item_kind: 'issue' or 'pull_request'
        labels: Labels submitted
        result: 'success', 'failed' or 'dry_run'
        error: Error message if failed
    """
    log = get_logger("autolabel.actions")

    log_func = log.warning if result == "failed" else log.info

    log_func(
        "labels_applied",
        target=target,
        item_kind=item_kind,
        labels=labels,
        result=result,
        error=error,
    )
