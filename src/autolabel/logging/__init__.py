"""Logging module for autolabel.

This module provides structured JSON logging with:
- structlog configuration for consistent log formatting
- Secret redaction for GitHub tokens and authorization headers
- Structured log events for event intake, resolution and labeling

Usage:
    from autolabel.logging import configure_logging, log_labels_resolved

    configure_logging(verbose=True)
    log_labels_resolved(labels, rules_total, rules_evaluated)
"""

from autolabel.logging.audit import (
    configure_logging,
    get_logger,
    log_event_received,
    log_labels_applied,
    log_labels_resolved,
    log_rule_matched,
    log_rules_loaded,
    redact_secrets,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "log_event_received",
    "log_labels_applied",
    "log_labels_resolved",
    "log_rule_matched",
    "log_rules_loaded",
    "redact_secrets",
]
