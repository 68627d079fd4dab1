"""Configuration module for autolabel.

This module provides filter document parsing, run settings and schema
definitions.

Usage:
    from autolabel.config import load_rules, parse_rules

    rules = load_rules(".github/autolabel.yml")
    rules = parse_rules(yaml.safe_load(text))
"""

from autolabel.config.loader import (
    ConfigError,
    decode_config,
    load_rules,
    load_settings,
    parse_rule,
    parse_rules,
)
from autolabel.config.schema import (
    DEFAULT_CONFIG_PATH,
    ActionSettings,
    FilterDeclaration,
    FiltersDocument,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ActionSettings",
    "ConfigError",
    "FilterDeclaration",
    "FiltersDocument",
    "decode_config",
    "load_rules",
    "load_settings",
    "parse_rule",
    "parse_rules",
]
