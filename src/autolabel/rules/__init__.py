"""Filter rules and label resolution."""

from autolabel.rules.engine import LabelResolver, resolve_labels
from autolabel.rules.matchers import (
    PatternCache,
    PatternError,
    PatternMatcher,
    check_patterns,
    compile_pattern,
)
from autolabel.rules.schema import (
    EventKind,
    LabelMatch,
    MatchContext,
    MatchTarget,
    ResolvedLabels,
    Rule,
    RuleSet,
)

__all__ = [
    "EventKind",
    "LabelMatch",
    "LabelResolver",
    "MatchContext",
    "MatchTarget",
    "PatternCache",
    "PatternError",
    "PatternMatcher",
    "ResolvedLabels",
    "Rule",
    "RuleSet",
    "check_patterns",
    "compile_pattern",
    "resolve_labels",
]
