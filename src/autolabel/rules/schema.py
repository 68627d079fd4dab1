"""Rule model and resolution result models."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Kind of item whose event triggered evaluation."""

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"


class MatchTarget(str, Enum):
    """Text field of the item that a rule inspects."""

    TITLE = "title"
    BODY = "body"


class Rule(BaseModel):
    """One labeling directive.

    Attributes:
        label: Label to attach when any pattern matches
        event_kinds: Event kinds the rule is considered for
        targets: Text fields the patterns are tested against
        patterns: Pattern specifications, tested in declaration order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: Annotated[str, Field(min_length=1)]
    event_kinds: Annotated[frozenset[EventKind], Field(min_length=1)]
    targets: Annotated[frozenset[MatchTarget], Field(min_length=1)]
    patterns: Annotated[tuple[str, ...], Field(min_length=1)]

    def applies_to(self, event_kind: EventKind) -> bool:
        """Check whether the rule is considered for an event kind."""
        return event_kind in self.event_kinds

    @property
    def matches_title(self) -> bool:
        return MatchTarget.TITLE in self.targets

    @property
    def matches_body(self) -> bool:
        return MatchTarget.BODY in self.targets


RuleSet = tuple[Rule, ...]


class MatchContext(BaseModel):
    """Text of the triggering item, built once per evaluation."""

    model_config = ConfigDict(frozen=True)

    event_kind: EventKind = Field(..., description="Kind of the triggering item")
    title: str = Field(..., description="Item title")
    body: str | None = Field(default=None, description="Item body, if any")


class LabelMatch(BaseModel):
    """Record of the rule and pattern that produced a label."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Label that was resolved")
    rule_index: int = Field(..., description="Position of the rule in the rule set")
    pattern: str = Field(..., description="Pattern specification that matched")
    target: MatchTarget = Field(..., description="Field the pattern matched in")


class ResolvedLabels(BaseModel):
    """Ordered, deduplicated labels produced by one resolution."""

    model_config = ConfigDict(frozen=True)

    matches: list[LabelMatch] = Field(
        default_factory=list,
        description="One entry per resolved label, in first-match order",
    )
    rules_evaluated: int = Field(
        default=0,
        description="Rules whose patterns were scanned",
    )

    @property
    def labels(self) -> list[str]:
        """Get labels in first-insertion order."""
        return [m.label for m in self.matches]

    @property
    def has_labels(self) -> bool:
        """Check if any label was resolved."""
        return len(self.matches) > 0
