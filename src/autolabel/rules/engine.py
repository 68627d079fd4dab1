"""Label resolution engine.

This module provides the LabelResolver class for evaluating a rule set
against the text of an issue or pull request. It handles:
- Event kind filtering per rule
- Title-before-body pattern testing
- First-match label deduplication
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from autolabel.rules.matchers import PatternCache
from autolabel.rules.schema import LabelMatch, MatchTarget, ResolvedLabels

if TYPE_CHECKING:
    from collections.abc import Sequence

    from autolabel.rules.schema import MatchContext, Rule

logger = logging.getLogger(__name__)


class LabelResolver:
    """Engine for resolving labels from rules.

    Rules are scanned in declaration order. A label is added at most once,
    from the first rule that produces it; within a rule, scanning stops at
    the first matching pattern. For each pattern the title is tested before
    the body, so a title hit wins when both are targeted.

    A pattern that fails to compile aborts the whole resolution.
    """

    def __init__(self, rules: Sequence[Rule]) -> None:
        """Initialize the resolver.

        Args:
            rules: Rules in declaration order.
        """
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def resolve(self, context: MatchContext) -> ResolvedLabels:
        """Resolve the labels for one item.

        Args:
            context: Event kind, title and body of the item.

        Returns:
            ResolvedLabels in first-match order.

        Raises:
            PatternError: If any reached pattern fails to compile.
        """
        cache = PatternCache()
        resolved: dict[str, LabelMatch] = {}
        rules_evaluated = 0

        for index, rule in enumerate(self._rules):
            if rule.label in resolved:
                logger.debug(
                    "Rule %d skipped: label '%s' already resolved",
                    index,
                    rule.label,
                )
                continue

            if not rule.applies_to(context.event_kind):
                logger.debug(
                    "Rule %d skipped: event kind '%s' not in %s",
                    index,
                    context.event_kind.value,
                    sorted(k.value for k in rule.event_kinds),
                )
                continue

            rules_evaluated += 1
            match = self._match_rule(index, rule, context, cache)
            if match is not None:
                resolved[rule.label] = match
                logger.debug(
                    "Rule %d matched %s with '%s': label '%s'",
                    index,
                    match.target.value,
                    match.pattern,
                    rule.label,
                )
            else:
                logger.debug("Rule %d did not match", index)

        return ResolvedLabels(
            matches=list(resolved.values()),
            rules_evaluated=rules_evaluated,
        )

    def _match_rule(
        self,
        index: int,
        rule: Rule,
        context: MatchContext,
        cache: PatternCache,
    ) -> LabelMatch | None:
        """Scan a rule's patterns until the first hit.

        Args:
            index: Position of the rule in the rule set.
            rule: Rule to scan.
            context: Item text.
            cache: Compiled pattern cache for this resolution.

        Returns:
            LabelMatch for the first hit, or None.
        """
        for spec in rule.patterns:
            matcher = cache.get(spec)

            if rule.matches_title and matcher.test(context.title):
                target = MatchTarget.TITLE
            elif (
                rule.matches_body
                and context.body is not None
                and matcher.test(context.body)
            ):
                target = MatchTarget.BODY
            else:
                continue

            return LabelMatch(
                label=rule.label,
                rule_index=index,
                pattern=spec,
                target=target,
            )

        return None


def resolve_labels(context: MatchContext, rules: Sequence[Rule]) -> list[str]:
    """Resolve the labels to apply to an item.

    This is a convenience function that creates a LabelResolver and resolves.

    Args:
        context: Event kind, title and body of the item.
        rules: Rules in declaration order.

    Returns:
        Labels in first-match order, without duplicates.
    """
    return LabelResolver(rules).resolve(context).labels
