"""Pattern compilation for filter rules.

A pattern specification is either a bare regular expression, compiled
case-sensitively, or a delimited ``/expression/flags`` form whose trailing
flags select matching options:

- i: case-insensitive
- m: ``^``/``$`` match at line boundaries
- s: ``.`` matches newlines
- x: verbose expressions
- u, g: accepted and ignored (unicode is the default, and a boolean
  search has no notion of a global match)
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from autolabel.rules.schema import Rule

logger = logging.getLogger(__name__)

FLAG_MAP: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": re.NOFLAG,
    "g": re.NOFLAG,
}

# /expression/flags; the expression may itself contain slashes
DELIMITED_PATTERN = re.compile(r"^/(?P<body>.+)/(?P<flags>[A-Za-z]*)$", re.DOTALL)


class PatternError(Exception):
    """Raised when a pattern specification cannot be compiled."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str,
        flag: str | None = None,
    ) -> None:
        """Initialize PatternError.

        Args:
            message: Error description.
            pattern: The offending pattern specification.
            flag: The unrecognized flag character, if that was the cause.
        """
        super().__init__(message)
        self.pattern = pattern
        self.flag = flag


class PatternMatcher:
    """Compiled, executable form of one pattern specification."""

    def __init__(self, spec: str, regex: re.Pattern[str]) -> None:
        self._spec = spec
        self._regex = regex

    @property
    def spec(self) -> str:
        """Get the pattern as written in the filter document."""
        return self._spec

    @property
    def regex(self) -> re.Pattern[str]:
        return self._regex

    def test(self, text: str) -> bool:
        """Check whether the pattern occurs anywhere in the text."""
        return self._regex.search(text) is not None

    def __repr__(self) -> str:
        return f"PatternMatcher({self._spec!r})"


def parse_flags(flags: str, spec: str) -> re.RegexFlag:
    """Convert a flag suffix to ``re`` flags.

    Args:
        flags: Flag characters following the closing delimiter.
        spec: Full pattern specification, for error reporting.

    Returns:
        Combined regex flags.

    Raises:
        PatternError: If a flag character is not recognized.
    """
    result = re.NOFLAG
    for char in flags:
        flag = FLAG_MAP.get(char)
        if flag is None:
            raise PatternError(
                f"Unknown flag '{char}' in pattern '{spec}'",
                pattern=spec,
                flag=char,
            )
        result |= flag
    return result


def compile_pattern(spec: str) -> PatternMatcher:
    """Compile a pattern specification.

    Args:
        spec: Bare expression or ``/expression/flags``.

    Returns:
        PatternMatcher for the specification.

    Raises:
        PatternError: If a flag is unknown or the expression is invalid.

    Examples:
        >>> compile_pattern("/docs/i").test("Updates the DOCS page")
        True
        >>> compile_pattern("docs").test("Updates the DOCS page")
        False
    """
    delimited = DELIMITED_PATTERN.match(spec)
    if delimited:
        body = delimited.group("body")
        flags = parse_flags(delimited.group("flags"), spec)
    else:
        body = spec
        flags = re.NOFLAG

    try:
        regex = re.compile(body, flags)
    except re.error as e:
        raise PatternError(
            f"Invalid pattern '{spec}': {e}",
            pattern=spec,
        ) from e

    return PatternMatcher(spec, regex)


class PatternCache:
    """Memoizes compiled matchers by specification string.

    Lives for a single resolution; the same specification repeated across
    rules is compiled once.
    """

    def __init__(self) -> None:
        self._matchers: dict[str, PatternMatcher] = {}

    def get(self, spec: str) -> PatternMatcher:
        """Get the compiled matcher for a specification, compiling on first use.

        Raises:
            PatternError: If the specification fails to compile.
        """
        matcher = self._matchers.get(spec)
        if matcher is None:
            matcher = compile_pattern(spec)
            self._matchers[spec] = matcher
            logger.debug("Compiled pattern %r", spec)
        return matcher

    def __len__(self) -> int:
        return len(self._matchers)

    def __contains__(self, spec: object) -> bool:
        return spec in self._matchers


def check_patterns(rules: Iterable[Rule]) -> int:
    """Compile every pattern of a rule set.

    Resolution compiles lazily and only reaches patterns of rules that
    apply to the event, so this is the way to surface a broken pattern
    before it is hit in a run.

    Args:
        rules: Rules to check.

    Returns:
        Number of distinct patterns compiled.

    Raises:
        PatternError: On the first pattern that fails to compile.
    """
    cache = PatternCache()
    for rule in rules:
        for spec in rule.patterns:
            cache.get(spec)
    return len(cache)
