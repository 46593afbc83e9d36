"""Wildcard exclusion patterns for metadata and configuration keys.

Patterns use ``*`` for any run of characters and ``?`` for exactly one
character. Matching is case-insensitive and anchored to the whole key,
so ``jetpack_*`` matches ``jetpack_options`` but not ``my_jetpack_options``.
"""

import re
from collections.abc import Iterable

from mssearch.core.errors import InvalidPatternError

# A compiled pattern, reusable across tenants
MatchRule = re.Pattern[str]


def compile_pattern(pattern: str) -> MatchRule:
    """Compile a wildcard pattern into a full-match rule.

    Every character is escaped first, then the escaped wildcards are
    expanded, so regex metacharacters in key names match literally.

    Args:
        pattern: Wildcard pattern (e.g., 'jpsq_sync*', 'temp_?').

    Returns:
        Compiled case-insensitive regular expression.

    Raises:
        InvalidPatternError: If the pattern cannot be compiled.
    """
    escaped = re.escape(pattern)
    expression = escaped.replace(r"\*", ".*").replace(r"\?", ".")
    try:
        return re.compile(expression, re.IGNORECASE | re.DOTALL)
    except re.error as e:
        msg = f"Invalid exclusion pattern {pattern!r}: {e}"
        raise InvalidPatternError(msg) from e


def matches_any(name: str, rules: Iterable[MatchRule]) -> bool:
    """Check if a name fully matches any of the given rules.

    Args:
        name: Key name to test.
        rules: Compiled rules; an empty collection never matches.

    Returns:
        True if at least one rule matches the whole name.
    """
    return any(rule.fullmatch(name) is not None for rule in rules)


def build_exclusion_rules(patterns: Iterable[str]) -> tuple[MatchRule, ...]:
    """Compile a set of patterns once for a whole run.

    Args:
        patterns: Wildcard patterns (defaults plus user patterns).

    Returns:
        Tuple of compiled rules in input order.
    """
    return tuple(compile_pattern(p) for p in patterns)
