"""
Table name matching against exact names and glob patterns.
"""

import fnmatch
import logging
import re
from typing import Iterable, Optional

from .exceptions import InvalidPatternError
from .models import ExcludeConfig


def validate_pattern(pattern: str) -> None:
    """
    Check that a glob pattern is usable.

    Supported syntax is `*` (any run of characters), `?` (one character)
    and bracket classes such as `[abc]` or `[!abc]`. An empty pattern or an
    unterminated `[` raises InvalidPatternError.
    """
    if not isinstance(pattern, str):
        raise InvalidPatternError(str(pattern), "pattern must be a string")
    if pattern == "":
        raise InvalidPatternError(pattern, "pattern is empty")

    i, n = 0, len(pattern)
    while i < n:
        if pattern[i] == '[':
            j = i + 1
            if j < n and pattern[j] == '!':
                j += 1
            # A ']' directly after '[' or '[!' is a literal member.
            if j < n and pattern[j] == ']':
                j += 1
            close = pattern.find(']', j)
            if close == -1:
                raise InvalidPatternError(
                    pattern, f"unterminated character class at position {i}"
                )
            i = close + 1
        else:
            i += 1


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a validated glob to an anchored, case-sensitive regex."""
    validate_pattern(pattern)
    return re.compile(fnmatch.translate(pattern))


class PatternSet:
    """Decides whether a table name is covered by an ExcludeConfig."""

    def __init__(self, exact: Iterable[str] = (), patterns: Iterable[str] = ()):
        self.exact = frozenset(exact)
        self.patterns = tuple(dict.fromkeys(patterns))
        self._compiled = [(p, compile_pattern(p)) for p in self.patterns]

    @classmethod
    def from_config(cls, config: ExcludeConfig) -> "PatternSet":
        return cls(config.exact, config.patterns)

    def matches_exact(self, name: str) -> bool:
        return name in self.exact

    @staticmethod
    def matches_pattern(pattern: str, name: str) -> bool:
        """Match the whole of `name` against the whole of `pattern`."""
        return compile_pattern(pattern).match(name) is not None

    def matches(self, name: str) -> bool:
        return self.matching_rule(name) is not None

    def matching_rule(self, name: str) -> Optional[str]:
        """Return the exact entry or pattern that matches `name`, if any."""
        if self.matches_exact(name):
            return name

        for pattern, compiled in self._compiled:
            if compiled.match(name):
                logging.debug(f"Table '{name}' matched pattern '{pattern}'")
                return pattern
        return None

    def __len__(self) -> int:
        return len(self.exact) + len(self.patterns)
