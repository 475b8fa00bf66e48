"""
Literal and regex pattern matching shared by search and replace.

Two dialects:
- literal (default): plain substring match.
- regex (-E): Python `re`, with POSIX bracket classes such as [[:digit:]]
  translated so ERE-style patterns keep working.

Case-insensitivity applies to either dialect. Replacement text is always
inserted literally; back-references like \\1 are not expanded.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Optional, Pattern, Tuple

from .errors import InvalidPatternError

_POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": "!-/:-@\\[-`{-~",
    "space": " \\t\\n\\r\\f\\v",
    "upper": "A-Z",
    "xdigit": "0-9A-Fa-f",
}
_POSIX_CLASS_RE = re.compile(r"\[:(" + "|".join(_POSIX_CLASSES) + r"):\]")


def translate_posix_classes(pattern: str) -> str:
    """Rewrite [:class:] bracket expressions into Python character ranges."""
    return _POSIX_CLASS_RE.sub(lambda m: _POSIX_CLASSES[m.group(1)], pattern)


class PatternMatcher:
    """
    Compiled form of (pattern, dialect, case flag).

    Instances hold no mutable state, so the same input always gives the same
    answer; dry runs and applied runs therefore agree on what matches.
    """

    def __init__(self, pattern: str, is_regex: bool = False, ignore_case: bool = False):
        self.pattern = pattern
        self.is_regex = is_regex
        self.ignore_case = ignore_case
        self._regex: Optional[Pattern[str]] = None

        flags = re.IGNORECASE if ignore_case else 0
        if is_regex:
            try:
                self._regex = re.compile(translate_posix_classes(pattern), flags)
            except re.error as e:
                raise InvalidPatternError(f"invalid regex {pattern!r}: {e}") from e
        elif ignore_case:
            self._regex = re.compile(re.escape(pattern), flags)

    def matches(self, text: str) -> bool:
        if self._regex is None:
            return self.pattern in text
        return self._regex.search(text) is not None

    def spans(self, text: str) -> List[Tuple[int, int]]:
        """Non-overlapping (start, end) spans of every match, for highlighting."""
        if self._regex is None:
            if not self.pattern:
                return []
            found = []
            start = text.find(self.pattern)
            while start != -1:
                end = start + len(self.pattern)
                found.append((start, end))
                start = text.find(self.pattern, end)
            return found
        return [m.span() for m in self._regex.finditer(text) if m.end() > m.start()]

    def substitute(self, text: str, replacement: str) -> Tuple[str, int]:
        """
        Replace every non-overlapping occurrence.

        Returns:
            Tuple of (new_text, replacements_made)
        """
        if self._regex is None:
            count = text.count(self.pattern) if self.pattern else 0
            return (text.replace(self.pattern, replacement), count) if count else (text, 0)
        return self._regex.subn(lambda _m: replacement, text)

    def __repr__(self) -> str:
        kind = "regex" if self.is_regex else "literal"
        case = ", ignore-case" if self.ignore_case else ""
        return f"PatternMatcher({self.pattern!r}, {kind}{case})"


@lru_cache(maxsize=32)
def compile_matcher(pattern: str, is_regex: bool = False, ignore_case: bool = False) -> PatternMatcher:
    return PatternMatcher(pattern, is_regex=is_regex, ignore_case=ignore_case)


def matcher_for(config) -> PatternMatcher:
    """Matcher for a SearchConfig."""
    return compile_matcher(config.pattern, config.is_regex, config.ignore_case)


def matches(text: str, config) -> bool:
    """Does `text` (a filename or a single line) match the configured pattern?"""
    return matcher_for(config).matches(text)
