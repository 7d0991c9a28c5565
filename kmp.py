#!/usr/bin/python3
"""
Knuth-Morris-Pratt substring search.

This module finds the first (leftmost) occurrence of a pattern inside a text
in O(len(text) + len(pattern)) time. The pattern is preprocessed into a
failure table (also called the LPS table: longest proper prefix that is also
a suffix) so that a mismatch never moves the text cursor backwards.

Patterns and texts may be `str` or `bytes`; symbols are compared as opaque
values (no case folding, no Unicode normalization).

Conventions:
- An empty pattern matches at index 0 of any text, including an empty one.
- A non-empty pattern never matches an empty text.
- "Not found" is reported as None by `search`; `index_of` renders it as -1.
"""

from __future__ import annotations

from typing import AnyStr, Generic, Optional


NOT_FOUND_INDEX = -1


def build_failure_table(pattern: AnyStr) -> list[int]:
    """Build the failure (LPS) table for a pattern.

    Entry i is the length of the longest proper prefix of pattern[0..i]
    that is also a suffix of pattern[0..i].

    Args:
        pattern: Pattern to preprocess. May be empty.

    Returns:
        A list with one entry per pattern symbol ([] for an empty pattern).
    """
    lps = [0] * len(pattern)
    length = 0
    i = 1

    while i < len(pattern):
        if pattern[i] == pattern[length]:
            length += 1
            lps[i] = length
            i += 1
        elif length > 0:
            # Retry the same symbol against a shorter border.
            length = lps[length - 1]
        else:
            lps[i] = 0
            i += 1

    return lps


def _scan(text: AnyStr, pattern: AnyStr, lps: list[int]) -> Optional[int]:
    """Scan text for a non-empty pattern using a precomputed table."""
    n = len(text)
    m = len(pattern)
    i = 0
    j = 0

    while i < n:
        if text[i] == pattern[j]:
            i += 1
            j += 1
            if j == m:
                return i - j
        elif j > 0:
            j = lps[j - 1]
        else:
            i += 1

    return None


def search(text: AnyStr, pattern: AnyStr) -> Optional[int]:
    """Return the index of the first occurrence of pattern in text.

    Args:
        text: Text to search in.
        pattern: Pattern to search for.

    Returns:
        The 0-based start index of the leftmost match, or None if the pattern
        does not occur in the text.
    """
    if not pattern:
        return 0
    if not text:
        return None
    return _scan(text, pattern, build_failure_table(pattern))


def index_of(text: AnyStr, pattern: AnyStr) -> int:
    """Like `search`, but returns -1 when the pattern is not found."""
    idx = search(text, pattern)
    return NOT_FOUND_INDEX if idx is None else idx


def contains(text: AnyStr, pattern: AnyStr) -> bool:
    """Return True if pattern occurs in text."""
    return search(text, pattern) is not None


class KMPMatcher(Generic[AnyStr]):
    """A pattern with its failure table computed once.

    Use this when the same pattern is searched in many texts (for example
    every record of a file). Instances are never mutated after construction,
    so one matcher can be shared by several threads.
    """

    __slots__ = ("_pattern", "_lps")

    def __init__(self, pattern: AnyStr) -> None:
        self._pattern = pattern
        self._lps = build_failure_table(pattern)

    @property
    def pattern(self) -> AnyStr:
        """The pattern this matcher searches for."""
        return self._pattern

    @property
    def failure_table(self) -> list[int]:
        """A copy of the pattern's failure (LPS) table."""
        return list(self._lps)

    def search(self, text: AnyStr) -> Optional[int]:
        """Return the leftmost match index in text, or None."""
        if not self._pattern:
            return 0
        if not text:
            return None
        return _scan(text, self._pattern, self._lps)

    def contains(self, text: AnyStr) -> bool:
        """Return True if the pattern occurs in text."""
        return self.search(text) is not None

    def __repr__(self) -> str:
        return f"KMPMatcher({self._pattern!r})"
