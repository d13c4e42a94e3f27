from __future__ import annotations

import re
from dataclasses import dataclass

from .normalize import NormalizedText

__all__ = ["MatchSpan", "locate", "locate_casefold", "locate_plain"]


@dataclass(frozen=True, order=True)
class MatchSpan:
    """Half-open ``[start, end)`` region of the original text or markup."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"MatchSpan start {self.start} is after end {self.end}")

    def covers(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and self.start < end


def _span_for_units(haystack: NormalizedText, first: int, last: int) -> MatchSpan:
    # Units of one source character share their offsets, so taking the end of
    # the last unit's character never cuts an expansion in half.
    return MatchSpan(haystack.starts[first], haystack.ends[last])


def locate(haystack: NormalizedText, query: str) -> MatchSpan | None:
    """Find the leftmost occurrence of an already normalized ``query``."""
    if not query:
        return None
    idx = haystack.text.find(query)
    if idx == -1:
        return None
    return _span_for_units(haystack, idx, idx + len(query) - 1)


def locate_casefold(haystack: NormalizedText, query: str) -> MatchSpan | None:
    """Case-insensitive leftmost search for text that is not script-folded."""
    if not query:
        return None
    match = re.search(re.escape(query), haystack.text, re.IGNORECASE)
    if match is None or match.end() == match.start():
        return None
    return _span_for_units(haystack, match.start(), match.end() - 1)


def locate_plain(text: str, query: str) -> MatchSpan | None:
    if not query:
        return None
    match = re.search(re.escape(query), text, re.IGNORECASE)
    if match is None:
        return None
    return MatchSpan(match.start(), match.end())
