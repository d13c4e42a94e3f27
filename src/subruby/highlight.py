from __future__ import annotations

import logging
from bisect import bisect_right
from typing import Iterable, Iterator, Sequence

from .config import DEFAULT_CONFIG, RenderConfig
from .locate import MatchSpan, locate
from .markup import MarkupScan, VisibleChar, scan_markup
from .normalize import normalize_chars
from .render import escape
from .scripts import is_kana_string, is_kanji

__all__ = [
    "find_partial_groups",
    "find_reading_groups",
    "locate_mixed",
    "project_markup",
    "project_plain",
]

logger = logging.getLogger(__name__)

_READING_CONTAINER = "rt"


class _SpanIndex:
    """Sorted, merged spans answering cover and overlap queries by bisection."""

    def __init__(self, spans: Sequence[MatchSpan]) -> None:
        merged: list[list[int]] = []
        for span in sorted(spans):
            if merged and span.start < merged[-1][1]:
                merged[-1][1] = max(merged[-1][1], span.end)
            else:
                merged.append([span.start, span.end])
        self.starts = [start for start, _ in merged]
        self.ends = [end for _, end in merged]

    def covers(self, start: int, end: int) -> bool:
        idx = bisect_right(self.starts, start) - 1
        return idx >= 0 and end <= self.ends[idx]

    def overlaps(self, start: int, end: int) -> bool:
        idx = bisect_right(self.ends, start)
        return idx < len(self.starts) and self.starts[idx] < end


def project_plain(text: str, span: MatchSpan | None, config: RenderConfig | None = None) -> str:
    """Escape ``text`` and wrap the ``span`` slice in the highlight tag."""
    if span is None:
        return escape(text)
    config = config or DEFAULT_CONFIG
    before = text[: span.start]
    match = text[span.start : span.end]
    after = text[span.end :]
    return (
        escape(before)
        + config.highlight_open
        + escape(match)
        + config.highlight_close
        + escape(after)
    )


def _runs(chars: list[VisibleChar]) -> list[tuple[int, int]]:
    """Merge characters into wrap ranges that never leave their text segment."""
    runs: list[tuple[int, int]] = []
    prev: VisibleChar | None = None
    for ch in sorted(chars, key=lambda c: c.start):
        if prev is not None and prev.segment == ch.segment and prev.end == ch.start:
            runs[-1] = (runs[-1][0], ch.end)
        else:
            runs.append((ch.start, ch.end))
        prev = ch
    return runs


def _wrap_runs(markup: str, runs: list[tuple[int, int]], config: RenderConfig) -> str:
    parts: list[str] = []
    cursor = 0
    for start, end in runs:
        parts.append(markup[cursor:start])
        parts.append(config.highlight_open)
        parts.append(markup[start:end])
        parts.append(config.highlight_close)
        cursor = end
    parts.append(markup[cursor:])
    return "".join(parts)


def project_markup(
    markup: str,
    spans: Iterable[MatchSpan],
    *,
    via_reading: bool = False,
    config: RenderConfig | None = None,
    scan: MarkupScan | None = None,
) -> str:
    """
    Wrap the visible characters of ``markup`` covered by ``spans``.

    Offsets are markup offsets. Reading containers are skipped unless
    ``via_reading`` is set, in which case every ruby group a span touches is
    highlighted whole: its base and its reading. Markup that cannot be
    scanned is returned unchanged.
    """
    config = config or DEFAULT_CONFIG
    spans = list(spans)
    if not spans:
        return markup
    if scan is None:
        scan = scan_markup(markup)
    if scan is None:
        return markup

    index = _SpanIndex(spans)
    touched: set[int] = set()
    if via_reading:
        touched = {group.index for group in scan.groups if index.overlaps(group.start, group.end)}

    selected: list[VisibleChar] = []
    for ch in scan.visible_chars():
        if ch.group is not None and ch.group in touched:
            if ch.container in (None, _READING_CONTAINER):
                selected.append(ch)
        elif ch.in_reading:
            continue
        elif index.covers(ch.start, ch.end):
            selected.append(ch)

    if not selected:
        return markup
    return _wrap_runs(markup, _runs(selected), config)


def _group_text(scan: MarkupScan, group: int, container: str | None) -> str:
    chars = scan.group_chars(group, container)
    return normalize_chars(((ch.start, ch.end, ch.text) for ch in chars), scan.markup).text


def find_reading_groups(markup: str, query: str, *, scan: MarkupScan | None = None) -> list[MatchSpan]:
    """Spans of the ruby groups whose normalized reading contains ``query``."""
    if not query:
        return []
    if scan is None:
        scan = scan_markup(markup)
    if scan is None:
        return []
    found: list[MatchSpan] = []
    for group in scan.groups:
        if query in _group_text(scan, group.index, _READING_CONTAINER):
            found.append(MatchSpan(group.start, group.end))
    return found


def locate_mixed(markup: str, query: str, *, scan: MarkupScan | None = None) -> MatchSpan | None:
    """
    Search text where every ruby group reads as its reading.

    Lets a kana query such as ``くらし`` find ``暮[く]らし``; the reading's
    characters are mapped to the whole ruby group.
    """
    if not query:
        return None
    if scan is None:
        scan = scan_markup(markup)
    if scan is None:
        return None
    extents = {group.index: group for group in scan.groups}
    chars: list[tuple[int, int, str]] = []
    for ch in scan.visible_chars():
        if ch.group is not None and ch.group in extents:
            if ch.container != _READING_CONTAINER:
                continue
            group = extents[ch.group]
            chars.append((group.start, group.end, ch.text))
        elif not ch.in_reading:
            chars.append((ch.start, ch.end, ch.text))
    haystack = normalize_chars(chars, markup)
    span = locate(haystack, query)
    if span is None:
        logger.debug("Query %r not found in readings of %r", query, markup)
    return span


def _partial_forms(base: str, reading: str) -> Iterator[str]:
    first, last = base[0], base[-1]
    for idx in range(1, len(reading)):
        yield reading[:idx] + last
        yield first + reading[idx:]


def find_partial_groups(markup: str, query: str, *, scan: MarkupScan | None = None) -> list[MatchSpan]:
    """
    Spans of Kanji ruby groups matched by a half-kana, half-Kanji spelling.

    For ``黒川`` read ``くろかわ`` the spellings are a reading prefix followed by
    the last Kanji (``くろ川``) and the first Kanji followed by a reading
    suffix (``黒かわ``). Groups whose base is not all Kanji or whose reading is
    not all kana have no such spellings.
    """
    if not query:
        return []
    if scan is None:
        scan = scan_markup(markup)
    if scan is None:
        return []
    found: list[MatchSpan] = []
    for group in scan.groups:
        base = _group_text(scan, group.index, None)
        reading = _group_text(scan, group.index, _READING_CONTAINER)
        if not base or not all(is_kanji(ch) for ch in base) or not is_kana_string(reading):
            continue
        if any(query in form for form in _partial_forms(base, reading)):
            found.append(MatchSpan(group.start, group.end))
    return found
