"""Scanner for rendered ruby markup.

Walks HTML produced by :mod:`subruby.render` (or any similar fragment) and
records where tags, text and ruby groups sit, without building a DOM. The
normalizer uses the scan to find the visible characters of the markup and the
highlighter uses it to insert wrappers that never straddle a tag.

The walk is a small state machine: ``OUTSIDE`` (body text), ``IN_TAG``
(between ``<`` and ``>``) and ``IN_READING`` (inside ``<rt>``/``<rp>``). A
fragment that ends anywhere but ``OUTSIDE`` is malformed and
:func:`scan_markup` returns ``None`` for it.
"""

from __future__ import annotations

import enum
import html
import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Iterator

__all__ = [
    "READING_TAGS",
    "MarkupScan",
    "RubyGroup",
    "ScanState",
    "TagSegment",
    "TextSegment",
    "VisibleChar",
    "scan_markup",
]

logger = logging.getLogger(__name__)

READING_TAGS = frozenset({"rt", "rp"})
RUBY_TAG = "ruby"

_TAG_NAME = re.compile(r"\s*(/?)\s*([A-Za-z][A-Za-z0-9-]*)")
_CHAR_REF = re.compile(r"&(?:#[0-9]+|#[xX][0-9A-Fa-f]+|[A-Za-z][A-Za-z0-9]*);")


class ScanState(enum.Enum):
    OUTSIDE = "outside"
    IN_TAG = "in_tag"
    IN_READING = "in_reading"


@dataclass(frozen=True)
class TagSegment:
    start: int
    end: int
    name: str
    closing: bool = False
    self_closing: bool = False


@dataclass(frozen=True)
class TextSegment:
    start: int
    end: int
    container: str | None = None
    group: int | None = None

    @property
    def in_reading(self) -> bool:
        return self.container is not None


@dataclass(frozen=True)
class RubyGroup:
    index: int
    start: int
    end: int


@dataclass(frozen=True)
class VisibleChar:
    """
    One displayed character of the markup.

    ``text`` is the decoded character (a character reference such as
    ``&amp;`` counts as one character spanning the whole reference).
    """

    start: int
    end: int
    text: str
    segment: int
    container: str | None = None
    group: int | None = None

    @property
    def in_reading(self) -> bool:
        return self.container is not None


@dataclass(frozen=True)
class MarkupScan:
    markup: str
    segments: tuple[TagSegment | TextSegment, ...]
    groups: tuple[RubyGroup, ...]

    def text_segments(self) -> Iterator[tuple[int, TextSegment]]:
        for index, segment in enumerate(self.segments):
            if isinstance(segment, TextSegment):
                yield index, segment

    def visible_chars(self) -> Iterator[VisibleChar]:
        return iter(self.chars)

    @cached_property
    def chars(self) -> tuple[VisibleChar, ...]:
        """Every visible character, decoded once per scan."""
        return tuple(self._decode_chars())

    @cached_property
    def chars_by_group(self) -> dict[int, list[VisibleChar]]:
        grouped: dict[int, list[VisibleChar]] = {}
        for ch in self.chars:
            if ch.group is not None:
                grouped.setdefault(ch.group, []).append(ch)
        return grouped

    def _decode_chars(self) -> Iterator[VisibleChar]:
        markup = self.markup
        for index, segment in self.text_segments():
            idx = segment.start
            while idx < segment.end:
                end = idx + 1
                text = markup[idx]
                if text == "&":
                    match = _CHAR_REF.match(markup, idx, segment.end)
                    if match is not None:
                        decoded = html.unescape(match.group(0))
                        if decoded != match.group(0):
                            text = decoded
                            end = match.end()
                yield VisibleChar(
                    start=idx,
                    end=end,
                    text=text,
                    segment=index,
                    container=segment.container,
                    group=segment.group,
                )
                idx = end

    def group_chars(self, group: int, container: str | None) -> list[VisibleChar]:
        return [ch for ch in self.chars_by_group.get(group, ()) if ch.container == container]


def _starts_tag(markup: str, idx: int) -> bool:
    if idx + 1 >= len(markup):
        return False
    nxt = markup[idx + 1]
    return nxt.isalpha() or nxt in "/!?"


def _parse_tag(markup: str, start: int, end: int) -> TagSegment:
    body = markup[start + 1 : end - 1]
    match = _TAG_NAME.match(body)
    if match is None:
        # Comments, doctypes and processing instructions carry no name.
        return TagSegment(start=start, end=end, name="")
    return TagSegment(
        start=start,
        end=end,
        name=match.group(2).lower(),
        closing=bool(match.group(1)),
        self_closing=body.rstrip().endswith("/"),
    )


def scan_markup(markup: str) -> MarkupScan | None:
    segments: list[TagSegment | TextSegment] = []
    groups: list[RubyGroup] = []
    state = ScanState.OUTSIDE
    readings: list[str] = []
    ruby_depth = 0
    group_index: int | None = None
    group_start = 0
    text_start = 0
    idx = 0
    length = len(markup)

    def flush_text(end: int) -> None:
        if end > text_start:
            segments.append(
                TextSegment(
                    start=text_start,
                    end=end,
                    container=readings[-1] if state is ScanState.IN_READING else None,
                    group=group_index,
                )
            )

    while idx < length:
        if markup[idx] != "<" or not _starts_tag(markup, idx):
            idx += 1
            continue
        flush_text(idx)
        state = ScanState.IN_TAG
        close_idx = markup.find(">", idx + 1)
        if close_idx == -1:
            logger.debug("Unterminated tag at offset %d; leaving markup untouched", idx)
            return None
        tag = _parse_tag(markup, idx, close_idx + 1)
        segments.append(tag)
        if tag.name in READING_TAGS and not tag.self_closing:
            if tag.closing:
                if not readings or readings[-1] != tag.name:
                    logger.debug("Unbalanced </%s> at offset %d", tag.name, idx)
                    return None
                readings.pop()
            else:
                readings.append(tag.name)
        elif tag.name == RUBY_TAG and not tag.self_closing:
            if not tag.closing:
                if ruby_depth == 0:
                    group_index = len(groups)
                    group_start = tag.start
                ruby_depth += 1
            elif ruby_depth > 0:
                ruby_depth -= 1
                if ruby_depth == 0 and group_index is not None:
                    groups.append(RubyGroup(index=group_index, start=group_start, end=tag.end))
                    group_index = None
        state = ScanState.IN_READING if readings else ScanState.OUTSIDE
        idx = close_idx + 1
        text_start = idx

    flush_text(length)
    if state is not ScanState.OUTSIDE:
        logger.debug("Markup ends inside <%s>; leaving markup untouched", readings[-1])
        return None
    if group_index is not None:
        groups.append(RubyGroup(index=group_index, start=group_start, end=length))
    return MarkupScan(markup=markup, segments=tuple(segments), groups=tuple(groups))
