"""Comparison form for subtitle search.

Search ignores whitespace, annotation brackets, full/half-width variation,
Katakana vs Hiragana and letter case. Every normalized character remembers
which source characters produced it so a match can be mapped back onto the
original text (plain mode) or onto rendered ruby markup (markup mode).
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Iterable

from .markup import MarkupScan, scan_markup
from .parser import parse
from .scripts import is_cluster_continuation, katakana_to_hiragana
from .tokens import AnnotatedRun

__all__ = [
    "NormalizedText",
    "fold_text",
    "normalize_chars",
    "normalize_markup",
    "normalize_plain",
    "normalize_query",
]

SourceChar = tuple[int, int, str]

_BRACKETS = "[]"


@dataclass(frozen=True)
class NormalizedText:
    """
    Folded text plus its position map.

    ``starts[i]`` is the source offset of the character that produced unit
    ``i`` and ``ends[i]`` is one past it. All units produced by one source
    character share the same pair.
    """

    text: str
    starts: tuple[int, ...]
    ends: tuple[int, ...]
    source: str

    @property
    def index_map(self) -> tuple[int, ...]:
        return self.starts

    def __len__(self) -> int:
        return len(self.text)


def fold_text(text: str) -> str:
    folded = unicodedata.normalize("NFKC", text)
    folded = katakana_to_hiragana(folded).casefold()
    folded = unicodedata.normalize("NFKC", folded)
    # NFKC turns full-width brackets into "[" and "]"; folded text must never
    # read as a new annotation.
    return "".join(ch for ch in folded if not ch.isspace() and ch not in _BRACKETS)


def normalize_chars(chars: Iterable[SourceChar], source: str, *, fold: bool = True) -> NormalizedText:
    """
    Build a :class:`NormalizedText` from ``(start, end, text)`` source characters.

    With ``fold`` the characters are grouped with their combining marks,
    whitespace and brackets are dropped and each group is folded. Without it every source
    character is copied through as is.
    """
    units: list[str] = []
    starts: list[int] = []
    ends: list[int] = []
    if not fold:
        for start, end, text in chars:
            for unit in text:
                units.append(unit)
                starts.append(start)
                ends.append(end)
        return NormalizedText("".join(units), tuple(starts), tuple(ends), source)

    clusters: list[list] = []
    for start, end, text in chars:
        if text.isspace():
            continue
        if clusters and is_cluster_continuation(text[0]):
            cluster = clusters[-1]
            cluster[1] = end
            cluster[2] += text
            continue
        clusters.append([start, end, text])
    for start, end, text in clusters:
        for unit in fold_text(text):
            units.append(unit)
            starts.append(start)
            ends.append(end)
    return NormalizedText("".join(units), tuple(starts), tuple(ends), source)


def _annotation_payloads(text: str) -> list[tuple[int, int]]:
    return [
        (token.reading_start - 1, token.end)
        for token in parse(text)
        if isinstance(token, AnnotatedRun)
    ]


def normalize_plain(text: str, *, fold: bool = True) -> NormalizedText:
    """Normalize raw subtitle text, dropping ``[reading]`` payloads."""
    payloads = _annotation_payloads(text)

    def _chars() -> Iterable[SourceChar]:
        payload_idx = 0
        for idx, ch in enumerate(text):
            while payload_idx < len(payloads) and payloads[payload_idx][1] <= idx:
                payload_idx += 1
            if payload_idx < len(payloads) and payloads[payload_idx][0] <= idx:
                continue
            yield idx, idx + 1, ch

    return normalize_chars(_chars(), text, fold=fold)


def normalize_markup(
    markup: str,
    *,
    fold: bool = True,
    scan: MarkupScan | None = None,
) -> NormalizedText | None:
    """
    Normalize the visible text of ruby markup.

    Tags and reading containers contribute nothing; offsets point into
    ``markup``. Returns ``None`` when the markup cannot be scanned.
    """
    if scan is None:
        scan = scan_markup(markup)
    if scan is None:
        return None
    chars = ((ch.start, ch.end, ch.text) for ch in scan.visible_chars() if not ch.in_reading)
    return normalize_chars(chars, markup, fold=fold)


def normalize_query(query: str) -> str:
    return normalize_plain(query).text
