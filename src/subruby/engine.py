from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from bs4 import BeautifulSoup

from .config import DEFAULT_CONFIG, RenderConfig
from .highlight import (
    find_partial_groups,
    find_reading_groups,
    locate_mixed,
    project_markup,
    project_plain,
)
from .locate import MatchSpan, locate, locate_casefold, locate_plain
from .markup import READING_TAGS, scan_markup
from .normalize import normalize_markup, normalize_plain, normalize_query
from .parser import parse
from .render import render
from .scripts import canonical_language
from .tokens import AnnotatedRun

__all__ = [
    "AnnotationInputError",
    "MatchKind",
    "RenderResult",
    "annotate_and_highlight",
]

logger = logging.getLogger(__name__)

MatchKind = Literal["text", "reading", "mixed"]


class AnnotationInputError(TypeError):
    """Raised when the caller passes a value of the wrong type."""


@dataclass(frozen=True)
class RenderResult:
    """Escaped subtitle markup ready to be placed into a page."""

    markup: str
    language: str = ""
    highlighted: bool = False
    match_kind: MatchKind | None = None
    spans: tuple[MatchSpan, ...] = ()
    highlight_tag: str = DEFAULT_CONFIG.highlight_tag

    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.markup, "html.parser")

    def visible_text(self) -> str:
        """Displayed base text, with readings left out."""
        soup = self.soup()
        for node in soup.find_all(list(READING_TAGS)):
            node.decompose()
        return soup.get_text()

    def readings(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for ruby in self.soup().find_all("ruby"):
            rbs = ruby.find_all("rb", recursive=False)
            base = "".join(rb.get_text() for rb in rbs)
            reading = "".join(rt.get_text() for rt in ruby.find_all("rt", recursive=False))
            pairs.append((base, reading))
        return pairs

    def highlighted_text(self) -> list[str]:
        return [node.get_text() for node in self.soup().find_all(self.highlight_tag)]


def _check_types(subtitle_text: object, language_hint: object, query: object) -> None:
    if not isinstance(subtitle_text, str):
        raise AnnotationInputError(
            f"subtitle_text must be a str, not {type(subtitle_text).__name__}"
        )
    if language_hint is not None and not isinstance(language_hint, str):
        raise AnnotationInputError(
            f"language_hint must be a str or None, not {type(language_hint).__name__}"
        )
    if query is not None and not isinstance(query, str):
        raise AnnotationInputError(f"query must be a str or None, not {type(query).__name__}")


def _highlight_cjk_markup(
    markup: str, query: str, config: RenderConfig
) -> tuple[str, MatchKind | None, tuple[MatchSpan, ...]]:
    scan = scan_markup(markup)
    if scan is None:
        return markup, None, ()
    folded = normalize_query(query)
    if not folded:
        return markup, None, ()

    groups = find_reading_groups(markup, folded, scan=scan)
    if groups:
        projected = project_markup(markup, groups, via_reading=True, config=config, scan=scan)
        return projected, "reading", tuple(groups)

    haystack = normalize_markup(markup, scan=scan)
    span = locate(haystack, folded) if haystack is not None else None
    if span is not None:
        return project_markup(markup, [span], config=config, scan=scan), "text", (span,)

    span = locate_mixed(markup, folded, scan=scan)
    if span is not None:
        projected = project_markup(markup, [span], via_reading=True, config=config, scan=scan)
        return projected, "mixed", (span,)

    groups = find_partial_groups(markup, folded, scan=scan)
    if groups:
        projected = project_markup(markup, groups, via_reading=True, config=config, scan=scan)
        return projected, "mixed", tuple(groups)
    return markup, None, ()


def _highlight_markup(
    markup: str, query: str, config: RenderConfig
) -> tuple[str, MatchKind | None, tuple[MatchSpan, ...]]:
    scan = scan_markup(markup)
    if scan is None:
        return markup, None, ()
    haystack = normalize_markup(markup, fold=False, scan=scan)
    span = locate_casefold(haystack, query) if haystack is not None else None
    if span is None:
        return markup, None, ()
    return project_markup(markup, [span], config=config, scan=scan), "text", (span,)


def annotate_and_highlight(
    subtitle_text: str,
    language_hint: str | None,
    query: str | None = None,
    *,
    config: RenderConfig | None = None,
) -> RenderResult:
    """
    Render ``base[reading]`` subtitle text as ruby markup and highlight ``query``.

    CJK languages are searched in folded form (width, Katakana/Hiragana,
    whitespace and case insensitive); a query that matches a ruby reading
    highlights the whole annotated word. Other languages use a plain
    case-insensitive search. A query that is not found leaves the render
    unhighlighted.
    """
    _check_types(subtitle_text, language_hint, query)
    config = config or DEFAULT_CONFIG
    language = canonical_language(language_hint)
    tokens = parse(subtitle_text)
    markup = render(tokens, language, config)

    def _result(text: str, kind: MatchKind | None = None, spans: tuple[MatchSpan, ...] = ()) -> RenderResult:
        return RenderResult(
            markup=text,
            language=language,
            highlighted=kind is not None,
            match_kind=kind,
            spans=spans,
            highlight_tag=config.highlight_tag,
        )

    needle = (query or "").strip()
    if not needle:
        return _result(markup)

    cjk = config.is_cjk(language)
    annotated = any(isinstance(token, AnnotatedRun) for token in tokens)
    if not annotated:
        if cjk:
            span = locate(normalize_plain(subtitle_text), normalize_query(needle))
        else:
            span = locate_plain(subtitle_text, needle)
        if span is None:
            logger.debug("No match for %r in %r", needle, subtitle_text)
            return _result(markup)
        return _result(project_plain(subtitle_text, span, config), "text", (span,))

    if cjk:
        projected, kind, spans = _highlight_cjk_markup(markup, needle, config)
    else:
        projected, kind, spans = _highlight_markup(markup, needle, config)
    if kind is None:
        logger.debug("No match for %r in %r", needle, markup)
    return _result(projected, kind, spans)
